from __future__ import annotations

"""
Domain Exceptions.

Only terminal conditions are modeled as exceptions. Traversal anomalies
(missing import targets, unreadable manifests) are absorbed by the crawler
and surfaced as warnings on the result instead.
"""

from typing import Optional


class ComposterError(Exception):
    """Base class for every error raised by composter."""


class UnsafeBundlePathError(ComposterError):
    """A virtual path in a bundle would be written outside the target directory."""

    def __init__(self, virtual_path: str, target_dir: str) -> None:
        super().__init__(
            f"Refusing to write '{virtual_path}': it resolves outside '{target_dir}'"
        )
        self.virtual_path = virtual_path
        self.target_dir = target_dir


class VaultError(ComposterError):
    """The Vault Service rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class VaultAuthError(VaultError):
    """The session token is missing, invalid or expired (HTTP 401)."""


class VaultNotFoundError(VaultError):
    """The requested category or component does not exist (HTTP 404)."""
