from __future__ import annotations

"""
Network Communication Infrastructure.

Exposes the Vault Service client used by the CLI.
"""

from composter.infra.network.vault_client import VaultClient

__all__ = [
    "VaultClient",
]
