from __future__ import annotations

"""
Import Resolution Helpers.

Pure path policy used by the walker: classification of module specifiers,
on-disk resolution of local imports, package name extraction for external
imports, and conversion of real paths into virtual paths.
"""

import hashlib
import os
import posixpath
from typing import Iterator, Optional, Sequence

from composter.domain.constants import (
    ALIAS_PREFIX,
    COLLISION_DIGEST_LENGTH,
    EXTERNAL_PREFIX,
    INDEX_BASENAME,
    RESOLVE_EXTENSIONS,
    VIRTUAL_SEPARATOR,
)
from composter.infra.fs import to_posix

# -----------------------------------------------------------------------------
# SPECIFIER CLASSIFICATION
# -----------------------------------------------------------------------------

def is_relative(specifier: str) -> bool:
    """Relative specifiers start with a dot ('./x', '../x', '.')."""
    return specifier.startswith(".")


def is_alias(specifier: str, alias_prefix: str = ALIAS_PREFIX) -> bool:
    """Alias specifiers start with the project alias marker ('@/x')."""
    return specifier.startswith(alias_prefix)


def package_name(specifier: str) -> str:
    """
    Extract the installable package name from an external specifier.

    '@radix-ui/react-slot/dist/x' -> '@radix-ui/react-slot'
    'lodash/debounce'             -> 'lodash'
    """
    parts = specifier.split("/")
    if specifier.startswith("@") and len(parts) > 1:
        return f"{parts[0]}/{parts[1]}"
    return parts[0]

# -----------------------------------------------------------------------------
# LOCAL RESOLUTION
# -----------------------------------------------------------------------------

def iter_candidates(base: str, extensions: Sequence[str] = RESOLVE_EXTENSIONS) -> Iterator[str]:
    """
    Yield candidate file paths for an extensionless import, in priority order.

    1. The literal path.
    2. The literal path with each extension appended.
    3. The literal path as a directory, with 'index<ext>' for each extension.
    """
    yield base
    for ext in extensions:
        yield base + ext
    for ext in extensions:
        yield os.path.join(base, INDEX_BASENAME + ext)


def resolve_local_import(
        base_dir: str,
        specifier: str,
        extensions: Sequence[str] = RESOLVE_EXTENSIONS,
) -> Optional[str]:
    """
    Resolve a local import against 'base_dir'.

    Args:
        base_dir: Directory the specifier is relative to.
        specifier: Import path with any alias marker already stripped.
        extensions: Ordered extensions to try.

    Returns:
        Optional[str]: Absolute path of the first existing candidate file,
                       or None when nothing matches.
    """
    base = os.path.normpath(os.path.join(base_dir, specifier))
    for candidate in iter_candidates(base, extensions):
        if os.path.isfile(candidate):
            return candidate
    return None

# -----------------------------------------------------------------------------
# VIRTUAL PATHS
# -----------------------------------------------------------------------------

def virtual_path(file_path: str, root: str) -> str:
    """
    Convert an absolute file path into a root-relative virtual path.

    Files outside the root have their leading '..' segments collapsed into
    '_external/', so '../shared/util.js' becomes '/_external/shared/util.js'.
    Files on a different drive than the root (Windows) fall under
    '_external/' with their drive stripped.
    """
    try:
        rel = to_posix(os.path.relpath(file_path, root))
    except ValueError:
        _, tail = os.path.splitdrive(file_path)
        return VIRTUAL_SEPARATOR + EXTERNAL_PREFIX + to_posix(tail).lstrip("/")

    segments = rel.split("/")
    if segments[0] == "..":
        while segments and segments[0] == "..":
            segments.pop(0)
        rel = EXTERNAL_PREFIX + "/".join(segments)

    return VIRTUAL_SEPARATOR + rel


def disambiguate(vpath: str, file_path: str) -> str:
    """
    Derive a unique virtual path for a file whose natural one is taken.

    A short SHA-1 digest of the real path is inserted before the extension:
    '/_external/util.js' -> '/_external/util.1a2b3c4d.js'.
    """
    digest = hashlib.sha1(file_path.encode("utf-8")).hexdigest()[:COLLISION_DIGEST_LENGTH]
    stem, ext = posixpath.splitext(vpath)
    return f"{stem}.{digest}{ext}"
