from __future__ import annotations

"""
Bundle Unpacker.

Structural inverse of the crawler's file collection: writes every virtual
file of a component bundle under a target directory, then cross-checks
the bundle's dependencies against the caller's local package.json.

Writes are destructive: existing files are overwritten without prompting.
Write failures propagate, since a partially written bundle is corrupt.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from composter.core.manifest import load_manifest
from composter.domain.constants import LEGACY_DEFAULT_EXTENSION, VIRTUAL_SEPARATOR
from composter.domain.errors import UnsafeBundlePathError
from composter.domain.models import (
    ComponentBundle,
    DependencyMap,
    DependencyReport,
    UnpackResult,
    VirtualFileMap,
)
from composter.infra.fs import is_within, write_text

logger = logging.getLogger(__name__)


# ==============================================================================
# PUBLIC API
# ==============================================================================

def unpack(
        bundle: ComponentBundle,
        target_dir: str,
        *,
        manifest_dir: Optional[str] = None,
) -> UnpackResult:
    """
    Write a component bundle to disk.

    Args:
        bundle: Component as returned by the Vault Service.
        target_dir: Destination directory. For legacy single-file bundles
                    it may instead name the destination file.
        manifest_dir: Directory holding the package.json to check
                      dependencies against. Defaults to the working directory.

    Returns:
        UnpackResult: Written paths and the dependency report.

    Raises:
        UnsafeBundlePathError: A virtual path escapes the destination.
        OSError: A directory or file could not be written.
    """
    target_abs = os.path.abspath(target_dir)
    files, legacy = parse_virtual_files(bundle.code, bundle.title, target_abs)

    write_root = target_abs
    if legacy and os.path.splitext(target_abs)[1]:
        write_root = os.path.dirname(target_abs)

    plan = _plan_writes(files, write_root)

    logger.info(f"Unpacking {len(plan)} file(s) into: {write_root}")
    os.makedirs(write_root, exist_ok=True)

    written: List[str] = []
    for rel_path, dest, content in plan:
        write_text(dest, content)
        written.append(rel_path)
        logger.debug(f"Wrote {dest}")

    required = normalize_dependencies(bundle.dependencies)
    report = check_dependencies(required, manifest_dir or os.getcwd())

    return UnpackResult(
        target_dir=write_root,
        written=written,
        legacy=legacy,
        dependency_report=report,
    )


def parse_virtual_files(code: str, title: str, target_dir: str) -> Tuple[VirtualFileMap, bool]:
    """
    Decode a bundle's 'code' field.

    Multi-file bundles store a JSON object of virtual path to content.
    Anything else is a legacy single-file component: it is wrapped under
    the target's own filename when the target has an extension, otherwise
    under '<title>.jsx'.

    Returns:
        Tuple[VirtualFileMap, bool]: The files and whether the legacy
                                     fallback was used.
    """
    try:
        decoded = json.loads(code)
    except (TypeError, ValueError):
        decoded = None

    if isinstance(decoded, dict) and all(
            isinstance(k, str) and isinstance(v, str) for k, v in decoded.items()
    ):
        return decoded, False

    logger.debug("Component code is not a virtual file map; using single-file layout.")
    if os.path.splitext(target_dir)[1]:
        file_name = os.path.basename(target_dir)
    else:
        file_name = f"{title}{LEGACY_DEFAULT_EXTENSION}"
    return {VIRTUAL_SEPARATOR + file_name: code if isinstance(code, str) else str(code)}, True


def normalize_dependencies(value: Any) -> DependencyMap:
    """Accept a dependency map or its JSON encoding; malformed values become empty."""
    if value is None or value == "":
        return {}
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            logger.warning("Ignoring malformed dependency list in bundle.")
            return {}
    if not isinstance(value, dict):
        logger.warning("Ignoring malformed dependency list in bundle.")
        return {}
    return {str(k): str(v) for k, v in value.items()}


def check_dependencies(required: DependencyMap, manifest_dir: str) -> DependencyReport:
    """
    Compare required packages with those declared in a local package.json.

    Without a manifest, every package is reported as required and none as
    missing, since nothing can be verified.
    """
    manifest = load_manifest(manifest_dir)
    if not manifest.found:
        if required:
            logger.warning(f"No package.json in {manifest_dir}; cannot verify dependencies.")
        return DependencyReport(required=dict(required), manifest_found=False)

    installed = manifest.installed()
    missing = {name: ver for name, ver in required.items() if name not in installed}
    if missing:
        logger.warning(f"Missing dependencies: {', '.join(missing)}")
    return DependencyReport(required=dict(required), missing=missing, manifest_found=True)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _plan_writes(files: VirtualFileMap, write_root: str) -> List[Tuple[str, str, str]]:
    """
    Map every virtual path to a destination, rejecting unsafe ones up front.

    Returns:
        List of (relative path, absolute destination, content).
    """
    plan: List[Tuple[str, str, str]] = []
    seen: Dict[str, str] = {}
    for vpath, content in files.items():
        rel_path = vpath[1:] if vpath.startswith(VIRTUAL_SEPARATOR) else vpath
        dest = os.path.normpath(os.path.join(write_root, rel_path))
        if not rel_path or dest == write_root or not is_within(dest, write_root):
            raise UnsafeBundlePathError(vpath, write_root)
        if dest in seen:
            logger.warning(f"'{vpath}' and '{seen[dest]}' map to the same file; last one wins.")
        seen[dest] = vpath
        plan.append((rel_path, dest, content))
    return plan
