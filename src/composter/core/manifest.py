from __future__ import annotations

"""
Package Manifest Access.

Read-only view over a project's 'package.json'. Only the 'dependencies'
and 'devDependencies' sections are consulted. A missing, unreadable or
malformed manifest is never an error: it behaves as an empty one.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict

from composter.domain.constants import MANIFEST_FILENAME, MANIFEST_SECTIONS, VERSION_PLACEHOLDER
from composter.domain.models import DependencyMap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageManifest:
    """
    Version declarations of a local project.

    Attributes:
        path: Location the manifest was looked up at.
        found: Whether a manifest file exists at 'path'.
        dependencies: Production section.
        dev_dependencies: Development section.
    """
    path: str
    found: bool = False
    dependencies: DependencyMap = field(default_factory=dict)
    dev_dependencies: DependencyMap = field(default_factory=dict)

    def version_of(self, name: str) -> str:
        """Version for 'name': production first, then development, else 'latest'."""
        return (
            self.dependencies.get(name)
            or self.dev_dependencies.get(name)
            or VERSION_PLACEHOLDER
        )

    def installed(self) -> DependencyMap:
        """Union of both sections (production wins on conflicts)."""
        merged = dict(self.dev_dependencies)
        merged.update(self.dependencies)
        return merged


def load_manifest(directory: str) -> PackageManifest:
    """
    Load '<directory>/package.json'.

    Args:
        directory: Directory expected to hold the manifest.

    Returns:
        PackageManifest: Parsed manifest, or an empty one when absent,
                         unreadable or malformed.
    """
    path = os.path.join(directory, MANIFEST_FILENAME)
    if not os.path.isfile(path):
        return PackageManifest(path=path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable manifest '{path}': {e}")
        return PackageManifest(path=path, found=True)

    if not isinstance(data, dict):
        logger.warning(f"Ignoring malformed manifest '{path}': root is not an object")
        return PackageManifest(path=path, found=True)

    prod_key, dev_key = MANIFEST_SECTIONS
    return PackageManifest(
        path=path,
        found=True,
        dependencies=_section(data, prod_key),
        dev_dependencies=_section(data, dev_key),
    )


def _section(data: Dict[str, Any], key: str) -> DependencyMap:
    """Extract one name->version section, skipping non-string entries."""
    section = data.get(key)
    if not isinstance(section, dict):
        return {}
    return {str(k): v for k, v in section.items() if isinstance(v, str)}
