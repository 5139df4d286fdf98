from __future__ import annotations

"""
Component Domain Data Models.

Defines the Data Transfer Objects exchanged between the crawler, the
unpacker, the Vault Service client and the interface layer.

Virtual paths are always '/'-prefixed and use forward slashes regardless
of the host OS, e.g. '/src/Button.jsx'.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from composter.domain.constants import INSTALL_COMMAND

VirtualFileMap = Dict[str, str]
DependencyMap = Dict[str, str]

# -----------------------------------------------------------------------------
# CRAWL MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CrawlWarning:
    """
    A non-fatal anomaly met while walking the import graph.

    Attributes:
        path: Absolute path of the file concerned.
        message: Human readable description.
    """
    path: str
    message: str


@dataclass(frozen=True)
class UnresolvedImport:
    """
    A local import specifier that did not match any file on disk.

    Attributes:
        importer: Virtual path of the file containing the import.
        specifier: The module specifier as written in the source.
    """
    importer: str
    specifier: str


@dataclass(frozen=True)
class CrawlResult:
    """
    Outcome of a single crawl invocation.

    Attributes:
        root: Project root the virtual paths are anchored to.
        files: Virtual path to file content.
        dependencies: External package name to version specifier.
        warnings: Files that were dropped from the graph.
        unresolved: Local imports that resolved to nothing.
    """
    root: str
    files: VirtualFileMap = field(default_factory=dict)
    dependencies: DependencyMap = field(default_factory=dict)
    warnings: List[CrawlWarning] = field(default_factory=list)
    unresolved: List[UnresolvedImport] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when no file was dropped and every local import resolved."""
        return not self.warnings and not self.unresolved

    def to_bundle(self, title: str, category: str) -> ComponentBundle:
        """Serialize the crawled files into a pushable bundle."""
        return ComponentBundle(
            title=title,
            category=category,
            code=json.dumps(self.files, ensure_ascii=False),
            dependencies=dict(self.dependencies),
        )

# -----------------------------------------------------------------------------
# BUNDLE MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ComponentBundle:
    """
    A component as persisted by the Vault Service.

    Attributes:
        title: Component title, unique within its category.
        category: Category name.
        code: JSON-encoded VirtualFileMap, or a raw source string for
              components stored before multi-file support.
        dependencies: DependencyMap, or the same map JSON-encoded.
    """
    title: str
    category: str
    code: str
    dependencies: Union[DependencyMap, str, None] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> ComponentBundle:
        """
        Build a bundle from a Vault Service component record.

        The service nests the category as {'category': {'name': ...}} on
        list endpoints and may omit it entirely on single-component reads.
        """
        category = record.get("category") or ""
        if isinstance(category, Mapping):
            category = category.get("name", "")
        return cls(
            title=str(record.get("title") or ""),
            category=str(category),
            code=record.get("code") or "",
            dependencies=record.get("dependencies"),
        )

    def to_payload(self) -> Dict[str, Any]:
        """Render the request body expected by the push endpoint."""
        return {
            "title": self.title,
            "category": self.category,
            "code": self.code,
            "dependencies": self.dependencies or {},
        }

# -----------------------------------------------------------------------------
# UNPACK MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DependencyReport:
    """
    Cross-check of a bundle's dependencies against the local manifest.

    Attributes:
        required: Every dependency declared by the bundle.
        missing: Subset of 'required' absent from the local manifest.
        manifest_found: False when no local manifest exists; 'missing' is
                        then empty and only 'required' is meaningful.
    """
    required: DependencyMap = field(default_factory=dict)
    missing: DependencyMap = field(default_factory=dict)
    manifest_found: bool = False

    @property
    def install_command(self) -> Optional[str]:
        """Suggested command installing the missing packages, if any."""
        if not self.missing:
            return None
        return f"{INSTALL_COMMAND} {' '.join(self.missing)}"


@dataclass(frozen=True)
class UnpackResult:
    """
    Outcome of writing a bundle to disk.

    Attributes:
        target_dir: Directory the files were written under.
        written: Relative paths written, in bundle order.
        legacy: True when 'code' was a raw single-file string.
        dependency_report: Result of the manifest cross-check.
    """
    target_dir: str
    written: List[str] = field(default_factory=list)
    legacy: bool = False
    dependency_report: DependencyReport = field(default_factory=DependencyReport)
