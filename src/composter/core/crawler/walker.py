from __future__ import annotations

"""
Import Graph Walker.

Breadth-first traversal over the implicit graph of local imports, starting
at an entry file. Produces the virtual file map of every reachable
same-project file and the map of external packages they depend on.

The walk is cycle-safe: files are keyed by their canonical path in a
visited set, so 'A -> B -> A' terminates after reading each file once.
Nothing is executed and the filesystem is only read.
"""

import logging
import os
from collections import deque
from typing import Deque, Dict, List, Optional, Set

from composter.core.crawler.resolver import (
    disambiguate,
    is_alias,
    is_relative,
    package_name,
    resolve_local_import,
    virtual_path,
)
from composter.core.crawler.root_locator import locate_root
from composter.core.crawler.scanner import ImportScanner, scan_imports
from composter.core.manifest import PackageManifest, load_manifest
from composter.domain.constants import ALIAS_PREFIX, ALIAS_SOURCE_DIR
from composter.domain.models import (
    CrawlResult,
    CrawlWarning,
    DependencyMap,
    UnresolvedImport,
    VirtualFileMap,
)
from composter.infra.fs import canonical_path, read_text

logger = logging.getLogger(__name__)


# ==============================================================================
# PUBLIC API
# ==============================================================================

def crawl(
        entry_file: str,
        *,
        scanner: ImportScanner = scan_imports,
        alias_prefix: str = ALIAS_PREFIX,
        alias_dir: str = ALIAS_SOURCE_DIR,
) -> CrawlResult:
    """
    Collect an entry file and everything it transitively imports locally.

    Relative imports resolve against the importing file's directory, alias
    imports ('@/x') against '<root>/<alias_dir>'. Anything else is an
    external package: it is recorded with the version found in the
    project's package.json (or 'latest') and not traversed.

    Missing files, including the entry file itself, are logged and dropped;
    the crawl never aborts on graph-shape anomalies.

    Args:
        entry_file: Path of the component's entry source file.
        scanner: Function extracting module specifiers from source text.
        alias_prefix: Marker identifying project-alias imports.
        alias_dir: Directory under the project root the alias maps to.

    Returns:
        CrawlResult: Files, dependencies, and any warnings collected.
    """
    entry = canonical_path(entry_file)
    root = locate_root(os.path.dirname(entry))
    manifest = load_manifest(root)
    alias_base = os.path.join(root, alias_dir)

    acc = _CrawlAccumulator(root)
    queue: Deque[str] = deque([entry])
    visited: Set[str] = set()

    while queue:
        file_path = queue.popleft()
        if file_path in visited:
            continue

        if not os.path.isfile(file_path):
            acc.warn(file_path, "File not found")
            continue

        try:
            content = read_text(file_path)
        except OSError as e:
            acc.warn(file_path, f"Unreadable file: {e}")
            continue

        visited.add(file_path)
        vpath = acc.add_file(file_path, content)

        for specifier in scanner(content):
            if is_relative(specifier):
                target = resolve_local_import(os.path.dirname(file_path), specifier)
            elif is_alias(specifier, alias_prefix):
                target = resolve_local_import(alias_base, specifier[len(alias_prefix):])
            else:
                acc.add_dependency(specifier, manifest)
                continue

            if target is None:
                acc.unresolved_import(vpath, specifier)
                continue

            target = canonical_path(target)
            if target not in visited:
                queue.append(target)

    result = acc.freeze()
    logger.info(
        f"Crawl finished: {len(result.files)} file(s), "
        f"{len(result.dependencies)} external package(s)."
    )
    return result


# ==============================================================================
# TRAVERSAL STATE
# ==============================================================================

class _CrawlAccumulator:
    """
    Mutable builder threaded through one crawl.

    Owns the output maps while the walk runs; 'freeze' hands copies to an
    immutable CrawlResult so nothing is shared after return.
    """

    def __init__(self, root: str) -> None:
        self.root = root
        self.files: VirtualFileMap = {}
        self.dependencies: DependencyMap = {}
        self.warnings: List[CrawlWarning] = []
        self.unresolved: List[UnresolvedImport] = []
        self._owners: Dict[str, str] = {}

    def add_file(self, file_path: str, content: str) -> str:
        """Store content under its virtual path and return that path."""
        vpath = virtual_path(file_path, self.root)

        owner: Optional[str] = self._owners.get(vpath)
        if owner is not None and owner != file_path:
            unique = disambiguate(vpath, file_path)
            logger.warning(
                f"Virtual path collision on '{vpath}' ({owner} vs {file_path}); "
                f"storing the latter as '{unique}'."
            )
            vpath = unique

        self._owners[vpath] = file_path
        self.files[vpath] = content
        logger.debug(f"Bundled {vpath}")
        return vpath

    def add_dependency(self, specifier: str, manifest: PackageManifest) -> None:
        name = package_name(specifier)
        self.dependencies[name] = manifest.version_of(name)

    def unresolved_import(self, importer: str, specifier: str) -> None:
        logger.warning(f"Unresolved import '{specifier}' in {importer}; skipping.")
        self.unresolved.append(UnresolvedImport(importer=importer, specifier=specifier))

    def warn(self, file_path: str, message: str) -> None:
        logger.warning(f"{message}: {file_path}")
        self.warnings.append(CrawlWarning(path=file_path, message=message))

    def freeze(self) -> CrawlResult:
        return CrawlResult(
            root=self.root,
            files=dict(self.files),
            dependencies=dict(self.dependencies),
            warnings=list(self.warnings),
            unresolved=list(self.unresolved),
        )
