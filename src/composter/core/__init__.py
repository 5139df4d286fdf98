from __future__ import annotations

from .crawler import crawl, locate_root
from .manifest import PackageManifest, load_manifest
from .unpacker import check_dependencies, unpack

__all__ = [
    "crawl",
    "locate_root",
    "unpack",
    "check_dependencies",
    "load_manifest",
    "PackageManifest",
]
