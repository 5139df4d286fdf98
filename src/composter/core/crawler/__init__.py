from __future__ import annotations

from .root_locator import locate_root
from .scanner import ImportScanner, scan_imports
from .walker import crawl

__all__ = [
    "crawl",
    "locate_root",
    "scan_imports",
    "ImportScanner",
]
