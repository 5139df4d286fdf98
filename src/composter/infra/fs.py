from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path manipulation and the low-level read/write
primitives shared by the crawler and the unpacker. Acts as an abstraction
over the 'os' module to ensure uniform behavior across Windows and
Unix-like systems.
"""

import os
# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "Composter"
UNIX_APP_DIR_NAME = ".composter"
TEXT_ENCODING = "utf-8"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/Composter
    - Linux/Mac: ~/.composter

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)


def canonical_path(path: str) -> str:
    """Return the absolute, symlink-free spelling of a path."""
    return os.path.realpath(os.path.abspath(path))


def to_posix(rel_path: str) -> str:
    """Convert host separators to forward slashes."""
    return rel_path.replace(os.sep, "/") if os.sep != "/" else rel_path

# -----------------------------------------------------------------------------
# READ / WRITE API
# -----------------------------------------------------------------------------

def read_text(file_path: str) -> str:
    """
    Read a whole source file as text.

    Line endings are kept as stored on disk. Undecodable byte sequences are
    replaced rather than raising, so a stray binary asset never interrupts
    a crawl.
    """
    with open(file_path, "r", encoding=TEXT_ENCODING, errors="replace", newline="") as f:
        return f.read()


def write_text(file_path: str, content: str) -> None:
    """
    Write text to disk, creating missing parent directories.

    Existing files are overwritten. OS errors propagate to the caller.
    """
    parent = os.path.dirname(os.path.abspath(file_path))
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(file_path, "w", encoding=TEXT_ENCODING, newline="") as f:
        f.write(content)


def is_within(path: str, directory: str) -> bool:
    """Check whether 'path' lies inside 'directory' (or is the directory itself)."""
    path_abs = os.path.abspath(path)
    dir_abs = os.path.abspath(directory)
    try:
        return os.path.commonpath([path_abs, dir_abs]) == dir_abs
    except ValueError:
        # Different drives on Windows
        return False
