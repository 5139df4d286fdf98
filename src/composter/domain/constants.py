from __future__ import annotations

"""
Domain Constants.

Centralizes the conventions shared between the crawler, the unpacker and
the Vault Service client: manifest naming, resolution order, virtual path
layout and network defaults.
"""

from typing import Tuple

APP_VERSION = "0.3.0"

# -----------------------------------------------------------------------------
# PACKAGE MANIFEST
# -----------------------------------------------------------------------------
MANIFEST_FILENAME = "package.json"
MANIFEST_SECTIONS: Tuple[str, ...] = ("dependencies", "devDependencies")
VERSION_PLACEHOLDER = "latest"
INSTALL_COMMAND = "npm install"

# -----------------------------------------------------------------------------
# IMPORT RESOLUTION
# -----------------------------------------------------------------------------
# Order matters: the first existing candidate wins.
RESOLVE_EXTENSIONS: Tuple[str, ...] = (".tsx", ".ts", ".jsx", ".js", ".css")
INDEX_BASENAME = "index"
ALIAS_PREFIX = "@/"
ALIAS_SOURCE_DIR = "src"

# -----------------------------------------------------------------------------
# VIRTUAL FILE MAP
# -----------------------------------------------------------------------------
VIRTUAL_SEPARATOR = "/"
EXTERNAL_PREFIX = "_external/"
COLLISION_DIGEST_LENGTH = 8
LEGACY_DEFAULT_EXTENSION = ".jsx"

# -----------------------------------------------------------------------------
# VAULT SERVICE
# -----------------------------------------------------------------------------
DEFAULT_BASE_URL = "https://composter.vercel.app/api"
USER_AGENT = f"Composter-CLI/{APP_VERSION}"
DEFAULT_TIMEOUT = 10
SESSION_LIFETIME_DAYS = 30
