from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of CLI preferences and of the session token
using JSON files in the user data directory, with default fallback.
Environment variables take precedence over anything stored on disk.
"""

import json
import logging
import math
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from composter.domain.constants import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, SESSION_LIFETIME_DAYS
from composter.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE = os.path.join(get_user_data_dir(), "config.json")
SESSION_FILE = os.path.join(get_user_data_dir(), "session.json")
CURRENT_CONFIG_VERSION = "1.0.0"

EDITABLE_KEYS = ("base_url", "timeout")
BASE_URL_ENV_VARS = ("COMPOSTER_BASE_URL", "BASE_URL")
TOKEN_ENV_VAR = "COMPOSTER_TOKEN"


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default CLI configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        "version": CURRENT_CONFIG_VERSION,
        "base_url": DEFAULT_BASE_URL,
        "timeout": DEFAULT_TIMEOUT,
    }

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config() -> Dict[str, Any]:
    """
    Load the CLI configuration from disk, merged over the defaults.

    Returns:
        Dict[str, Any]: The loaded configuration or defaults on failure.
    """
    config = get_default_config()

    if not os.path.exists(CONFIG_FILE):
        logger.debug("Config file not found. Returning defaults.")
        return config

    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Using defaults.")
        return config

    config.update({k: v for k, v in data.items() if k in config and v is not None})
    config["version"] = CURRENT_CONFIG_VERSION
    config["timeout"] = _valid_timeout(config["timeout"])
    return config


def save_config(config: Dict[str, Any]) -> None:
    """
    Persist the CLI configuration to disk.

    Args:
        config: The configuration dictionary to save.
    """
    try:
        os.makedirs(os.path.dirname(CONFIG_FILE), exist_ok=True)
        payload = dict(config)
        payload["version"] = CURRENT_CONFIG_VERSION
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {CONFIG_FILE}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")


def update_config(key: str, raw_value: str) -> Dict[str, Any]:
    """
    Validate one setting given on the command line and persist it.

    Args:
        key: One of EDITABLE_KEYS.
        raw_value: Value as typed by the user.

    Returns:
        Dict[str, Any]: The configuration as saved.

    Raises:
        ValueError: Unknown key or invalid value.
    """
    if key not in EDITABLE_KEYS:
        raise ValueError(f"Unknown setting '{key}'. Choose from: {', '.join(EDITABLE_KEYS)}")

    value: Any = raw_value.strip()
    if key == "timeout":
        try:
            value = float(value)
        except ValueError:
            raise ValueError(f"Timeout must be a number of seconds, got '{raw_value}'") from None
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"Timeout must be positive, got '{raw_value}'")
    elif not value.startswith(("http://", "https://")):
        raise ValueError(f"Base URL must start with http:// or https://, got '{raw_value}'")
    else:
        value = value.rstrip("/")

    config = load_config()
    config[key] = value
    save_config(config)
    return config


def resolve_base_url(override: Optional[str] = None) -> str:
    """
    Pick the Vault Service base URL.

    Precedence: explicit override, COMPOSTER_BASE_URL, BASE_URL, config
    file, built-in default. Trailing slashes are stripped.
    """
    candidates = [override]
    candidates.extend(os.environ.get(var) for var in BASE_URL_ENV_VARS)
    candidates.append(load_config().get("base_url"))
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip().rstrip("/")
    return DEFAULT_BASE_URL

# -----------------------------------------------------------------------------
# Session Storage
# -----------------------------------------------------------------------------
def load_session() -> Optional[Dict[str, Any]]:
    """
    Load the stored session.

    Returns None when no session exists, when the file is corrupt, or when
    its 'expiresAt' timestamp lies in the past.
    """
    if not os.path.exists(SESSION_FILE):
        return None

    try:
        with open(SESSION_FILE, "r", encoding="utf-8") as f:
            session = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable session file: {e}")
        return None

    if not isinstance(session, dict) or not session.get("jwt"):
        return None

    if _is_expired(session.get("expiresAt")):
        logger.debug("Stored session has expired.")
        return None

    return session


def save_session(session: Dict[str, Any]) -> None:
    """Persist a session obtained elsewhere (e.g. by a web login)."""
    os.makedirs(os.path.dirname(SESSION_FILE), exist_ok=True)
    with open(SESSION_FILE, "w", encoding="utf-8") as f:
        json.dump(session, f, ensure_ascii=False, indent=2)


def store_token(jwt: str, lifetime_days: int = SESSION_LIFETIME_DAYS) -> Dict[str, Any]:
    """
    Save a token copied from the dashboard as the current session.

    Args:
        jwt: Bearer token.
        lifetime_days: Days until the session is treated as expired.

    Returns:
        Dict[str, Any]: The stored session record.
    """
    now = datetime.now(timezone.utc)
    session = {
        "jwt": jwt,
        "createdAt": now.isoformat().replace("+00:00", "Z"),
        "expiresAt": (now + timedelta(days=lifetime_days)).isoformat().replace("+00:00", "Z"),
    }
    save_session(session)
    return session


def clear_session() -> None:
    """Remove the stored session, if any."""
    try:
        os.remove(SESSION_FILE)
    except FileNotFoundError:
        pass


def resolve_token() -> Optional[str]:
    """Return the bearer token: COMPOSTER_TOKEN first, then the stored session."""
    env_token = os.environ.get(TOKEN_ENV_VAR)
    if env_token:
        return env_token
    session = load_session()
    return session.get("jwt") if session else None


def _valid_timeout(value: Any) -> float:
    """Coerce a stored timeout to a positive float, or fall back to the default."""
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        timeout = 0.0
    if isinstance(value, bool) or not math.isfinite(timeout) or timeout <= 0:
        logger.warning(f"Ignoring invalid timeout {value!r} in config. Using {DEFAULT_TIMEOUT}s.")
        return float(DEFAULT_TIMEOUT)
    return timeout


def _is_expired(expires_at: Any) -> bool:
    """Check an ISO-8601 expiry stamp; unparseable values count as not expired."""
    if not expires_at or not isinstance(expires_at, str):
        return False
    try:
        stamp = datetime.fromisoformat(expires_at.replace("Z", "+00:00"))
    except ValueError:
        return False
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp <= datetime.now(timezone.utc)
