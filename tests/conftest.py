from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Isolation of the user data directory (config/session files) and of
   the environment variables the CLI reads.
3. A helper fixture to lay out small JavaScript projects on disk.
"""

import json
import os
import sys
from pathlib import Path
from typing import Callable, Dict, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def isolated_user_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    Redirect config and session files into a temporary directory and clear
    the environment variables that would otherwise leak into tests.
    """
    state_dir = tmp_path / "_user_state"
    state_dir.mkdir()
    monkeypatch.setattr("composter.domain.config.CONFIG_FILE", str(state_dir / "config.json"))
    monkeypatch.setattr("composter.domain.config.SESSION_FILE", str(state_dir / "session.json"))
    for var in ("COMPOSTER_BASE_URL", "BASE_URL", "COMPOSTER_TOKEN"):
        monkeypatch.delenv(var, raising=False)
    return state_dir


WriteTree = Callable[..., Path]


@pytest.fixture
def write_tree() -> WriteTree:
    """
    Return a helper that materializes {relative path: content} under a base
    directory, optionally adding a package.json with the given sections.
    """
    def _write(
            base: Path,
            files: Dict[str, str],
            manifest: Optional[Dict[str, Dict[str, str]]] = None,
    ) -> Path:
        base.mkdir(parents=True, exist_ok=True)
        for rel, content in files.items():
            path = base / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        if manifest is not None:
            payload = {"name": "fixture-app", "version": "1.0.0"}
            payload.update(manifest)
            (base / "package.json").write_text(json.dumps(payload), encoding="utf-8")
        return base

    return _write
