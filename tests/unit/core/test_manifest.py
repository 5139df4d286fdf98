from __future__ import annotations

"""
Unit tests for Package Manifest access.

Verifies version lookup priority and the silent recovery from missing or
malformed manifests.
"""

import json
import logging
from pathlib import Path

import pytest

from composter.core.manifest import load_manifest


def _write_manifest(directory: Path, payload: object) -> None:
    (directory / "package.json").write_text(json.dumps(payload), encoding="utf-8")


def test_missing_manifest_is_empty(tmp_path: Path) -> None:
    manifest = load_manifest(str(tmp_path))

    assert manifest.found is False
    assert manifest.installed() == {}
    assert manifest.version_of("react") == "latest"


def test_version_lookup_prefers_production_section(tmp_path: Path) -> None:
    _write_manifest(tmp_path, {
        "dependencies": {"clsx": "^2.0.0"},
        "devDependencies": {"clsx": "^1.0.0", "vitest": "^1.6.0"},
    })

    manifest = load_manifest(str(tmp_path))

    assert manifest.found is True
    assert manifest.version_of("clsx") == "^2.0.0"
    assert manifest.version_of("vitest") == "^1.6.0"
    assert manifest.version_of("react") == "latest"


def test_installed_is_union_of_sections(tmp_path: Path) -> None:
    _write_manifest(tmp_path, {
        "dependencies": {"react": "^18.2.0"},
        "devDependencies": {"typescript": "^5.4.0"},
    })

    installed = load_manifest(str(tmp_path)).installed()

    assert installed == {"react": "^18.2.0", "typescript": "^5.4.0"}


def test_malformed_json_recovers_as_empty(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    (tmp_path / "package.json").write_text("{ not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="composter"):
        manifest = load_manifest(str(tmp_path))

    assert manifest.found is True
    assert manifest.installed() == {}
    assert "unreadable manifest" in caplog.text


def test_non_object_root_recovers_as_empty(tmp_path: Path) -> None:
    _write_manifest(tmp_path, ["react"])

    manifest = load_manifest(str(tmp_path))

    assert manifest.found is True
    assert manifest.version_of("react") == "latest"


def test_non_mapping_sections_are_ignored(tmp_path: Path) -> None:
    _write_manifest(tmp_path, {
        "dependencies": ["react"],
        "devDependencies": {"eslint": "^9.0.0", "broken": 3},
    })

    manifest = load_manifest(str(tmp_path))

    assert manifest.dependencies == {}
    assert manifest.dev_dependencies == {"eslint": "^9.0.0"}


def test_sections_follow_manifest_constant(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_manifest(tmp_path, {"peerDependencies": {"react": "^18.0.0"}, "dependencies": {"react": "^17"}})
    monkeypatch.setattr("composter.core.manifest.MANIFEST_SECTIONS", ("peerDependencies", "devDependencies"))

    assert load_manifest(str(tmp_path)).version_of("react") == "^18.0.0"
