"""Tests for process settings — env-driven defaults and derived paths."""

from __future__ import annotations

from pathlib import Path

import pytest

from libforge.config import DEFAULT_REGISTRY_URL, LibforgeSettings


class TestLibforgeSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("LIBFORGE_ROOT", raising=False)
        settings = LibforgeSettings()
        assert settings.root == Path.home() / ".libforge"
        assert settings.registry_url == DEFAULT_REGISTRY_URL
        assert settings.toolchain_key == "rustc"
        assert settings.strict_tests is False
        assert settings.keep_workdir is False
        assert settings.log_level == "INFO"

    def test_derived_paths(self, tmp_dir: Path):
        settings = LibforgeSettings(root=tmp_dir)
        assert settings.config_path == tmp_dir / "config"
        assert settings.work_root == tmp_dir / "work"
        assert settings.pkg_root == tmp_dir / "pkg"
        assert settings.libs_root == tmp_dir / "libs"

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch, tmp_dir: Path):
        monkeypatch.setenv("LIBFORGE_ROOT", str(tmp_dir))
        monkeypatch.setenv("LIBFORGE_STRICT_TESTS", "true")
        monkeypatch.setenv("LIBFORGE_COMMAND_TIMEOUT", "90")
        settings = LibforgeSettings()
        assert settings.root == tmp_dir
        assert settings.strict_tests is True
        assert settings.command_timeout == 90.0
