"""Tests for WorkdirManager — scoped workdirs and recreated install dirs."""

from __future__ import annotations

from pathlib import Path

import pytest

from libforge.core.workdir import WorkdirManager


class TestWorkspace:
    def test_workdirs_are_unique(self, workdirs: WorkdirManager):
        a = workdirs.create_workdir("demo")
        b = workdirs.create_workdir("demo")
        assert a != b
        assert a.parent == workdirs.work_root
        assert a.name.startswith("demo-")

    def test_removed_on_success(self, workdirs: WorkdirManager):
        with workdirs.workspace("demo") as path:
            (path / "file").write_text("x")
            assert path.is_dir()
        assert not path.exists()

    def test_removed_on_failure(self, workdirs: WorkdirManager):
        with pytest.raises(RuntimeError):
            with workdirs.workspace("demo") as path:
                raise RuntimeError("boom")
        assert not path.exists()

    def test_kept_when_requested(self, tmp_dir: Path):
        manager = WorkdirManager(tmp_dir / "work", tmp_dir / "pkg", keep_workdirs=True)
        with pytest.raises(RuntimeError):
            with manager.workspace("demo") as path:
                raise RuntimeError("boom")
        assert path.is_dir()

    def test_unsafe_name_is_sanitized(self, workdirs: WorkdirManager):
        path = workdirs.create_workdir("../evil name")
        assert path.parent == workdirs.work_root


class TestInstallDir:
    def test_keyed_by_name_and_version(self, workdirs: WorkdirManager):
        path = workdirs.create_install_dir("demo", "1.0")
        assert path == workdirs.pkg_root / "demo-1.0"
        assert path.is_dir()

    def test_reinstall_wipes_previous_contents(self, workdirs: WorkdirManager):
        path = workdirs.create_install_dir("demo", "1.0")
        (path / "stale.so").write_text("old")
        again = workdirs.create_install_dir("demo", "1.0")
        assert again == path
        assert list(again.iterdir()) == []

    def test_other_versions_untouched(self, workdirs: WorkdirManager):
        old = workdirs.create_install_dir("demo", "1.0")
        (old / "keep").write_text("x")
        workdirs.create_install_dir("demo", "2.0")
        assert (old / "keep").exists()
        assert workdirs.list_install_dirs() == [old, workdirs.pkg_root / "demo-2.0"]

    def test_list_without_pkg_root(self, workdirs: WorkdirManager):
        assert workdirs.list_install_dirs() == []
