"""Shared test fixtures for libforge."""

from __future__ import annotations

import io
import tarfile
from collections.abc import Callable
from pathlib import Path

import pytest

from libforge.config import LibforgeSettings
from libforge.core.config_store import ConfigStore
from libforge.core.publisher import ArtifactPublisher
from libforge.core.workdir import WorkdirManager

DEMO_MANIFEST = """\
name: demo
version: 1.0
build: printf 'demo-library-bytes' > libdemo.so && chmod 755 libdemo.so
install: cp libdemo.so "$PREFIX/libdemo.so" && chmod 755 "$PREFIX/libdemo.so"
"""


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def settings(tmp_dir: Path) -> LibforgeSettings:
    """Settings rooted in a temp directory, with short timeouts."""
    return LibforgeSettings(
        root=tmp_dir / "root",
        registry_url="https://registry.invalid/registry",
        command_timeout=60.0,
        network_timeout=5.0,
    )


@pytest.fixture
def config_store(settings: LibforgeSettings) -> ConfigStore:
    """Provide a fresh ConfigStore in the temp root."""
    return ConfigStore(settings.config_path)


@pytest.fixture
def workdirs(settings: LibforgeSettings) -> WorkdirManager:
    """Provide a WorkdirManager over the temp root."""
    return WorkdirManager(settings.work_root, settings.pkg_root)


@pytest.fixture
def publisher(settings: LibforgeSettings) -> ArtifactPublisher:
    """Provide an ArtifactPublisher over the temp root's libs/."""
    return ArtifactPublisher(settings.libs_root)


# ---------------------------------------------------------------------------
# Archive and source-tree factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_archive(tmp_dir: Path) -> Callable[..., Path]:
    """Factory fixture: build a .tar.gz from a ``{relative_path: text}`` mapping.

    Paths are stored verbatim, so callers choose the top-level layout.
    """

    def _factory(filename: str, files: dict[str, str]) -> Path:
        archive = tmp_dir / filename
        with tarfile.open(archive, "w:gz") as tar:
            dirs: set[str] = set()
            for rel in files:
                parts = rel.split("/")[:-1]
                for i in range(1, len(parts) + 1):
                    dirs.add("/".join(parts[:i]))
            for d in sorted(dirs):
                info = tarfile.TarInfo(d)
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
            for rel, text in files.items():
                data = text.encode("utf-8")
                info = tarfile.TarInfo(rel)
                info.size = len(data)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(data))
        return archive

    return _factory


@pytest.fixture
def demo_archive(make_archive: Callable[..., Path]) -> Path:
    """``demo-1.0.tar.gz`` containing ``demo-1.0/manifest`` for a trivial build."""
    return make_archive("demo-1.0.tar.gz", {"demo-1.0/manifest": DEMO_MANIFEST})


@pytest.fixture
def make_source_dir(tmp_dir: Path) -> Callable[..., Path]:
    """Factory fixture: write a manifest into a fresh source directory."""

    def _factory(manifest_text: str, name: str = "src") -> Path:
        source = tmp_dir / name
        source.mkdir(parents=True, exist_ok=True)
        (source / "manifest").write_text(manifest_text, encoding="utf-8")
        return source

    return _factory
