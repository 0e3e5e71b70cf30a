"""Workdir Manager — ephemeral build directories and permanent install directories.

Layout under the root::

    work/<name>-<random>/      one per install attempt, removed afterwards
    pkg/<name>-<version>/      one per name/version, wiped on reinstall
"""

from __future__ import annotations

import logging
import re
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._+-]")


def _safe_component(value: str) -> str:
    cleaned = _UNSAFE_CHARS.sub("_", value).strip(".")
    return cleaned or "pkg"


class WorkdirManager:
    """Allocates working and install directories beneath two roots.

    Parameters
    ----------
    work_root:
        Parent of ephemeral per-attempt directories.
    pkg_root:
        Parent of per-(name, version) install directories.
    keep_workdirs:
        When True, working directories survive the ``workspace`` block.
    """

    def __init__(self, work_root: Path, pkg_root: Path, *, keep_workdirs: bool = False) -> None:
        self.work_root = Path(work_root)
        self.pkg_root = Path(pkg_root)
        self.keep_workdirs = keep_workdirs

    def create_workdir(self, name: str) -> Path:
        """Create a uniquely named directory for one install attempt."""
        self.work_root.mkdir(parents=True, exist_ok=True)
        path = Path(tempfile.mkdtemp(prefix=f"{_safe_component(name)}-", dir=self.work_root))
        logger.debug("Created workdir %s", path)
        return path

    def remove_workdir(self, path: Path) -> None:
        shutil.rmtree(path, ignore_errors=True)
        logger.debug("Removed workdir %s", path)

    @contextmanager
    def workspace(self, name: str) -> Iterator[Path]:
        """Yield a fresh workdir and remove it on every exit path."""
        path = self.create_workdir(name)
        try:
            yield path
        finally:
            if self.keep_workdirs:
                logger.info("Keeping workdir %s", path)
            else:
                self.remove_workdir(path)

    def install_dir_for(self, name: str, version: str) -> Path:
        return self.pkg_root / f"{_safe_component(name)}-{_safe_component(version)}"

    def create_install_dir(self, name: str, version: str) -> Path:
        """Wipe and recreate the install directory for *name*/*version*."""
        path = self.install_dir_for(name, version)
        if path.exists():
            logger.info("Replacing existing install at %s", path)
            shutil.rmtree(path)
        path.mkdir(parents=True)
        return path

    def list_install_dirs(self) -> list[Path]:
        if not self.pkg_root.is_dir():
            return []
        return sorted(p for p in self.pkg_root.iterdir() if p.is_dir())
