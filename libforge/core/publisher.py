"""Artifact Publisher — content-addressed links to built shared libraries.

Layout: {libs_root}/{sha1(content)}-{filename}.so -> {install_dir}/{filename}

Byte-identical libraries from different installs converge on the same
digest prefix; if the content changes, so does the published name.
Existing links of the same name are replaced atomically, and links left
by an earlier install of the same directory are removed first.
"""

from __future__ import annotations

import logging
import os
import re
import stat
from pathlib import Path

from libforge.core.errors import PublishError
from libforge.core.hasher import sha1_file
from libforge.core.locking import atomic_symlink, exclusive_lock
from libforge.models.results import PublishedArtifact

logger = logging.getLogger(__name__)

# libfoo.so, libfoo.so.1, libfoo.so.1.2.3, libfoo.dylib
SHARED_LIBRARY_PATTERN = re.compile(r"\.so(\.\d+)*$|\.dylib$")
_PUBLISHED_NAME = re.compile(r"^(?P<sha1>[0-9a-f]{40})-(?P<filename>.+)\.so$")
_EXECUTABLE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def is_shared_library(path: Path) -> bool:
    """True for regular files named like a shared library and marked executable."""
    return (
        bool(SHARED_LIBRARY_PATTERN.search(path.name))
        and path.is_file()
        and bool(path.stat().st_mode & _EXECUTABLE_BITS)
    )


def published_name(sha1: str, filename: str) -> str:
    return f"{sha1}-{filename}.so"


class ArtifactPublisher:
    """Publishes shared libraries from install directories into ``libs_root``.

    Parameters
    ----------
    libs_root:
        The shared library namespace directory.
    """

    def __init__(self, libs_root: Path) -> None:
        self._libs_root = Path(libs_root)
        self._lock_path = self._libs_root / ".lock"

    @property
    def libs_root(self) -> Path:
        return self._libs_root

    def scan(self, install_dir: Path) -> list[Path]:
        """Top-level shared libraries in *install_dir*, sorted by name."""
        return sorted(p for p in Path(install_dir).iterdir() if is_shared_library(p))

    def publish(self, install_dir: Path) -> list[PublishedArtifact]:
        """Link every shared library in *install_dir* under its content hash."""
        candidates = self.scan(install_dir)
        published: list[PublishedArtifact] = []
        try:
            self._libs_root.mkdir(parents=True, exist_ok=True)
            with exclusive_lock(self._lock_path):
                self._unlink_stale(install_dir)
                for path in candidates:
                    target = path.resolve()
                    digest = sha1_file(target)
                    link = self._libs_root / published_name(digest, path.name)
                    atomic_symlink(target, link)
                    published.append(
                        PublishedArtifact(
                            link_path=link,
                            target=target,
                            sha1=digest,
                            filename=path.name,
                        )
                    )
                    logger.info("Published %s -> %s", link.name, target)
        except OSError as exc:
            raise PublishError(f"Cannot publish libraries from {install_dir}: {exc}") from exc
        if not published:
            logger.info("No shared libraries to publish in %s", install_dir)
        return published

    def _unlink_stale(self, install_dir: Path) -> None:
        """Remove links into *install_dir* left by a previous install of it.

        Called under the lock. A reinstall may change library bytes in
        place, which would leave an old digest name pointing at new content.
        """
        install_root = Path(install_dir).resolve()
        for link in self._libs_root.iterdir():
            if not link.is_symlink() or _PUBLISHED_NAME.match(link.name) is None:
                continue
            if Path(os.readlink(link)).parent == install_root:
                link.unlink()
                logger.debug("Removed stale link %s", link.name)

    def list_published(self) -> list[PublishedArtifact]:
        """Every content-addressed link currently in ``libs_root``."""
        if not self._libs_root.is_dir():
            return []
        artifacts: list[PublishedArtifact] = []
        for link in sorted(self._libs_root.iterdir()):
            match = _PUBLISHED_NAME.match(link.name)
            if match is None or not link.is_symlink():
                continue
            artifacts.append(
                PublishedArtifact(
                    link_path=link,
                    target=Path(os.readlink(link)),
                    sha1=match.group("sha1"),
                    filename=match.group("filename"),
                )
            )
        return artifacts
