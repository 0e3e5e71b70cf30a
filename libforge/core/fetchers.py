"""Fetch strategies — populate a working directory with unpacked source.

One strategy per reference variant:

    GithubFetcher   git clone (+ checkout of the pinned commit)
    FileFetcher     extract a local tar archive
    UrlFetcher      download a tar archive over HTTP, then extract it
    UuidLookup      resolve a uuid through the registry table; fetches nothing

Archives must contain exactly one top-level directory; extraction strips
it so the package's ``manifest`` lands at the root of the working
directory.
"""

from __future__ import annotations

import logging
import posixpath
import shutil
import tarfile
from pathlib import Path, PurePosixPath
from typing import Protocol, runtime_checkable
from urllib.parse import urlparse

import requests

from libforge.core import kvfile
from libforge.core.errors import FetchError, UnresolvedReferenceError
from libforge.core.executor import run_command
from libforge.models.references import (
    FileRef,
    GithubRef,
    PackageReference,
    UrlRef,
    UuidRef,
    parse_reference,
)
from libforge.models.results import CommandResult

logger = logging.getLogger(__name__)

_DOWNLOAD_CHUNK = 1 << 16


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class SourceFetcher(Protocol):
    """A strategy that fills an empty working directory with package source."""

    def workdir_name(self, ref: PackageReference) -> str:
        """Name used as the prefix of the working directory."""
        ...

    def fetch(self, ref: PackageReference, workdir: Path) -> None:
        """Populate *workdir*; raise ``FetchError`` on any failure."""
        ...


# ---------------------------------------------------------------------------
# Archive extraction
# ---------------------------------------------------------------------------


def _parts(name: str) -> list[str]:
    return [p for p in PurePosixPath(name).parts if p not in ("", ".")]


def _strip_first(name: str) -> PurePosixPath | None:
    parts = _parts(name)
    if len(parts) <= 1:
        return None
    return PurePosixPath(*parts[1:])


def extract_archive(archive: Path, dest: Path) -> None:
    """Extract *archive* into *dest*, dropping its single top-level directory.

    Raises
    ------
    FetchError
        If the archive cannot be read, does not consist of exactly one
        top-level directory, or contains unsafe member paths.
    """
    try:
        tar = tarfile.open(archive, "r:*")
    except (tarfile.TarError, OSError) as exc:
        raise FetchError(f"Cannot open archive {archive}: {exc}") from exc

    with tar:
        members = tar.getmembers()
        roots = _top_level_names(members)
        if len(roots) != 1:
            raise FetchError(
                f"Archive {archive.name} must contain exactly one top-level "
                f"directory, found {sorted(roots) or 'none'}"
            )

        selected: list[tarfile.TarInfo] = []
        for member in members:
            stripped = _strip_first(member.name)
            if stripped is None:
                if not member.isdir():
                    raise FetchError(
                        f"Archive {archive.name} has a top-level file '{member.name}'"
                    )
                continue
            if stripped.is_absolute() or ".." in stripped.parts:
                raise FetchError(f"Unsafe path '{member.name}' in archive {archive.name}")
            member.name = str(stripped)
            if member.islnk():
                linked = _strip_first(member.linkname)
                if linked is None:
                    raise FetchError(f"Unsafe hard link '{member.linkname}' in {archive.name}")
                member.linkname = str(linked)
            elif member.issym() and _escapes(stripped, member.linkname):
                raise FetchError(
                    f"Symlink '{member.name}' -> '{member.linkname}' escapes archive {archive.name}"
                )
            selected.append(member)

        if not selected:
            raise FetchError(f"Archive {archive.name} is empty")

        dest.mkdir(parents=True, exist_ok=True)
        try:
            tar.extractall(dest, members=selected, filter="data")
        except (tarfile.TarError, OSError) as exc:
            raise FetchError(f"Cannot extract {archive.name}: {exc}") from exc

    logger.debug("Extracted %d entries from %s into %s", len(selected), archive, dest)


def _escapes(member: PurePosixPath, linkname: str) -> bool:
    if PurePosixPath(linkname).is_absolute():
        return True
    resolved = posixpath.normpath(posixpath.join(str(member.parent), linkname))
    return resolved == ".." or resolved.startswith("../")


def _top_level_names(members: list[tarfile.TarInfo]) -> set[str]:
    roots: set[str] = set()
    for member in members:
        parts = _parts(member.name)
        if parts:
            roots.add(parts[0])
    return roots


def _name_before_dot(filename: str) -> str:
    return filename.split(".", 1)[0] or "pkg"


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


class GithubFetcher:
    """Clones ``<base_url>/<user>/<repo>`` and checks out the pinned commit."""

    def __init__(
        self,
        base_url: str = "https://github.com",
        *,
        git: str = "git",
        timeout: float | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.git = git
        self.timeout = timeout

    def clone_url(self, ref: GithubRef) -> str:
        return f"{self.base_url}/{ref.slug}.git"

    def workdir_name(self, ref: GithubRef) -> str:
        return ref.repo

    def fetch(self, ref: GithubRef, workdir: Path) -> None:
        url = self.clone_url(ref)
        cmd = [self.git, "clone", "--quiet"]
        if ref.commit is None:
            cmd += ["--depth", "1"]
        cmd += [url, str(workdir)]

        logger.info("Cloning %s", url)
        result = run_command(cmd, timeout=self.timeout)
        if not result.ok:
            raise FetchError(f"git clone of {url} failed: {_last_line(result)}")

        if ref.commit:
            logger.info("Checking out %s", ref.commit)
            result = run_command(
                [self.git, "-C", str(workdir), "checkout", "--quiet", ref.commit],
                timeout=self.timeout,
            )
            if not result.ok:
                raise FetchError(
                    f"git checkout of {ref.commit} in {ref.slug} failed: "
                    f"{_last_line(result)}"
                )


class FileFetcher:
    """Extracts a local tar archive."""

    def workdir_name(self, ref: FileRef) -> str:
        return _name_before_dot(Path(ref.path).name)

    def fetch(self, ref: FileRef, workdir: Path) -> None:
        archive = Path(ref.path).expanduser()
        if not archive.is_file():
            raise FetchError(f"Archive not found: {archive}")
        if ref.commit:
            logger.warning(
                "Ignoring commit '%s' for archive %s: archives are not versioned",
                ref.commit,
                archive,
            )
        logger.info("Extracting %s", archive)
        extract_archive(archive, workdir)


class UrlFetcher:
    """Downloads an archive over HTTP(S) and extracts it."""

    def __init__(self, session: requests.Session | None = None, *, timeout: float | None = None) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    @staticmethod
    def filename(ref: UrlRef) -> str:
        path = urlparse(ref.url).path.rstrip("/")
        return path.rsplit("/", 1)[-1] or "download"

    def workdir_name(self, ref: UrlRef) -> str:
        return _name_before_dot(self.filename(ref))

    def fetch(self, ref: UrlRef, workdir: Path) -> None:
        download_dir = workdir / ".download"
        download_dir.mkdir(parents=True, exist_ok=True)
        archive = download_dir / self.filename(ref)

        logger.info("Downloading %s", ref.url)
        try:
            with self.session.get(ref.url, stream=True, timeout=self.timeout) as resp:
                resp.raise_for_status()
                with open(archive, "wb") as fh:
                    for chunk in resp.iter_content(chunk_size=_DOWNLOAD_CHUNK):
                        if chunk:
                            fh.write(chunk)
        except requests.exceptions.RequestException as exc:
            raise FetchError(f"Download of {ref.url} failed: {exc}") from exc

        if not archive.is_file() or archive.stat().st_size == 0:
            raise FetchError(f"No archive was downloaded from {ref.url}")

        try:
            extract_archive(archive, workdir)
        finally:
            shutil.rmtree(download_dir, ignore_errors=True)


class UuidLookup:
    """Resolves ``uuid:`` references through a flat ``<uuid>: <reference>`` table."""

    def __init__(
        self,
        registry_url: str,
        session: requests.Session | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        self.registry_url = registry_url
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_table(self) -> dict[str, str]:
        try:
            resp = self.session.get(self.registry_url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.RequestException as exc:
            raise FetchError(f"Registry lookup at {self.registry_url} failed: {exc}") from exc
        return kvfile.parse_text(resp.text)

    def lookup(self, ref: UuidRef) -> PackageReference:
        """Return the reference registered for *ref*, carrying over its commit."""
        table = self.fetch_table()
        target = table.get(ref.uuid)
        if not target:
            raise UnresolvedReferenceError(f"uuid '{ref.uuid}' is not in the registry")

        resolved = parse_reference(target)
        logger.info("uuid %s resolves to %s", ref.uuid, resolved)
        if ref.commit:
            if isinstance(resolved, UrlRef):
                logger.warning(
                    "Ignoring commit '%s' for %s: URL references are not versioned",
                    ref.commit,
                    resolved,
                )
            else:
                resolved = resolved.model_copy(update={"commit": ref.commit})
        return resolved


def _last_line(result: CommandResult) -> str:
    lines = [line for line in result.stderr.splitlines() if line.strip()]
    if lines:
        return lines[-1].strip()
    if result.timed_out:
        return "timed out"
    return f"exit status {result.returncode}"
