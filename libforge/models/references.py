"""Package reference variants and the reference-string parser.

Grammar::

    github:<user>/<repo>[@<commit>]
    file:<path>[@<commit>]
    uuid:<uuid>[@<commit>]
    <anything containing "://">

The commit suffix is split on the first ``@``. Parsing is total: a string
either yields exactly one variant or raises ``UnresolvedReferenceError``.
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict

from libforge.core.errors import UnresolvedReferenceError

GITHUB_PREFIX = "github:"
FILE_PREFIX = "file:"
UUID_PREFIX = "uuid:"
SCHEME_SEPARATOR = "://"


class GithubRef(BaseModel):
    """A repository hosted on GitHub, optionally pinned to a commit."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["github"] = "github"
    user: str
    repo: str
    commit: str | None = None

    @property
    def slug(self) -> str:
        return f"{self.user}/{self.repo}"

    def __str__(self) -> str:
        return _with_commit(f"{GITHUB_PREFIX}{self.slug}", self.commit)


class FileRef(BaseModel):
    """A source archive on the local filesystem."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = "file"
    path: str
    commit: str | None = None

    def __str__(self) -> str:
        return _with_commit(f"{FILE_PREFIX}{self.path}", self.commit)


class UrlRef(BaseModel):
    """A source archive downloadable from a URL."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["url"] = "url"
    url: str

    def __str__(self) -> str:
        return self.url


class UuidRef(BaseModel):
    """An indirect reference resolved through the registry lookup table."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["uuid"] = "uuid"
    uuid: str
    commit: str | None = None

    def __str__(self) -> str:
        return _with_commit(f"{UUID_PREFIX}{self.uuid}", self.commit)


PackageReference = Union[GithubRef, FileRef, UrlRef, UuidRef]


def _with_commit(base: str, commit: str | None) -> str:
    return f"{base}@{commit}" if commit else base


def _split_commit(body: str) -> tuple[str, str | None]:
    """Split ``body[@commit]`` on the first ``@``."""
    head, sep, commit = body.partition("@")
    if sep and not commit:
        raise UnresolvedReferenceError(f"Empty commit id in reference body '{body}'")
    return head, (commit if sep else None)


def parse_reference(ref: str) -> PackageReference:
    """Classify a reference string into exactly one variant.

    Raises
    ------
    UnresolvedReferenceError
        If the string matches no variant, or matches a prefix but has a
        malformed body.
    """
    ref = ref.strip()

    if ref.startswith(GITHUB_PREFIX):
        body, commit = _split_commit(ref.removeprefix(GITHUB_PREFIX))
        user, sep, repo = body.partition("/")
        repo = repo.removesuffix(".git")
        if not sep or not user or not repo or "/" in repo:
            raise UnresolvedReferenceError(
                f"Malformed github reference '{ref}': expected github:<user>/<repo>"
            )
        return GithubRef(user=user, repo=repo, commit=commit)

    if ref.startswith(FILE_PREFIX):
        path, commit = _split_commit(ref.removeprefix(FILE_PREFIX))
        if not path:
            raise UnresolvedReferenceError(f"Malformed file reference '{ref}': empty path")
        return FileRef(path=path, commit=commit)

    if ref.startswith(UUID_PREFIX):
        uuid, commit = _split_commit(ref.removeprefix(UUID_PREFIX))
        if not uuid or any(ch.isspace() for ch in uuid):
            raise UnresolvedReferenceError(f"Malformed uuid reference '{ref}'")
        return UuidRef(uuid=uuid, commit=commit)

    if SCHEME_SEPARATOR in ref:
        return UrlRef(url=ref)

    raise UnresolvedReferenceError(f"Unrecognized package reference '{ref}'")
