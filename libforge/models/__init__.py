"""libforge data models — all Pydantic v2, all frozen (immutable)."""

from libforge.models.manifest import Manifest
from libforge.models.references import (
    FileRef,
    GithubRef,
    PackageReference,
    UrlRef,
    UuidRef,
    parse_reference,
)
from libforge.models.results import (
    CommandResult,
    InstalledPackage,
    InstallResult,
    PublishedArtifact,
)

__all__ = [
    # references
    "GithubRef",
    "FileRef",
    "UrlRef",
    "UuidRef",
    "PackageReference",
    "parse_reference",
    # manifest
    "Manifest",
    # results
    "CommandResult",
    "PublishedArtifact",
    "InstalledPackage",
    "InstallResult",
]
