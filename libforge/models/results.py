"""Result models produced by the executor, publisher, and installer."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class CommandResult(BaseModel):
    """Outcome of one external process invocation."""

    model_config = ConfigDict(frozen=True)

    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class PublishedArtifact(BaseModel):
    """A content-addressed symlink in the shared library namespace.

    ``link_name`` is ``<sha1>-<filename>.so``; identical bytes always map
    to the same digest regardless of which install produced them.
    """

    model_config = ConfigDict(frozen=True)

    link_path: Path
    target: Path
    sha1: str
    filename: str

    @property
    def link_name(self) -> str:
        return self.link_path.name


class InstalledPackage(BaseModel):
    """A name/version install directory under ``pkg/``."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    path: Path


class InstallResult(BaseModel):
    """Summary of one successful ``install`` invocation."""

    model_config = ConfigDict(frozen=True)

    reference: str
    name: str
    version: str
    install_dir: Path
    artifacts: list[PublishedArtifact] = Field(default_factory=list)
    tests_ran: bool = False
    tests_passed: bool | None = None
    completed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
