"""Error taxonomy for the install pipeline.

Every fatal condition raises a subclass of ``LibforgeError``. Nothing in
the pipeline catches these; the CLI turns them into a single message and
a non-zero exit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from libforge.models.results import CommandResult


class LibforgeError(RuntimeError):
    """Base class for all libforge errors."""


class ConfigStoreError(LibforgeError):
    """Raised when the Config Store cannot be read, written, or given a bad entry."""


class MissingArgumentError(LibforgeError):
    """Raised when a required command-line argument is absent."""


class MissingToolchainError(LibforgeError):
    """Raised when the toolchain path is not set in the Config Store."""


class ManifestError(LibforgeError):
    """Raised when a package manifest cannot be read."""


class MissingManifestFieldError(ManifestError):
    """Raised when a required manifest key (``name``, ``version``) is absent."""

    def __init__(self, field: str, path: object = None) -> None:
        self.field = field
        where = f" in {path}" if path is not None else ""
        super().__init__(f"Manifest is missing required field '{field}'{where}")


class UnresolvedReferenceError(LibforgeError):
    """Raised when a package reference matches no known variant."""


class FetchError(LibforgeError):
    """Raised when source acquisition (clone, download, extract) fails."""


class CommandError(LibforgeError):
    """Raised when a manifest-declared step exits non-zero or times out."""

    step = "command"

    def __init__(self, result: CommandResult) -> None:
        self.result = result
        if result.timed_out:
            reason = f"timed out after {result.duration_seconds:.1f}s"
        else:
            reason = f"exited with status {result.returncode}"
        detail = result.stderr.strip().splitlines()[-1:] if result.stderr else []
        message = f"{self.step} step {reason}: {result.command}"
        if detail:
            message += f" ({detail[0]})"
        super().__init__(message)


class BuildError(CommandError):
    step = "build"


class InstallError(CommandError):
    step = "install"


class PackageTestError(CommandError):
    """Only raised when strict test handling is enabled."""

    step = "test"


class PublishError(LibforgeError):
    """Raised when a shared library cannot be published."""
