"""Manifest Reader — loads the ``manifest`` file from a source root."""

from __future__ import annotations

import logging
from pathlib import Path

from libforge.core import kvfile
from libforge.core.errors import ManifestError, MissingManifestFieldError
from libforge.models.manifest import Manifest

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest"
REQUIRED_FIELDS = ("name", "version")
STEP_FIELDS = ("build", "test", "install")


def read_fields(source_dir: Path) -> dict[str, str]:
    """Return every key/value pair in ``<source_dir>/manifest``."""
    path = Path(source_dir) / MANIFEST_FILENAME
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ManifestError(f"No manifest found at {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(f"Cannot read manifest {path}: {exc}") from exc
    return kvfile.parse_text(text)


def read_manifest(
    source_dir: Path,
    *,
    default_build: str = "make",
    default_install: str = "make install",
) -> Manifest:
    """Read and validate the manifest, applying step defaults.

    Raises
    ------
    ManifestError
        If the manifest file is absent or unreadable.
    MissingManifestFieldError
        If ``name`` or ``version`` is absent or empty.
    """
    fields = read_fields(source_dir)
    for field in REQUIRED_FIELDS:
        if not fields.get(field):
            raise MissingManifestFieldError(field, Path(source_dir) / MANIFEST_FILENAME)

    manifest = Manifest(
        name=fields["name"],
        version=fields["version"],
        build=fields.get("build") or default_build,
        install=fields.get("install") or default_install,
        test=fields.get("test") or None,
        extra={
            k: v for k, v in fields.items()
            if k not in REQUIRED_FIELDS and k not in STEP_FIELDS
        },
    )
    logger.debug("Read manifest for %s %s", manifest.name, manifest.version)
    return manifest
