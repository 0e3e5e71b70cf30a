"""Config Store — persistent string key/value pairs.

File format: one ``<key>: <value>`` line per key. ``set`` drops any
existing line for the key and appends the new one, so a key never
appears twice. Each read-modify-write holds an exclusive lock on a
sidecar ``.lock`` file and lands via temp-file-then-rename.
"""

from __future__ import annotations

import logging
from pathlib import Path

from libforge.core import kvfile
from libforge.core.errors import ConfigStoreError
from libforge.core.locking import atomic_write_text, exclusive_lock

logger = logging.getLogger(__name__)


class ConfigStore:
    """Key/value store backed by a single text file.

    Parameters
    ----------
    path:
        Location of the config file. Need not exist yet.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._lock_path = self._path.with_name(self._path.name + ".lock")

    @property
    def path(self) -> Path:
        return self._path

    def _read_lines(self) -> list[str]:
        try:
            return self._path.read_text(encoding="utf-8").splitlines(keepends=True)
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigStoreError(f"Cannot read config file {self._path}: {exc}") from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, key: str) -> str | None:
        """Return the value for *key*, or ``None`` if unset."""
        return self.list().get(key)

    def set(self, key: str, value: str) -> None:
        """Set *key* to *value*, replacing any previous entry for *key*."""
        _validate(key, value)
        try:
            with exclusive_lock(self._lock_path):
                kept = [
                    line for line in self._read_lines()
                    if (parsed := kvfile.parse_line(line)) is None or parsed[0] != key
                ]
                if kept and not kept[-1].endswith("\n"):
                    kept[-1] += "\n"
                kept.append(kvfile.render_line(key, value))
                atomic_write_text(self._path, "".join(kept))
        except OSError as exc:
            raise ConfigStoreError(f"Cannot write config file {self._path}: {exc}") from exc
        logger.debug("Config set %s=%s in %s", key, value, self._path)

    def list(self) -> dict[str, str]:
        """Return all entries in file order."""
        return kvfile.parse_text("".join(self._read_lines()))


def _validate(key: str, value: str) -> None:
    if not key or key != key.strip():
        raise ConfigStoreError(f"Invalid config key {key!r}")
    if kvfile.SEPARATOR in key or key.endswith(":") or "\n" in key or key.startswith("#"):
        raise ConfigStoreError(f"Config key {key!r} may not contain ': ' or newlines")
    if "\n" in value or "\r" in value:
        raise ConfigStoreError(f"Config value for {key!r} may not contain newlines")
    if value != value.strip():
        raise ConfigStoreError(
            f"Config value for {key!r} may not start or end with whitespace"
        )
