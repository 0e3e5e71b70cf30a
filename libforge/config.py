"""Process settings — env-driven, one instance per invocation.

Centralized settings using pydantic-settings. Reads from a .env file and
LIBFORGE_* environment variables.

These are distinct from the Config Store (``libforge config``), which holds
user-managed key/value pairs such as the toolchain path.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REGISTRY_URL = "https://raw.githubusercontent.com/libforge/registry/master/registry"


class LibforgeSettings(BaseSettings):
    """Installer settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export LIBFORGE_ROOT=/opt/libforge
        export LIBFORGE_LOG_LEVEL=DEBUG
        export LIBFORGE_STRICT_TESTS=true
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LIBFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage root: holds config, work/, pkg/, libs/
    root: Path = Path.home() / ".libforge"

    # Sources: git host for github: references, registry for uuid: references
    github_url: str = "https://github.com"
    registry_url: str = DEFAULT_REGISTRY_URL

    # Build
    toolchain_key: str = "rustc"
    default_build: str = "make"
    default_install: str = "make install"
    strict_tests: bool = False
    keep_workdir: bool = False

    # Timeouts (seconds)
    command_timeout: float = 3600.0
    network_timeout: float = 60.0

    max_resolve_depth: int = 8
    log_level: str = "INFO"

    @property
    def config_path(self) -> Path:
        return self.root / "config"

    @property
    def work_root(self) -> Path:
        return self.root / "work"

    @property
    def pkg_root(self) -> Path:
        return self.root / "pkg"

    @property
    def libs_root(self) -> Path:
        return self.root / "libs"
