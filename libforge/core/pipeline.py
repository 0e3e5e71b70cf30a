"""Build Pipeline — manifest-driven build, test, install, then publish.

Given a populated source directory:

    read manifest -> resolve toolchain -> recreate pkg/<name>-<version>
        -> build -> test (optional) -> install -> publish

Every step runs with the source directory as its working directory and
with these variables added to its environment:

    TOOLCHAIN       toolchain path from the Config Store
    <KEY>           the same path under the upper-cased config key (e.g. RUSTC)
    PREFIX          the install directory
    PKG_NAME        manifest name
    PKG_VERSION     manifest version

Build and install failures are fatal. Test failures are logged and
tolerated unless ``strict_tests`` is set.
"""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path

from libforge.core.config_store import ConfigStore
from libforge.core.errors import (
    BuildError,
    InstallError,
    ManifestError,
    MissingToolchainError,
    PackageTestError,
)
from libforge.core.executor import run_command
from libforge.core.manifest_reader import MANIFEST_FILENAME, read_manifest
from libforge.core.publisher import ArtifactPublisher
from libforge.core.workdir import WorkdirManager
from libforge.models.manifest import Manifest
from libforge.models.results import CommandResult, InstallResult

logger = logging.getLogger(__name__)

INSTALLED_MANIFEST = ".manifest"


class BuildPipeline:
    """Runs a package's declared steps and publishes the result.

    Parameters
    ----------
    config_store:
        Source of the toolchain path.
    workdirs:
        Allocates the install directory.
    publisher:
        Publishes shared libraries once the install step succeeds.
    toolchain_key:
        Config Store key holding the toolchain path.
    default_build, default_install:
        Commands used when the manifest omits ``build`` / ``install``.
    command_timeout:
        Seconds allowed for each step; ``None`` waits forever.
    strict_tests:
        Treat a failing test step as fatal.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        workdirs: WorkdirManager,
        publisher: ArtifactPublisher,
        *,
        toolchain_key: str = "rustc",
        default_build: str = "make",
        default_install: str = "make install",
        command_timeout: float | None = None,
        strict_tests: bool = False,
    ) -> None:
        self.config_store = config_store
        self.workdirs = workdirs
        self.publisher = publisher
        self.toolchain_key = toolchain_key
        self.default_build = default_build
        self.default_install = default_install
        self.command_timeout = command_timeout
        self.strict_tests = strict_tests

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------

    def load_manifest(self, source_dir: Path) -> Manifest:
        return read_manifest(
            source_dir,
            default_build=self.default_build,
            default_install=self.default_install,
        )

    def resolve_toolchain(self) -> str:
        toolchain = self.config_store.get(self.toolchain_key)
        if not toolchain:
            raise MissingToolchainError(
                f"Toolchain path is not configured; run "
                f"'libforge config {self.toolchain_key} <path>' first"
            )
        return toolchain

    def step_environment(self, manifest: Manifest, toolchain: str, install_dir: Path) -> dict[str, str]:
        env_key = re.sub(r"[^A-Za-z0-9_]", "_", self.toolchain_key).upper()
        return {
            "TOOLCHAIN": toolchain,
            env_key: toolchain,
            "PREFIX": str(install_dir),
            "PKG_NAME": manifest.name,
            "PKG_VERSION": manifest.version,
        }

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _run_step(self, step: str, command: str, source_dir: Path, env: dict[str, str]) -> CommandResult:
        logger.info("%s: %s", step, command)
        result = run_command(command, cwd=source_dir, env=env, timeout=self.command_timeout)
        if not result.ok:
            logger.error("%s step failed (status %s): %s", step, result.returncode, command)
        return result

    def run(self, source_dir: Path, *, reference: str = "") -> InstallResult:
        """Build, test, install, and publish the package in *source_dir*.

        Raises
        ------
        ManifestError, MissingManifestFieldError
            Before any command runs, or if the manifest cannot be copied
            into the install directory afterwards.
        MissingToolchainError
            Before any command runs or the install directory is touched.
        BuildError, InstallError
            On a failing or timed-out step.
        PackageTestError
            On a failing test step, only when ``strict_tests`` is set.
        """
        source_dir = Path(source_dir)
        manifest = self.load_manifest(source_dir)
        toolchain = self.resolve_toolchain()

        install_dir = self.workdirs.create_install_dir(manifest.name, manifest.version)
        env = self.step_environment(manifest, toolchain, install_dir)
        logger.info("Installing %s %s into %s", manifest.name, manifest.version, install_dir)

        result = self._run_step("build", manifest.build, source_dir, env)
        if not result.ok:
            raise BuildError(result)

        tests_passed: bool | None = None
        if manifest.test:
            result = self._run_step("test", manifest.test, source_dir, env)
            tests_passed = result.ok
            if not result.ok:
                if self.strict_tests:
                    raise PackageTestError(result)
                logger.warning(
                    "Tests for %s %s failed; continuing", manifest.name, manifest.version
                )

        result = self._run_step("install", manifest.install, source_dir, env)
        if not result.ok:
            raise InstallError(result)

        try:
            shutil.copyfile(source_dir / MANIFEST_FILENAME, install_dir / INSTALLED_MANIFEST)
        except OSError as exc:
            raise ManifestError(f"Cannot record manifest in {install_dir}: {exc}") from exc
        artifacts = self.publisher.publish(install_dir)

        return InstallResult(
            reference=reference,
            name=manifest.name,
            version=manifest.version,
            install_dir=install_dir,
            artifacts=artifacts,
            tests_ran=manifest.test is not None,
            tests_passed=tests_passed,
        )
