"""Installer — the central coordinator for install requests.

Wires the ConfigStore, WorkdirManager, ReferenceResolver with its fetch
strategies, BuildPipeline, and ArtifactPublisher together from a single
``LibforgeSettings`` instance.

    install(ref): resolve -> fetch into a scoped workdir -> build pipeline
"""

from __future__ import annotations

import logging
from pathlib import Path

import requests

from libforge.config import LibforgeSettings
from libforge.core import kvfile
from libforge.core.config_store import ConfigStore
from libforge.core.fetchers import FileFetcher, GithubFetcher, UrlFetcher, UuidLookup
from libforge.core.pipeline import INSTALLED_MANIFEST, BuildPipeline
from libforge.core.publisher import ArtifactPublisher
from libforge.core.resolver import ReferenceResolver
from libforge.core.workdir import WorkdirManager
from libforge.models.results import InstalledPackage, InstallResult, PublishedArtifact

logger = logging.getLogger(__name__)


class Installer:
    """Top-level install / uninstall / list operations.

    Parameters
    ----------
    settings:
        Process settings. Uses environment-derived defaults if not provided.
    session:
        HTTP session shared by the URL fetcher and the registry lookup.
    """

    def __init__(
        self,
        settings: LibforgeSettings | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.settings = settings or LibforgeSettings()
        self.session = session or requests.Session()

        s = self.settings
        self.config_store = ConfigStore(s.config_path)
        self.workdirs = WorkdirManager(s.work_root, s.pkg_root, keep_workdirs=s.keep_workdir)
        self.publisher = ArtifactPublisher(s.libs_root)
        self.resolver = ReferenceResolver(
            {
                "github": GithubFetcher(s.github_url, timeout=s.command_timeout),
                "file": FileFetcher(),
                "url": UrlFetcher(self.session, timeout=s.network_timeout),
            },
            UuidLookup(s.registry_url, self.session, timeout=s.network_timeout),
            max_depth=s.max_resolve_depth,
        )
        self.pipeline = BuildPipeline(
            self.config_store,
            self.workdirs,
            self.publisher,
            toolchain_key=s.toolchain_key,
            default_build=s.default_build,
            default_install=s.default_install,
            command_timeout=s.command_timeout,
            strict_tests=s.strict_tests,
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def install(self, ref: str) -> InstallResult:
        """Fetch, build, install, and publish the package named by *ref*.

        The working directory is removed whether or not the attempt
        succeeds, unless ``keep_workdir`` is set.
        """
        reference, fetcher = self.resolver.resolve(ref)
        logger.info("Installing %s", reference)
        with self.workdirs.workspace(fetcher.workdir_name(reference)) as workdir:
            fetcher.fetch(reference, workdir)
            result = self.pipeline.run(workdir, reference=str(reference))
        logger.info(
            "Installed %s %s (%d libraries published)",
            result.name,
            result.version,
            len(result.artifacts),
        )
        return result

    def uninstall(self, name: str) -> bool:
        """Not supported: reports and returns ``False`` without touching disk."""
        logger.warning("uninstall of '%s' is not implemented; nothing was removed", name)
        return False

    def list_installed(self) -> list[InstalledPackage]:
        """Every install directory under ``pkg/``."""
        return [self._describe(path) for path in self.workdirs.list_install_dirs()]

    def list_published(self) -> list[PublishedArtifact]:
        return self.publisher.list_published()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _describe(path: Path) -> InstalledPackage:
        manifest_copy = path / INSTALLED_MANIFEST
        fields: dict[str, str] = {}
        if manifest_copy.is_file():
            try:
                fields = kvfile.parse_text(manifest_copy.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Ignoring unreadable %s: %s", manifest_copy, exc)
        if fields.get("name") and fields.get("version"):
            return InstalledPackage(name=fields["name"], version=fields["version"], path=path)
        name, _, version = path.name.rpartition("-")
        return InstalledPackage(name=name or path.name, version=version, path=path)
