"""libforge: minimal source-based package installer.

Fetches package source (GitHub, local archive, URL, or registry uuid),
builds it with the commands its ``manifest`` declares, and publishes the
resulting shared libraries under content-addressed names in a shared
``libs/`` directory.
"""

__version__ = "0.1.0"
__description__ = (
    "Source-based package installer with content-addressed shared-library publication"
)

from libforge.core.installer import Installer
from libforge.cli.app import app as cli

__all__ = ["Installer", "cli", "__version__"]
