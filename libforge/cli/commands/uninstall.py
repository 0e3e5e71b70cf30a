"""``libforge uninstall PKGNAME`` — accepted, but removal is not implemented."""

from __future__ import annotations

import typer

from libforge.cli.commands._common import console, fail, get_settings, require_argument
from libforge.core.errors import LibforgeError
from libforge.core.installer import Installer


def uninstall_cmd(
    ctx: typer.Context,
    pkgname: str = typer.Argument(None, help="Name of the package to remove."),
) -> None:
    """Report that package removal is not implemented and exit normally."""
    try:
        name = require_argument(pkgname, "PKGNAME", "libforge uninstall <pkgname>")
    except LibforgeError as exc:
        raise fail(exc)

    if not Installer(get_settings(ctx)).uninstall(name):
        console.print(
            f"[bold yellow]uninstall is not implemented:[/bold yellow] {name} was left in place"
        )
