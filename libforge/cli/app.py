"""Main Typer application — imports and registers all CLI commands.

Entry point: ``libforge`` (configured via pyproject.toml [project.scripts]).

Commands: config, install, uninstall, list, libs.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from libforge.cli.commands._common import console, get_settings
from libforge.cli.commands.config_cmd import config_cmd
from libforge.cli.commands.install import install_cmd
from libforge.cli.commands.uninstall import uninstall_cmd
from libforge.config import LibforgeSettings

app = typer.Typer(
    name="libforge",
    help="libforge: build packages from source and publish their shared libraries.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    root: Path = typer.Option(
        None,
        "--root",
        envvar="LIBFORGE_ROOT",
        help="State directory holding config, work/, pkg/ and libs/.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Build settings for this invocation and configure logging."""
    settings = LibforgeSettings(root=root) if root else LibforgeSettings()
    ctx.obj = settings

    level = logging.DEBUG if verbose else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


# Register subcommands
app.command(name="config", help="List, get, or set configuration values.")(config_cmd)
app.command(name="install", help="Install a package from a reference.")(install_cmd)
app.command(name="uninstall", help="Remove an installed package (not implemented).")(uninstall_cmd)


@app.command(name="list", help="List installed packages.")
def list_cmd(ctx: typer.Context) -> None:
    """List every name/version install directory."""
    from libforge.core.installer import Installer
    from rich.table import Table

    packages = Installer(get_settings(ctx)).list_installed()
    if not packages:
        console.print("[dim]No packages installed.[/dim]")
        return

    table = Table(title="Installed Packages")
    table.add_column("Name", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Location")
    for pkg in packages:
        table.add_row(pkg.name, pkg.version, str(pkg.path))
    console.print(table)


@app.command(name="libs", help="List published shared libraries.")
def libs_cmd(ctx: typer.Context) -> None:
    """List every content-addressed library link."""
    from libforge.core.installer import Installer
    from rich.table import Table

    artifacts = Installer(get_settings(ctx)).list_published()
    if not artifacts:
        console.print("[dim]No libraries published.[/dim]")
        return

    table = Table(title="Published Libraries")
    table.add_column("SHA-1", style="cyan", no_wrap=True)
    table.add_column("Library", style="green")
    table.add_column("Target")
    for artifact in artifacts:
        table.add_row(artifact.sha1[:12], artifact.filename, str(artifact.target))
    console.print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
