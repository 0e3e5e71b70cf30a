"""``libforge install PKGREF`` — fetch, build, install, and publish a package.

PKGREF is one of::

    github:<user>/<repo>[@<commit>]
    file:<path>[@<commit>]
    uuid:<uuid>[@<commit>]
    https://host/path/archive.tar.gz
"""

from __future__ import annotations

import typer
from rich.panel import Panel

from libforge.cli.commands._common import console, fail, get_settings, require_argument
from libforge.core.errors import LibforgeError
from libforge.core.installer import Installer


def install_cmd(
    ctx: typer.Context,
    pkgref: str = typer.Argument(None, help="Package reference to install."),
    keep_workdir: bool = typer.Option(
        False,
        "--keep-workdir",
        "-k",
        help="Keep the working directory after the attempt (for debugging).",
    ),
    strict_tests: bool = typer.Option(
        False,
        "--strict-tests",
        help="Abort the install if the package's test step fails.",
    ),
    timeout: float = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Seconds allowed for each clone/build/test/install step.",
    ),
) -> None:
    """Install a package from source and publish its shared libraries."""
    settings = get_settings(ctx)
    overrides: dict[str, object] = {}
    if keep_workdir:
        overrides["keep_workdir"] = True
    if strict_tests:
        overrides["strict_tests"] = True
    if timeout is not None:
        overrides["command_timeout"] = timeout
    if overrides:
        settings = settings.model_copy(update=overrides)

    try:
        ref = require_argument(pkgref, "PKGREF", "libforge install <pkgref>")
        result = Installer(settings).install(ref)
    except LibforgeError as exc:
        raise fail(exc)

    if result.tests_passed is None:
        tests = "[dim]none declared[/dim]"
    elif result.tests_passed:
        tests = "[green]passed[/green]"
    else:
        tests = "[yellow]failed (ignored)[/yellow]"

    lines = [
        f"[bold green]Installed {result.name} {result.version}[/bold green]",
        "",
        f"[bold]Reference:[/bold]   {result.reference}",
        f"[bold]Install dir:[/bold] {result.install_dir}",
        f"[bold]Tests:[/bold]       {tests}",
        f"[bold]Published:[/bold]   {len(result.artifacts)}",
    ]
    for artifact in result.artifacts:
        lines.append(f"  [cyan]{artifact.link_name}[/cyan]")

    console.print(
        Panel(
            "\n".join(lines),
            title="[bold]libforge[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
