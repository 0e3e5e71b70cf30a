"""Helpers shared by CLI commands: console, settings access, error exit."""

from __future__ import annotations

import typer
from rich.console import Console

from libforge.config import LibforgeSettings
from libforge.core.errors import LibforgeError, MissingArgumentError

console = Console()


def get_settings(ctx: typer.Context) -> LibforgeSettings:
    """Settings built by the root callback, or fresh ones if invoked directly."""
    if isinstance(ctx.obj, LibforgeSettings):
        return ctx.obj
    return LibforgeSettings()


def require_argument(value: str | None, name: str, usage: str) -> str:
    if not value:
        raise MissingArgumentError(f"missing required argument {name}\nUsage: {usage}")
    return value


def fail(exc: LibforgeError) -> typer.Exit:
    """Print *exc* as a single error line and return the exit to raise."""
    label = "Usage error" if isinstance(exc, MissingArgumentError) else "Error"
    console.print(f"[bold red]{label}:[/bold red] {exc}", markup=True, highlight=False)
    return typer.Exit(code=1)
