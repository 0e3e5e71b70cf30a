"""``libforge config [KEY [VALUE]]`` — list, get, or set Config Store entries."""

from __future__ import annotations

import typer

from libforge.cli.commands._common import console, fail, get_settings
from libforge.core.config_store import ConfigStore
from libforge.core.errors import LibforgeError


def config_cmd(
    ctx: typer.Context,
    key: str = typer.Argument(None, help="Key to read or write."),
    value: str = typer.Argument(None, help="Value to store under KEY."),
) -> None:
    """List all entries, print one value, or set a value.

    With no arguments every entry is printed as ``key: value``. With KEY
    alone the value is printed (nothing if unset). With KEY and VALUE the
    entry is replaced.
    """
    store = ConfigStore(get_settings(ctx).config_path)
    try:
        if key is None:
            for k, v in store.list().items():
                console.print(f"{k}: {v}", markup=False, highlight=False, soft_wrap=True)
        elif value is None:
            current = store.get(key)
            if current is not None:
                console.print(current, markup=False, highlight=False, soft_wrap=True)
        else:
            store.set(key, value)
    except LibforgeError as exc:
        raise fail(exc)
