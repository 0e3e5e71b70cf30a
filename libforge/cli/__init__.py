"""libforge CLI — Typer-based command-line interface.

Provides the ``libforge`` command with subcommands for managing the
configuration store, installing packages from source, and listing
installed packages and published libraries.

All output uses Rich for formatted terminal display.
"""
