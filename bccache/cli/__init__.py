"""bccache CLI — Typer-based command-line interface.

Provides the ``bccache`` command with subcommands for inspecting the
configuration, reading artifacts and remote scripts through the cache,
and clearing cache directories.

All output uses Rich for formatted terminal display.
"""
