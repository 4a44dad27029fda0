"""Main Typer application.

Entry point: ``bccache`` (configured via pyproject.toml project.scripts).

Every command builds its ``CacheManager`` from ``BCCSettings``, so the
same BCC_* environment that configures a server configures the CLI.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

import typer
from rich.console import Console
from rich.table import Table

from bccache.config import BCCSettings, build_dispatcher, build_manager
from bccache.core.manager import CacheManager
from bccache.models.config import ArtifactKind
from bccache.models.results import CacheResult

app = typer.Typer(
    name="bccache",
    help="bccache: lazy Bundle-Compile-Cache for scripts and remote sources.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


class ClearTarget(str, Enum):
    ALL = "all"
    BUNDLE = "bundle"
    COMPILE = "compile"
    TRANSPILE = "transpile"
    EXTERNAL = "external"


def _manager() -> CacheManager:
    return build_manager(BCCSettings())


def _emit(result: CacheResult) -> None:
    if result.ok:
        typer.echo(result.body, nl=False)
        return
    err_console.print(f"[red]{result.message}[/red]")
    raise typer.Exit(code=1)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level (defaults to BCC_LOG_LEVEL)."
    ),
) -> None:
    """Configure logging for every command."""
    level = (log_level or BCCSettings().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command(name="status", help="Show which caches and sources are configured.")
def status_cmd() -> None:
    manager = _manager()

    table = Table(title="Bundle-Compile-Cache")
    table.add_column("Cache", style="cyan")
    table.add_column("Enabled", justify="center")
    table.add_column("Directory")
    table.add_column("Generator")

    for kind in ArtifactKind:
        enabled = manager.is_enabled(kind)
        directory = manager.directory_for(kind)
        generator = manager.generator_for(kind)
        table.add_row(
            kind.value,
            "[green]Yes[/green]" if enabled else "[red]No[/red]",
            str(directory) if directory else "[dim]-[/dim]",
            type(generator).__name__ if generator else "[dim]none[/dim]",
        )
    remote = manager.remote_directory
    table.add_row(
        "external",
        "[green]Yes[/green]" if remote else "[red]No[/red]",
        str(remote) if remote else "[dim]-[/dim]",
        "fetch",
    )
    console.print(table)

    if manager.sources:
        sources = Table(title="Remote sources")
        sources.add_column("Handle", style="cyan")
        sources.add_column("Base URL")
        for handle, base_url in manager.sources.items():
            sources.add_row(handle, base_url)
        console.print(sources)
    else:
        console.print("[dim]No remote sources registered.[/dim]")


@app.command(name="get", help="Print an artifact, generating it on a cache miss.")
def get_cmd(
    kind: ArtifactKind = typer.Argument(..., help="Artifact kind."),
    script: str = typer.Argument(..., help="Script path relative to the source folder."),
) -> None:
    manager = _manager()
    _emit(asyncio.run(manager.cached(kind, script)))


@app.command(name="fetch", help="Print a remote script, fetching it on a cache miss.")
def fetch_cmd(
    handle: str = typer.Argument(..., help="Registered source handle."),
    script: str = typer.Argument(..., help="Script path under the source's base URL."),
) -> None:
    manager = _manager()
    _emit(asyncio.run(manager.script_cache(script, handle)))


@app.command(name="route", help="Resolve a request path the way the HTTP middleware would.")
def route_cmd(
    path: str = typer.Argument(..., help="Request path, e.g. /compiled/app."),
) -> None:
    dispatcher = build_dispatcher()
    response = asyncio.run(dispatcher.dispatch(path))
    if response is None:
        err_console.print(f"[yellow]No route matches[/yellow] {path}")
        raise typer.Exit(code=2)
    err_console.print(f"[dim]{response.status_code} {response.media_type}[/dim]")
    typer.echo(response.body, nl=False)
    if response.status_code != 200:
        raise typer.Exit(code=1)


@app.command(name="clear", help="Empty one cache directory, or all of them.")
def clear_cmd(
    target: ClearTarget = typer.Argument(ClearTarget.ALL, help="Which cache to clear."),
) -> None:
    manager = _manager()
    clearing = {
        ClearTarget.ALL: manager.clear_all_cache,
        ClearTarget.BUNDLE: manager.clear_bundle_cache,
        ClearTarget.COMPILE: manager.clear_compile_cache,
        ClearTarget.TRANSPILE: manager.clear_transpile_cache,
        ClearTarget.EXTERNAL: manager.clear_external_cache,
    }[target]
    asyncio.run(clearing())
    console.print(f"[green]Cleared[/green] {target.value} cache")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
