"""CLI entrypoint using typer."""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console

from storehouse_core.config.settings import Settings
from storehouse_core.constants import CREATED_AT_FIELD, EXPIRES_AT_FIELD
from storehouse_core.models.sweep import SweepResult
from storehouse_infra.cache.connection import IndexedConnection
from storehouse_infra.cache.sweeper import Sweeper
from storehouse_infra.observability import configure_logging

app = typer.Typer(
    name="storehouse",
    help="Page cache connector over an indexed key/value store",
)
console = Console()

_RAW_HELP = "Use KEY as the stored key, without escaping"


def _connect(verbose: bool) -> tuple[Settings, IndexedConnection]:
    """Load settings, configure logging and open the configured bucket."""
    settings = Settings()
    if verbose:
        settings.log_level = "DEBUG"
    configure_logging(settings)
    return settings, IndexedConnection(settings.connection_spec())


def _parse_data(data: str) -> dict[str, Any]:
    """Parse --data as a JSON object or exit with code 1."""
    try:
        parsed = json.loads(data)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Error:[/red] --data is not valid JSON: {exc.msg}")
        raise typer.Exit(code=1) from exc
    if not isinstance(parsed, dict):
        console.print("[red]Error:[/red] --data must be a JSON object")
        raise typer.Exit(code=1)
    return parsed


def _print_sweep(result: SweepResult) -> None:
    console.print(f"[bold]{result.operation} complete[/bold] namespace={result.namespace or '*'}")
    console.print(f"  Windows scanned: {result.windows_scanned}")
    console.print(f"  Keys matched: {result.keys_matched}")
    console.print(f"  Deleted: {result.deleted}")
    if result.operation == "clean":
        console.print(f"  Expired: {result.expired}")
    if result.skipped:
        console.print(f"  [yellow]Skipped: {result.skipped}[/yellow]")
    console.print(f"  Duration: {result.duration_seconds:.1f}s")


@app.command()
def read(
    key: str = typer.Argument(..., help="Cache key"),
    raw: bool = typer.Option(False, "--raw", help=_RAW_HELP),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Print a cached entry with its timestamps."""
    _, connection = _connect(verbose)
    try:
        data = connection.read(key, skip_escape=raw)
    finally:
        connection.close()

    if not data:
        console.print(f"[yellow]Miss:[/yellow] {key}")
        raise typer.Exit(code=1)
    console.print_json(data=data)


@app.command()
def write(
    key: str = typer.Argument(..., help="Cache key"),
    data: str = typer.Option(..., "--data", help="Payload as a JSON object"),
    ttl: int | None = typer.Option(None, "--ttl", help="Seconds until the entry expires"),
    raw: bool = typer.Option(False, "--raw", help=_RAW_HELP),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Store a payload, stamping created_at/expires_at unless given."""
    payload = _parse_data(data)
    settings, connection = _connect(verbose)
    try:
        now = connection.now()
        payload.setdefault(CREATED_AT_FIELD, now)
        if ttl is not None or EXPIRES_AT_FIELD not in payload:
            payload[EXPIRES_AT_FIELD] = now + (settings.default_ttl_seconds if ttl is None else ttl)
        stored = connection.write(key, payload, skip_escape=raw)
    finally:
        connection.close()

    if stored is None:
        console.print(f"[red]Error:[/red] {key} holds data that cannot be overwritten")
        raise typer.Exit(code=1)
    console.print(f"[green]Stored:[/green] {stored.key}")


@app.command()
def delete(
    key: str = typer.Argument(..., help="Cache key"),
    raw: bool = typer.Option(False, "--raw", help=_RAW_HELP),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Delete an entry and print what it held."""
    _, connection = _connect(verbose)
    try:
        data = connection.delete(key, skip_escape=raw)
    finally:
        connection.close()

    if not data:
        console.print(f"[yellow]Miss:[/yellow] {key}")
        return
    console.print_json(data=data)


@app.command()
def expire(
    key: str = typer.Argument(..., help="Cache key"),
    raw: bool = typer.Option(False, "--raw", help=_RAW_HELP),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Soft-expire an entry, keeping it readable."""
    _, connection = _connect(verbose)
    try:
        stored = connection.expire(key, skip_escape=raw)
    finally:
        connection.close()

    if stored is None:
        console.print(f"[yellow]Not expired:[/yellow] {key} is missing or not writable")
        raise typer.Exit(code=1)
    console.print(f"[green]Expired:[/green] {stored.key}")


@app.command()
def clean(
    namespace: str | None = typer.Argument(None, help="Key prefix to sweep"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Delete expired entries and soft-expire the rest."""
    _, connection = _connect(verbose)
    try:
        result = Sweeper(connection).clean(namespace)
    finally:
        connection.close()
    _print_sweep(result)


@app.command()
def clear(
    namespace: str | None = typer.Argument(None, help="Key prefix to sweep"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Delete every entry under a namespace."""
    if not yes:
        target = namespace or "the whole bucket"
        typer.confirm(f"Delete every entry under {target}?", abort=True)

    _, connection = _connect(verbose)
    try:
        result = Sweeper(connection).clear(namespace)
    finally:
        connection.close()
    _print_sweep(result)


@app.command()
def version() -> None:
    """Show version."""
    console.print("storehouse-cache v0.1.0")


if __name__ == "__main__":
    app()
