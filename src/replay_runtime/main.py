"""
Replay Runtime - CLI Entry Point.

Runs the runtime's browser-free operations from the shell: replaying one
recorded request step and reconciling captured fact sources.

Usage:
    replay-runtime request step_9_request.json --export-dir ./test-results --step 9
    replay-runtime reconcile sources.json
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from replay_runtime import __version__
from replay_runtime.config import get_settings
from replay_runtime.engine.fact_reconciler import FactReconciler
from replay_runtime.engine.request_executor import HttpRequestExecutor, RawResponse
from replay_runtime.engine.request_spec import RequestSpec
from replay_runtime.exceptions import InvalidInputError, NetworkError
from replay_runtime.reporting.exporters import ResultExporter
from replay_runtime.transports.httpx_transport import HttpxTransport

app = typer.Typer(
    name="replay-runtime",
    help="Runtime helpers for recorded browser scripts",
    add_completion=False,
)

console = Console()


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


def _load_json(path: Path) -> Any:
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(2)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {path}: {e}[/red]")
        raise typer.Exit(2)


@app.command()
def request(
    spec_file: Path = typer.Argument(..., help="JSON file holding one request spec"),
    export_dir: Optional[Path] = typer.Option(None, "--export-dir", "-o", help="Write the result as JSON here"),
    step: int = typer.Option(1, "--step", "-s", help="Step number used in the export file name"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Transport timeout in seconds"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Execute one recorded request step without a browser.
    
    Storage-backed credentials need a live page and are skipped here;
    literal tokens and basic credentials are sent as recorded.
    """
    setup_logging(verbose)
    settings = get_settings()
    
    data = _load_json(spec_file)
    try:
        spec = RequestSpec.model_validate(data)
    except ValueError as e:
        console.print(f"[red]Invalid request spec: {e}[/red]")
        raise typer.Exit(2)
    
    effective_timeout = timeout if timeout is not None else settings.request.transport_timeout_s
    
    try:
        response = asyncio.run(_send(spec, effective_timeout, settings.request.verify_tls))
    except NetworkError as e:
        console.print(f"[red]Network error: {e.message}[/red]")
        raise typer.Exit(1)
    
    _print_response(response)
    
    if export_dir is not None:
        exporter = ResultExporter(
            export_dir,
            api_folder=settings.export.api_folder,
            database_folder=settings.export.database_folder,
        )
        path = exporter.export_api_result(response, step_index=step)
        console.print(f"[dim]Exported to {path}[/dim]")


async def _send(spec: RequestSpec, timeout: Optional[float], verify: bool) -> RawResponse:
    async with HttpxTransport(timeout=timeout, verify=verify) as transport:
        executor = HttpRequestExecutor(transport)
        return await executor.execute(spec)


def _print_response(response: RawResponse) -> None:
    color = "green" if response.ok else "red"
    request = response.request
    console.print(Panel.fit(
        f"[bold]{request.method if request else ''} {request.url if request else ''}[/bold]\n"
        f"[{color}]{response.status} {response.status_text}[/{color}] "
        f"[dim]({response.duration_ms:.0f}ms)[/dim]",
        border_style=color,
    ))
    body = response.body
    if isinstance(body, (dict, list)):
        console.print_json(json.dumps(body, default=str))
    elif body:
        console.print(str(body))


@app.command()
def reconcile(
    sources_file: Path = typer.Argument(..., help='JSON file: {"ui": [...], "db": [...], "api": [...]}'),
    ui_marker: Optional[str] = typer.Option(None, "--ui-marker", help="Marker of the UI fragment"),
    db_field: Optional[str] = typer.Option(None, "--db-field", help="Field read from the first DB row"),
    api_field: Optional[str] = typer.Option(None, "--api-field", help="Field read from the API payload"),
):
    """
    Check that UI, database and API sources report the same count.
    
    Exit code 0 when they agree, 1 when they don't, 2 on invalid input.
    """
    settings = get_settings().reconcile
    data = _load_json(sources_file)
    if not isinstance(data, dict):
        console.print("[red]Sources file must hold a JSON object[/red]")
        raise typer.Exit(2)
    
    reconciler = FactReconciler(
        ui_marker=ui_marker or settings.ui_marker,
        db_field=db_field or settings.db_field,
        api_field=api_field or settings.api_field,
    )
    try:
        result = reconciler.reconcile(data.get("ui"), data.get("db"), data.get("api"))
    except InvalidInputError as e:
        console.print(f"[red]Invalid sources: {e.message}[/red]")
        raise typer.Exit(2)
    
    table = Table(title="Fact reconciliation")
    table.add_column("Source")
    table.add_column("Value")
    for name, value in (("UI", result.ui_value), ("DB", result.db_value), ("API", result.api_value)):
        table.add_row(name, "[dim]not found[/dim]" if value is None else str(value))
    console.print(table)
    
    if result.agreed:
        console.print("[green]✓ Sources agree[/green]")
        return
    console.print("[red]✗ Sources disagree[/red]")
    raise typer.Exit(1)


@app.command()
def version():
    """Show the version."""
    console.print(f"replay-runtime {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
