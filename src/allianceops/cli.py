"""CLI interface for AllianceOps."""

import asyncio
import json

import httpx
import typer
from rich.console import Console
from rich.table import Table

from allianceops.config import configure_logging, get_settings
from allianceops.services.gateway import (
    AuthenticationRequiredError,
    ResourceFetchError,
    ResourceGateway,
)

app = typer.Typer(
    name="allianceops",
    help="AllianceOps - cached FRC data from TBA and Statbotics.",
    no_args_is_help=True,
)
console = Console()


def run_async(coro):
    """Run async function in sync context."""
    return asyncio.run(coro)


@app.command()
def fetch(
    path: str = typer.Argument(..., help="API path, e.g. 'events?year=2025'"),
    base: str = typer.Option(None, "--base", "-b", help="API base URL"),
    show_data: bool = typer.Option(False, "--data", "-d", help="Print the payload"),
):
    """Fetch a resource through the retrying client gateway."""
    settings = get_settings()
    configure_logging(settings.log_level)

    async def _fetch():
        gateway = ResourceGateway.from_settings(settings)
        if base:
            gateway.base_url = base.rstrip("/")
        async with gateway:
            return await gateway.fetch_resource(path)

    try:
        envelope = run_async(_fetch())
    except AuthenticationRequiredError:
        console.print(f"[yellow]Authentication required for {path}[/yellow]")
        raise typer.Exit(1)
    except ResourceFetchError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)
    except httpx.TransportError as e:
        console.print(f"[red]Cannot reach {base or settings.client_api_base}: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=path)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    data = envelope.data
    size = len(data) if isinstance(data, (list, dict)) else (0 if data is None else 1)
    table.add_row("items", str(size))

    meta = envelope.meta
    if meta:
        stale = "[red]yes[/red]" if meta.stale else "[green]no[/green]"
        table.add_row("last refresh", meta.last_refresh.isoformat())
        table.add_row("freshness", meta.freshness_class.value)
        table.add_row("stale", stale)
    else:
        table.add_row("meta", "[dim]uncached endpoint[/dim]")

    console.print(table)
    if show_data:
        console.print_json(json.dumps(data))


@app.command()
def server(
    host: str = typer.Option(None, "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(None, "--port", "-p", help="Port to bind to"),
):
    """Start the API server."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    host = host or settings.api_host
    port = port or settings.api_port

    console.print(f"[green]Starting AllianceOps server at http://{host}:{port}[/green]")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    uvicorn.run(
        "allianceops.main:app",
        host=host,
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    app()
