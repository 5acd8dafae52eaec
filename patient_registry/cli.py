"""Command Line Interface for the Patient Registry.

Examples:
    patient-registry serve --port 8080
    patient-registry openapi --output openapi.json
"""

import json
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from patient_registry.api.logging_config import setup_logging
from patient_registry.api.main import create_app
from patient_registry.infrastructure.settings import APP_NAME, APP_VERSION, Settings
from patient_registry.main import build_container

app = typer.Typer(
    name="patient-registry",
    help="Patient Registry: manage patients, their conditions and attachments",
    add_completion=False
)
console = Console()


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind host (default: PR_HOST or localhost)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port (default: PR_PORT or 8080)"),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Logging level (default: PR_LOG_LEVEL)"),
    json_logs: Optional[bool] = typer.Option(None, "--json-logs/--plain-logs", help="Emit JSON log lines"),
) -> None:
    """Run the registry HTTP API.

    The store lives in memory: all records are lost when the server stops.
    """
    settings = Settings()
    try:
        server_config = settings.server
        auth_config = settings.auth
    except ValueError as e:
        console.print(f"[red]✗[/red] Invalid configuration: {str(e)}")
        raise typer.Exit(code=1)

    if log_level:
        settings.log_level = log_level
    if json_logs is not None:
        settings.json_logs = json_logs
    bind_host = host or server_config.host
    bind_port = port or server_config.port

    setup_logging(use_json=settings.json_logs, log_level=settings.log_level)

    table = Table(title=f"{APP_NAME} {APP_VERSION}", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Address", f"http://{bind_host}:{bind_port}")
    table.add_row("Docs", f"http://{bind_host}:{bind_port}/public/docs")
    table.add_row("Token issuer", auth_config.issuer)
    table.add_row("Token lifetime", f"{auth_config.token_expiration_minutes} min")
    table.add_row("Log level", settings.log_level.upper())
    table.add_row("JSON logs", str(settings.json_logs))
    console.print(table)

    uvicorn.run(create_app(build_container(settings)), host=bind_host, port=bind_port, log_level="info")


@app.command()
def openapi(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the schema to this file instead of stdout"),
) -> None:
    """Print the OpenAPI schema of the registry API."""
    schema = json.dumps(create_app(build_container()).openapi(), indent=2)
    if output is None:
        typer.echo(schema)
        return
    output.write_text(schema)
    console.print(f"[green]✓[/green] OpenAPI schema written to {output}")


if __name__ == "__main__":
    app()
