from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import typer
import uvicorn

from app.main import create_app
from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from datastore.mongo import StorageConnectionError, build_gateway
from logging_config import configure_logging
from settings import ConfigurationError, get_settings

logger = logging.getLogger(__name__)


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Run the weather dashboard service or send it sensor readings.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:3000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for the service to answer.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("serve")
def serve_command(
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Override the PORT setting."),
) -> None:
    """Connect to MongoDB, then start the HTTP server."""
    configure_logging()
    try:
        settings = get_settings()
    except ConfigurationError as exc:
        logger.critical("Fatal: %s", exc)
        raise typer.Exit(code=1) from exc

    gateway = build_gateway(settings)
    try:
        gateway.connect()
    except StorageConnectionError as exc:
        logger.critical("Fatal: %s", exc)
        raise typer.Exit(code=1) from exc

    listen_port = port or settings.port
    logger.info("Server running at http://localhost:%s", listen_port)
    uvicorn.run(create_app(gateway=gateway), host=settings.host, port=listen_port, log_config=None)


@app.command("send")
def send_command(
    ctx: typer.Context,
    temperature: float = typer.Option(..., "--temperature", "-t", help="Temperature in Celsius."),
    humidity: float = typer.Option(..., "--humidity", "-H", help="Relative humidity in percent."),
) -> None:
    """Post one reading to /api/sensor, as a device would."""
    state = _get_state(ctx)
    typer.echo(f"Sending reading to {state.config.base_url} ...")
    message = state.client.send_reading(temperature, humidity)
    typer.secho(message, fg=typer.colors.GREEN)
