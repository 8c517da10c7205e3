"""Main entry point for the provider connection gateway."""

import os
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
import uvicorn
from rich.console import Console

from provider_connect import __version__
from provider_connect.config.settings import ConfigurationError, Settings
from provider_connect.core.logging import get_logger, setup_logging


app = typer.Typer(
    rich_markup_mode="rich",
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"provider-connect {__version__}")
        raise typer.Exit()


def use_json_logs(log_format: str) -> bool:
    """``auto`` renders JSON unless stderr is a terminal."""
    if log_format == "auto":
        return not sys.stderr.isatty()
    return log_format == "json"


@app.callback()
def app_main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """Connect model providers to the gateway through OAuth or API keys."""


@app.command()
def serve(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML settings file",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    host: Annotated[str | None, typer.Option(help="Host to bind to")] = None,
    port: Annotated[int | None, typer.Option(help="Port to listen on")] = None,
    reload: Annotated[
        bool | None, typer.Option("--reload/--no-reload", help="Auto-reload on changes")
    ] = None,
    log_level: Annotated[
        str | None, typer.Option(help="DEBUG, INFO, WARNING, ERROR or CRITICAL")
    ] = None,
    gateway_config: Annotated[
        Path | None,
        typer.Option(help="Gateway JSON config file holding provider settings"),
    ] = None,
) -> None:
    """Start the HTTP server."""
    overrides: dict[str, Any] = {}
    server = {
        k: v
        for k, v in {"host": host, "port": port, "reload": reload}.items()
        if v is not None
    }
    if server:
        overrides["server"] = server
    if log_level is not None:
        overrides["logging"] = {"level": log_level.upper()}
    if gateway_config is not None:
        overrides["paths"] = {"config_file": gateway_config}

    try:
        settings = Settings.from_config(config_path=config, **overrides)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1) from e

    setup_logging(
        json_logs=use_json_logs(settings.logging.format),
        log_level_name=settings.logging.level,
    )
    logger = get_logger(__name__)
    logger.debug(
        "server_starting",
        host=settings.server.host,
        port=settings.server.port,
        url=settings.server_url,
        category="lifecycle",
    )

    if settings.server.reload:
        # the reloader imports the app in a fresh process that only sees env
        if config is not None:
            os.environ["PROVIDER_CONNECT_CONFIG_FILE"] = str(config)
        uvicorn.run(
            app="provider_connect.api.app:create_app",
            factory=True,
            host=settings.server.host,
            port=settings.server.port,
            reload=True,
            reload_includes=["provider_connect"],
            log_config=None,
            server_header=False,
        )
        return

    from provider_connect.api.app import create_app
    from provider_connect.services.container import ServiceContainer

    uvicorn.run(
        app=create_app(ServiceContainer(settings)),
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
        server_header=False,
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
