"""FastAPI application factory for the provider connection gateway."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from provider_connect import __version__
from provider_connect.api.middleware.errors import setup_error_handlers
from provider_connect.api.routes import auth_callback, health, rpc
from provider_connect.config.settings import get_settings
from provider_connect.core.logging import get_logger
from provider_connect.services.container import ServiceContainer


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log startup and close the service container on shutdown."""
    container: ServiceContainer = app.state.service_container
    settings = container.settings

    logger.info(
        "server_start",
        host=settings.server.host,
        port=settings.server.port,
        url=settings.server_url,
        config_file=str(settings.paths.resolved_config_file),
        category="lifecycle",
    )
    registry = container.get_provider_registry()
    logger.debug("provider_plugins_ready", plugins=registry.names(), category="plugin")

    yield

    logger.debug("server_stop", category="lifecycle")
    await container.close()


def create_app(container: ServiceContainer | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        container: Optional pre-built service container. If None, one is
            built from get_settings().

    Returns:
        Configured FastAPI application instance.
    """
    if container is None:
        container = ServiceContainer(get_settings())

    app = FastAPI(
        title="Provider Connect",
        description="Connects model providers to the gateway through OAuth or API keys",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.service_container = container

    setup_error_handlers(app)

    app.include_router(health.router)
    app.include_router(rpc.router)
    app.include_router(
        auth_callback.create_router(container.settings.oauth.callback_path)
    )

    return app
