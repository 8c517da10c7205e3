"""Shared dependencies for the API routes."""

from collections.abc import Callable
from typing import Annotated, TypeVar

from fastapi import Depends, HTTPException, Request

from provider_connect.core.logging import get_logger
from provider_connect.services.container import ServiceContainer
from provider_connect.services.provider_auth import ProviderAuthService


logger = get_logger(__name__)

T = TypeVar("T")


def get_service(service_type: type[T]) -> Callable[[Request], T]:
    """Return a dependency callable that fetches a service from the container."""

    def _get_service(request: Request) -> T:
        container: ServiceContainer | None = getattr(
            request.app.state, "service_container", None
        )
        if container is None:
            logger.error("service_container_missing_on_app_state", category="lifecycle")
            raise HTTPException(
                status_code=503, detail="Service container not initialized"
            )
        return container.get_service(service_type)

    return _get_service


ProviderAuthServiceDep = Annotated[
    ProviderAuthService, Depends(get_service(ProviderAuthService))
]
