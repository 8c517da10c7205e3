"""Health check endpoint."""

from typing import Any

from fastapi import APIRouter, Response

from provider_connect import __version__
from provider_connect.core.logging import get_logger


router = APIRouter(tags=["health"])
logger = get_logger(__name__)


@router.get("/health")
async def health_check(response: Response) -> dict[str, Any]:
    """Liveness check following the IETF health check response format."""
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    logger.debug("health_check_request")
    return {
        "status": "pass",
        "version": __version__,
        "output": "Application process is running",
    }
