"""Browser landing endpoint for provider OAuth redirects."""

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse

from provider_connect.api.dependencies import ProviderAuthServiceDep
from provider_connect.core.logging import get_logger
from provider_connect.services.provider_auth import OAuthCallbackParams


logger = get_logger(__name__)


def _trimmed(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def request_base_url(request: Request) -> str:
    """Origin the browser used, taken from the scheme and ``Host`` header."""
    host = request.headers.get("host") or request.url.netloc
    return f"{request.url.scheme}://{host}"


def create_router(callback_path: str) -> APIRouter:
    """Router serving ``GET <callback_path>``."""
    router = APIRouter(tags=["auth"])

    @router.get(callback_path, include_in_schema=False)
    async def oauth_callback(
        request: Request, service: ProviderAuthServiceDep
    ) -> RedirectResponse:
        query = request.query_params
        params = OAuthCallbackParams(
            state=_trimmed(query.get("state")),
            code=_trimmed(query.get("code")),
            error=_trimmed(query.get("error")),
            error_description=_trimmed(query.get("error_description")),
        )
        logger.debug(
            "oauth_callback_received",
            has_state=params.state is not None,
            has_code=params.code is not None,
            has_error=params.error is not None,
            category="auth",
        )

        redirect_uri = service.build_callback_uri(request_base_url(request))
        location = await service.handle_oauth_callback(params, redirect_uri)
        return RedirectResponse(url=location, status_code=302)

    return router
