"""Exception handlers for the provider connection API."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from provider_connect.core.errors import ProviderConnectError
from provider_connect.core.logging import get_logger


logger = get_logger(__name__)


def setup_error_handlers(app: FastAPI) -> None:
    """Map :class:`ProviderConnectError` raised outside the RPC frame to JSON."""

    @app.exception_handler(ProviderConnectError)
    async def provider_connect_error_handler(
        request: Request, exc: ProviderConnectError
    ) -> JSONResponse:
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            "request_failed",
            error_code=str(exc.code),
            error_message=exc.message,
            status_code=exc.status_code,
            request_method=request.method,
            request_url=str(request.url.path),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.to_shape().model_dump(mode="json", exclude_none=True)},
        )

    logger.debug("error_handlers_setup_completed")
