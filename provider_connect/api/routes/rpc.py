"""RPC endpoint for the control UI.

Every call is answered with HTTP 200; success or failure travels in the
response frame's ``ok`` and ``error`` fields.
"""

import json
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Request
from pydantic import BaseModel, ValidationError

from provider_connect.api.dependencies import ProviderAuthServiceDep
from provider_connect.api.protocol import (
    ApiKeySetParams,
    AuthListParams,
    OAuthStartParams,
    RpcRequest,
    RpcResponse,
    format_validation_errors,
)
from provider_connect.core.errors import (
    ErrorCode,
    InvalidRequestError,
    ProviderConnectError,
    error_shape,
)
from provider_connect.core.logging import get_logger
from provider_connect.services.provider_auth import ProviderAuthService


router = APIRouter(tags=["rpc"])
logger = get_logger(__name__)

Handler = Callable[[ProviderAuthService, Any], Awaitable[Any]]


async def _auth_list(service: ProviderAuthService, params: AuthListParams) -> Any:
    return {"providers": await service.list_providers()}


async def _oauth_start(service: ProviderAuthService, params: OAuthStartParams) -> Any:
    return await service.start_oauth(
        params.provider_id,
        params.method_id,
        params.redirect_uri,
        params.success_redirect_base,
    )


async def _api_key_set(service: ProviderAuthService, params: ApiKeySetParams) -> Any:
    return await service.set_api_key(params.provider_id, params.method_id, params.api_key)


METHODS: dict[str, tuple[type[BaseModel], Handler]] = {
    "models.auth.list": (AuthListParams, _auth_list),
    "models.auth.oauthStart": (OAuthStartParams, _oauth_start),
    "models.auth.apiKeySet": (ApiKeySetParams, _api_key_set),
}


async def dispatch(service: ProviderAuthService, frame: RpcRequest) -> RpcResponse:
    """Validate params, run the method and wrap the outcome in a frame."""
    entry = METHODS.get(frame.method)
    if entry is None:
        return _failure(frame.id, InvalidRequestError(f"unknown method: {frame.method}"))
    params_model, handler = entry

    try:
        params = params_model.model_validate(frame.params)
    except ValidationError as e:
        return _failure(
            frame.id,
            InvalidRequestError(
                f"invalid {frame.method} params: {format_validation_errors(e)}"
            ),
        )

    try:
        payload = await handler(service, params)
    except ProviderConnectError as e:
        logger.info(
            "rpc_request_failed",
            method=frame.method,
            code=str(e.code),
            error=e.message,
            category="rpc",
        )
        return _failure(frame.id, e)
    except Exception as e:
        logger.error(
            "rpc_handler_crashed",
            method=frame.method,
            error=str(e),
            exc_info=e,
            category="rpc",
        )
        return RpcResponse(
            id=frame.id, ok=False, error=error_shape(ErrorCode.UNAVAILABLE, str(e))
        )

    logger.debug("rpc_request_completed", method=frame.method, category="rpc")
    return RpcResponse(id=frame.id, ok=True, payload=payload)


def _failure(request_id: str | None, exc: ProviderConnectError) -> RpcResponse:
    return RpcResponse(id=request_id, ok=False, error=exc.to_shape())


@router.post("/rpc", response_model=RpcResponse, response_model_exclude_none=True)
async def rpc(request: Request, service: ProviderAuthServiceDep) -> RpcResponse:
    """Dispatch one RPC frame."""
    body = await request.body()
    try:
        frame = RpcRequest.model_validate_json(body)
    except ValidationError as e:
        request_id = None
        try:
            raw = json.loads(body)
        except ValueError:
            raw = None
        if isinstance(raw, dict) and isinstance(raw.get("id"), str):
            request_id = raw["id"]
        return _failure(
            request_id,
            InvalidRequestError(f"invalid request frame: {format_validation_errors(e)}"),
        )
    return await dispatch(service, frame)
