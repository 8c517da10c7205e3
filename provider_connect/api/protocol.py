"""Request/response frames and parameter models for ``POST /rpc``."""

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from provider_connect.core.errors import ErrorShape


NonEmptyStr = Annotated[str, Field(min_length=1)]


class RpcRequest(BaseModel):
    """Incoming RPC frame."""

    id: str | None = None
    method: NonEmptyStr
    params: dict[str, Any] = Field(default_factory=dict)

    @field_validator("params", mode="before")
    @classmethod
    def none_params_as_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class RpcResponse(BaseModel):
    """Outgoing RPC frame; exactly one of ``payload`` or ``error`` is set."""

    id: str | None = None
    ok: bool
    payload: Any | None = None
    error: ErrorShape | None = None


class _Params(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class AuthListParams(_Params):
    pass


class OAuthStartParams(_Params):
    provider_id: NonEmptyStr = Field(alias="providerId")
    method_id: str | None = Field(default=None, alias="methodId")
    redirect_uri: str | None = Field(default=None, alias="redirectUri")
    success_redirect_base: str | None = Field(
        default=None, alias="successRedirectBase"
    )


class ApiKeySetParams(_Params):
    provider_id: NonEmptyStr = Field(alias="providerId")
    method_id: str | None = Field(default=None, alias="methodId")
    api_key: str = Field(alias="apiKey")


def format_validation_errors(exc: ValidationError) -> str:
    """Render pydantic errors as ``at <loc>: <msg>`` items joined by ``; ``."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        parts.append(f"at {loc}: {msg}" if loc else msg)
    return "; ".join(parts)
