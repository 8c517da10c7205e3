"""Data models for provider credentials."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_serializer


def _preview(secret: SecretStr | None) -> str:
    if secret is None:
        return "None"
    value = secret.get_secret_value()
    return f"'{value[:4]}...{value[-4:]}'" if len(value) > 12 else "'***'"


class _Credential(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    provider: Annotated[str, Field(min_length=1)]
    email: str | None = None


class ApiKeyCredential(_Credential):
    """Static API key issued by the provider."""

    type: Literal["api_key"] = "api_key"
    key: SecretStr

    @field_serializer("key", when_used="json")
    def _reveal_key(self, v: SecretStr) -> str:
        return v.get_secret_value()

    def __repr__(self) -> str:
        return f"ApiKeyCredential(provider='{self.provider}', key={_preview(self.key)})"


class OAuthCredential(_Credential):
    """Tokens obtained through an authorization-code exchange."""

    type: Literal["oauth"] = "oauth"
    access: SecretStr
    refresh: SecretStr | None = None
    expires: int | None = Field(default=None, description="Expiry, epoch milliseconds")
    account_id: str | None = Field(default=None, alias="accountId")

    @field_serializer("access", "refresh", when_used="json")
    def _reveal_tokens(self, v: SecretStr | None) -> str | None:
        return v.get_secret_value() if v is not None else None

    def __repr__(self) -> str:
        return (
            f"OAuthCredential(provider='{self.provider}', "
            f"access={_preview(self.access)}, refresh={_preview(self.refresh)}, "
            f"expires={self.expires})"
        )


class TokenCredential(_Credential):
    """Long-lived bearer token pasted by the operator."""

    type: Literal["token"] = "token"
    token: SecretStr
    expires: int | None = None

    @field_serializer("token", when_used="json")
    def _reveal_token(self, v: SecretStr) -> str:
        return v.get_secret_value()

    def __repr__(self) -> str:
        return f"TokenCredential(provider='{self.provider}', token={_preview(self.token)})"


AuthProfileCredential = Annotated[
    ApiKeyCredential | OAuthCredential | TokenCredential,
    Field(discriminator="type"),
]

CredentialMode = Literal["api_key", "oauth", "token"]


class CredentialProfile(BaseModel):
    """A credential ready to be persisted under ``profile_id``."""

    profile_id: Annotated[str, Field(alias="profileId", min_length=1)]
    credential: AuthProfileCredential

    model_config = ConfigDict(populate_by_name=True)


def credential_mode(
    credential: ApiKeyCredential | OAuthCredential | TokenCredential,
) -> CredentialMode:
    """Config-side auth mode for a stored credential."""
    if credential.type == "api_key":
        return "api_key"
    if credential.type == "token":
        return "token"
    return "oauth"
