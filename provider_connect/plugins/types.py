"""Provider descriptors and auth method variants supplied by plugins."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from provider_connect.auth.models import CredentialProfile


AuthMethodKind = Literal["oauth", "api_key", "token"]


@dataclass(frozen=True)
class OAuthStartContext:
    config: dict[str, Any]
    agent_dir: str | None
    workspace_dir: str
    state: str
    redirect_uri: str


@dataclass(frozen=True)
class OAuthCallbackContext:
    config: dict[str, Any]
    agent_dir: str | None
    workspace_dir: str
    state: str
    code: str
    redirect_uri: str


class OAuthStartResult(BaseModel):
    url: str


class OAuthExchangeResult(BaseModel):
    """Credentials produced by a successful code exchange."""

    model_config = ConfigDict(populate_by_name=True)

    profiles: list[CredentialProfile] = Field(default_factory=list)
    config_patch: dict[str, Any] | None = Field(default=None, alias="configPatch")
    notes: list[str] = Field(default_factory=list)


OAuthStartFn = Callable[[OAuthStartContext], Awaitable[OAuthStartResult]]
OAuthCallbackFn = Callable[[OAuthCallbackContext], Awaitable[OAuthExchangeResult]]


@dataclass(frozen=True)
class OAuthAuthMethod:
    """Browser redirect flow.

    Either capability may be missing when a plugin offers an OAuth method
    that only works from the CLI.
    """

    id: str
    label: str
    hint: str | None = None
    oauth_start: OAuthStartFn | None = None
    oauth_callback: OAuthCallbackFn | None = None
    kind: Literal["oauth"] = field(default="oauth", init=False)


@dataclass(frozen=True)
class ApiKeyAuthMethod:
    id: str
    label: str
    hint: str | None = None
    kind: Literal["api_key"] = field(default="api_key", init=False)


@dataclass(frozen=True)
class TokenAuthMethod:
    id: str
    label: str
    hint: str | None = None
    kind: Literal["token"] = field(default="token", init=False)


AuthMethod = OAuthAuthMethod | ApiKeyAuthMethod | TokenAuthMethod


@dataclass(frozen=True)
class ProviderDescriptor:
    """A connectable provider and the ways to authenticate with it.

    ``models`` is the default connection block (``baseUrl`` plus ``models``)
    used when the gateway config has none for this provider yet.
    """

    id: str
    label: str
    auth: tuple[AuthMethod, ...] = ()
    docs_path: str | None = None
    aliases: tuple[str, ...] = ()
    models: dict[str, Any] | None = None


@runtime_checkable
class ProviderPlugin(Protocol):
    """Source of provider descriptors."""

    @property
    def name(self) -> str:
        """Plugin name, also the key of its ``plugins.<name>`` config entry."""
        ...

    @property
    def config_model(self) -> type[BaseModel] | None:
        """Model validating the plugin's config entry, if it has settings."""
        ...

    def resolve_providers(
        self, config: dict[str, Any], workspace_dir: str | None
    ) -> list[ProviderDescriptor]:
        """Providers offered for the given config snapshot and workspace."""
        ...
