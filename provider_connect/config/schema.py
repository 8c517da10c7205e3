"""Schema for the gateway configuration document.

The document on disk uses camelCase keys. Unknown keys are kept so that
sections owned by other subsystems survive a validate/write cycle.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


ModelProviderAuthMode = Literal["api-key", "oauth", "token", "aws-sdk"]
AuthProfileMode = Literal["api_key", "oauth", "token"]


class _Document(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class ModelDefinition(_Document):
    """A model offered by a provider connection."""

    id: Annotated[str, Field(min_length=1)]
    name: str | None = None
    context_window: int | None = Field(default=None, alias="contextWindow", ge=1)
    max_tokens: int | None = Field(default=None, alias="maxTokens", ge=1)


class ModelProviderConfig(_Document):
    """Connection block stored under ``models.providers.<id>``."""

    base_url: Annotated[str, Field(alias="baseUrl", min_length=1)]
    models: list[ModelDefinition]
    api_key: str | None = Field(default=None, alias="apiKey")
    auth: ModelProviderAuthMode | None = None
    api: str | None = None


class ModelsConfig(_Document):
    mode: Literal["merge", "replace"] | None = None
    providers: dict[str, ModelProviderConfig] = Field(default_factory=dict)


class AuthProfileConfig(_Document):
    """Reference to a stored credential profile."""

    provider: Annotated[str, Field(min_length=1)]
    mode: AuthProfileMode
    email: str | None = None


class AuthConfig(_Document):
    profiles: dict[str, AuthProfileConfig] = Field(default_factory=dict)
    order: dict[str, list[str]] = Field(default_factory=dict)


class AgentEntry(_Document):
    id: Annotated[str, Field(min_length=1)]
    default: bool = False
    workspace: str | None = None
    agent_dir: str | None = Field(default=None, alias="agentDir")


class AgentDefaults(_Document):
    workspace: str | None = None


class AgentsConfig(_Document):
    defaults: AgentDefaults = Field(default_factory=AgentDefaults)
    entries: list[AgentEntry] = Field(default_factory=list, alias="list")


class PluginEntryConfig(_Document):
    enabled: bool = True


class GatewayConfig(_Document):
    """Top-level gateway configuration document."""

    models: ModelsConfig | None = None
    auth: AuthConfig | None = None
    agents: AgentsConfig | None = None
    plugins: dict[str, PluginEntryConfig] = Field(default_factory=dict)

