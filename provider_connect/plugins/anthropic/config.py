"""Configuration for the Anthropic provider plugin."""

from pydantic import BaseModel, Field


class AnthropicPluginConfig(BaseModel):
    """Settings read from ``plugins.anthropic`` in the gateway config."""

    client_id: str = Field(
        default="anthropic_client_production",
        description="OAuth client ID for Claude",
    )
    authorize_url: str = Field(
        default="https://claude.ai/oauth/authorize",
        description="Authorization endpoint URL",
    )
    token_url: str = Field(
        default="https://console.anthropic.com/v1/oauth/token",
        description="Token exchange endpoint URL",
    )
    scopes: list[str] = Field(
        default_factory=lambda: ["org:create_api_key", "user:profile", "user:inference"],
        description="OAuth scopes to request",
    )
    beta_version: str = Field(
        default="oauth-2025-04-20",
        description="Anthropic beta header sent with the token request",
    )
    user_agent: str = Field(
        default="provider-connect-anthropic/1.0",
        description="User agent for OAuth requests",
    )
    use_pkce: bool = Field(
        default=True,
        description="Whether to use PKCE flow",
    )
    api_base_url: str = Field(
        default="https://api.anthropic.com",
        description="Base URL written into the default connection block",
    )
    default_models: list[str] = Field(
        default_factory=lambda: ["claude-sonnet-4-5", "claude-opus-4-1"],
        description="Model ids offered by the default connection block",
    )
