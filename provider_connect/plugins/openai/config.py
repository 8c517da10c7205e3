"""Configuration for the OpenAI provider plugin."""

from pydantic import BaseModel, Field


class OpenAIPluginConfig(BaseModel):
    """Settings read from ``plugins.openai`` in the gateway config."""

    api_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL written into the default connection block",
    )
    default_models: list[str] = Field(
        default_factory=lambda: ["gpt-4.1", "gpt-4.1-mini"],
        description="Model ids offered by the default connection block",
    )
