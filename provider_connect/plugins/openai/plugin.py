"""OpenAI provider: API key or project token."""

from typing import Any

from provider_connect.plugins.base import BaseProviderPlugin, model_template
from provider_connect.plugins.types import (
    ApiKeyAuthMethod,
    ProviderDescriptor,
    TokenAuthMethod,
)

from .config import OpenAIPluginConfig


class OpenAIProviderPlugin(BaseProviderPlugin[OpenAIPluginConfig]):
    name = "openai"
    config_model = OpenAIPluginConfig

    def resolve_providers(
        self, config: dict[str, Any], workspace_dir: str | None
    ) -> list[ProviderDescriptor]:
        settings = self.settings_from(config)
        return [
            ProviderDescriptor(
                id="openai",
                label="OpenAI",
                docs_path="/providers/openai",
                aliases=("oai",),
                auth=(
                    ApiKeyAuthMethod(
                        id="api-key",
                        label="OpenAI API key",
                        hint="Create one at platform.openai.com/api-keys",
                    ),
                    TokenAuthMethod(id="token", label="Bearer token"),
                ),
                models=model_template(settings.api_base_url, settings.default_models),
            )
        ]


plugin = OpenAIProviderPlugin()
