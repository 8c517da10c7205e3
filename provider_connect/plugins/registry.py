"""Provider plugin registry.

Plugins register here at startup; request handlers ask the registry for the
live provider list on every call, so descriptors are never cached across
requests.
"""

from typing import Any

from pydantic import BaseModel

from provider_connect.config.merge_patch import is_plain_record
from provider_connect.core.logging import get_logger

from .types import ProviderDescriptor, ProviderPlugin


logger = get_logger(__name__)


def _plugin_enabled(config: dict[str, Any], name: str) -> bool:
    plugins = config.get("plugins")
    if not is_plain_record(plugins):
        return True
    entry = plugins.get(name)
    if not is_plain_record(entry):
        return True
    return entry.get("enabled", True) is not False


class ProviderRegistry:
    """Central registry for provider plugins."""

    def __init__(self) -> None:
        self._plugins: dict[str, ProviderPlugin] = {}
        logger.debug("provider_registry_initialized", category="plugin")

    def register(self, plugin: ProviderPlugin) -> None:
        """Register a provider plugin.

        Raises:
            ValueError: If a plugin with the same name is already registered
        """
        name = plugin.name
        if name in self._plugins:
            raise ValueError(f"Provider plugin '{name}' is already registered")
        self._plugins[name] = plugin
        logger.info("provider_plugin_registered", plugin=name, category="plugin")

    def unregister(self, name: str) -> None:
        if self._plugins.pop(name, None) is not None:
            logger.info("provider_plugin_unregistered", plugin=name, category="plugin")

    def get(self, name: str) -> ProviderPlugin | None:
        return self._plugins.get(name)

    def names(self) -> list[str]:
        return list(self._plugins)

    def config_models(self) -> dict[str, type[BaseModel] | None]:
        """Plugin names mapped to the model validating their config entry."""
        return {name: plugin.config_model for name, plugin in self._plugins.items()}

    def resolve_providers(
        self, config: dict[str, Any], workspace_dir: str | None = None
    ) -> list[ProviderDescriptor]:
        """Collect descriptors from every enabled plugin in registration order.

        A plugin that raises is logged and skipped so one broken plugin does
        not hide the others.
        """
        providers: list[ProviderDescriptor] = []
        for name, plugin in self._plugins.items():
            if not _plugin_enabled(config, name):
                logger.debug("provider_plugin_disabled", plugin=name, category="plugin")
                continue
            try:
                providers.extend(plugin.resolve_providers(config, workspace_dir))
            except Exception as e:
                logger.error(
                    "provider_plugin_resolve_failed",
                    plugin=name,
                    error=str(e),
                    exc_info=e,
                    category="plugin",
                )
        return providers

    def clear(self) -> None:
        self._plugins.clear()
