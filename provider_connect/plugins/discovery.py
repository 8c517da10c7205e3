"""Plugin discovery for bundled and local provider plugins.

A plugin is a directory ``<name>/plugin.py`` whose module exports a
``plugin`` object implementing :class:`ProviderPlugin`.
"""

import importlib
import importlib.util
from pathlib import Path

from provider_connect.core.logging import get_logger

from .registry import ProviderRegistry
from .types import ProviderPlugin


logger = get_logger(__name__)

BUILTIN_PLUGINS_DIR = Path(__file__).parent


class PluginDiscovery:
    """Discovers and loads provider plugins from a directory."""

    def __init__(self, plugins_dir: Path, package: str | None = None):
        """Initialize plugin discovery.

        Args:
            plugins_dir: Directory containing plugin packages
            package: Import package of ``plugins_dir`` when it is importable;
                plugins are then loaded by module name instead of by path
        """
        self.plugins_dir = plugins_dir
        self.package = package
        self.discovered_plugins: dict[str, Path] = {}

    def discover_plugins(self) -> dict[str, Path]:
        """Map plugin names to their plugin.py files."""
        self.discovered_plugins.clear()

        if not self.plugins_dir.exists():
            logger.warning("plugins_directory_not_found", path=str(self.plugins_dir))
            return {}

        for item in sorted(self.plugins_dir.iterdir()):
            if item.is_dir() and not item.name.startswith("_"):
                plugin_file = item / "plugin.py"
                if plugin_file.exists():
                    self.discovered_plugins[item.name] = plugin_file
                    logger.debug(
                        "plugin_discovered", name=item.name, path=str(plugin_file)
                    )

        return self.discovered_plugins

    def load_plugin(self, name: str) -> ProviderPlugin | None:
        """Import a discovered plugin module and return its ``plugin`` export."""
        if name not in self.discovered_plugins:
            logger.warning("plugin_not_discovered", name=name)
            return None

        try:
            if self.package:
                module = importlib.import_module(f"{self.package}.{name}.plugin")
            else:
                spec = importlib.util.spec_from_file_location(
                    f"provider_connect_local_plugins.{name}.plugin",
                    self.discovered_plugins[name],
                )
                if not spec or not spec.loader:
                    logger.error("plugin_spec_creation_failed", name=name)
                    return None
                module = importlib.util.module_from_spec(spec)
                spec.loader.exec_module(module)
        except Exception as e:
            logger.error("plugin_load_failed", name=name, error=str(e), exc_info=e)
            return None

        plugin = getattr(module, "plugin", None)
        if not isinstance(plugin, ProviderPlugin):
            logger.error(
                "plugin_export_invalid",
                name=name,
                msg="Module must export a 'plugin' provider plugin object",
            )
            return None
        return plugin

    def load_all(self) -> list[ProviderPlugin]:
        self.discover_plugins()
        plugins = []
        for name in self.discovered_plugins:
            plugin = self.load_plugin(name)
            if plugin is not None:
                plugins.append(plugin)
        logger.info(
            "plugins_loaded",
            count=len(plugins),
            names=[p.name for p in plugins],
            category="plugin",
        )
        return plugins


def load_plugins_into(
    registry: ProviderRegistry, local_plugins_dir: Path | None = None
) -> ProviderRegistry:
    """Register the bundled plugins, then any found in ``local_plugins_dir``."""
    sources = [PluginDiscovery(BUILTIN_PLUGINS_DIR, package=__package__)]
    if local_plugins_dir is not None:
        sources.append(PluginDiscovery(local_plugins_dir))

    for discovery in sources:
        for plugin in discovery.load_all():
            try:
                registry.register(plugin)
            except ValueError as e:
                logger.warning(
                    "plugin_registration_skipped", name=plugin.name, error=str(e)
                )
    return registry
