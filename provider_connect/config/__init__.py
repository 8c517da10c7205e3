"""Settings and gateway configuration document handling."""

from .core import LoggingSettings, OAuthSettings, PathSettings, ServerSettings
from .legacy import LegacyMigrationResult, apply_legacy_migrations
from .merge_patch import merge_config_patch
from .settings import ConfigurationError, Settings, get_settings
from .store import ConfigFileStore, ConfigIOError, ConfigSnapshot
from .validation import (
    ConfigIssue,
    ConfigValidationResult,
    validate_config_object_with_plugins,
    validate_config_schema,
)


__all__ = [
    "ConfigFileStore",
    "ConfigIOError",
    "ConfigIssue",
    "ConfigSnapshot",
    "ConfigValidationResult",
    "ConfigurationError",
    "LegacyMigrationResult",
    "LoggingSettings",
    "OAuthSettings",
    "PathSettings",
    "ServerSettings",
    "Settings",
    "apply_legacy_migrations",
    "get_settings",
    "merge_config_patch",
    "validate_config_object_with_plugins",
    "validate_config_schema",
]
