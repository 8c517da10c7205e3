import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from provider_connect.core.logging import get_logger

from .core import LoggingSettings, OAuthSettings, PathSettings, ServerSettings
from .utils import find_toml_config_file


__all__ = ["Settings", "ConfigurationError", "get_settings"]


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


class Settings(BaseSettings):
    """
    Configuration settings for the provider-connect gateway.

    Settings are loaded from environment variables, .env files, and TOML configuration files.
    Environment variables take precedence over TOML values.
    TOML configuration files are looked up in the following order:
    1. .provider-connect.toml in current directory
    2. config.toml in XDG_CONFIG_HOME/provider-connect/
    """

    model_config = SettingsConfigDict(
        env_prefix="PROVIDER_CONNECT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    server: ServerSettings = Field(
        default_factory=ServerSettings,
        description="Server configuration settings",
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    oauth: OAuthSettings = Field(
        default_factory=OAuthSettings,
        description="OAuth round-trip configuration",
    )

    paths: PathSettings = Field(
        default_factory=PathSettings,
        description="State directory and gateway config file location",
    )

    enable_local_plugins: bool = Field(
        default=False,
        description="Also discover provider plugins from plugins_dir",
    )

    plugins_dir: Path | None = Field(
        default=None,
        description="Directory scanned for <name>/plugin.py provider plugins",
    )

    @property
    def server_url(self) -> str:
        """Get the complete server URL."""
        return f"http://{self.server.host}:{self.server.port}"

    @classmethod
    def load_toml_config(cls, toml_path: Path) -> dict[str, Any]:
        """Load configuration from a TOML file."""
        try:
            with toml_path.open("rb") as f:
                return tomllib.load(f)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read TOML config file {toml_path}: {e}"
            ) from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {toml_path}: {e}") from e

    @classmethod
    def from_config(
        cls,
        config_path: Path | str | None = None,
        **kwargs: Any,
    ) -> "Settings":
        """Create Settings from a TOML file, environment and keyword overrides."""
        if config_path is None:
            config_path_env = os.environ.get("PROVIDER_CONNECT_CONFIG_FILE")
            if config_path_env:
                config_path = Path(config_path_env)

        if isinstance(config_path, str):
            config_path = Path(config_path)

        if config_path is None:
            config_path = find_toml_config_file()

        config_data: dict[str, Any] = {}
        if config_path and config_path.exists():
            config_data = cls.load_toml_config(config_path)
            get_logger(__name__).info(
                "config_file_loaded", path=str(config_path), category="config"
            )

        settings = cls()
        data = settings.model_dump()

        for key, value in config_data.items():
            if key not in cls.model_fields:
                continue
            current = data.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                for nested_key, nested_value in value.items():
                    env_key = f"PROVIDER_CONNECT_{key.upper()}__{nested_key.upper()}"
                    if os.getenv(env_key) is None:
                        current[nested_key] = nested_value
            elif os.getenv(f"PROVIDER_CONNECT_{key.upper()}") is None:
                data[key] = value

        for key, value in kwargs.items():
            current = data.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                current.update(value)
            else:
                data[key] = value

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            source = f" in {config_path}" if config_data else ""
            raise ConfigurationError(f"Invalid configuration{source}: {e}") from e


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return Settings.from_config()
