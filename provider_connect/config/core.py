"""Core configuration settings - server, logging, OAuth and paths."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


# === Server Configuration ===


class ServerSettings(BaseModel):
    """Server-specific configuration settings."""

    host: str = Field(
        default="127.0.0.1",
        description="Server host address",
    )

    port: int = Field(
        default=18789,
        description="Server port number",
        ge=1,
        le=65535,
    )

    reload: bool = Field(
        default=False,
        description="Enable auto-reload for development",
    )


# === Logging Configuration ===


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    format: str = Field(
        default="auto",
        description=(
            "Output format: 'rich' for console, 'json' for production, "
            "'auto' to pick by TTY"
        ),
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize and check the level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        fmt = v.lower()
        if fmt not in {"auto", "rich", "json"}:
            raise ValueError(f"Invalid log format: {v}")
        return fmt


# === OAuth Configuration ===


class OAuthSettings(BaseModel):
    """Provider OAuth round-trip settings."""

    state_ttl_seconds: float = Field(
        default=600.0,
        description="Lifetime of a pending authorization state token",
        gt=0,
    )

    callback_path: str = Field(
        default="/auth/callback",
        description="Path the provider redirects the browser back to",
    )

    @field_validator("callback_path")
    @classmethod
    def validate_callback_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("callback_path must start with '/'")
        return v.rstrip("/") or "/"


# === Paths ===


def _default_state_dir() -> Path:
    return Path.home() / ".provider-connect"


class PathSettings(BaseModel):
    """Filesystem locations for gateway state."""

    state_dir: Path = Field(
        default_factory=_default_state_dir,
        description="Root directory for agent state and the gateway config file",
    )

    config_file: Path | None = Field(
        default=None,
        description="Gateway configuration file (defaults to <state_dir>/gateway.json)",
    )

    @property
    def resolved_config_file(self) -> Path:
        if self.config_file is not None:
            return self.config_file.expanduser()
        return self.state_dir.expanduser() / "gateway.json"
