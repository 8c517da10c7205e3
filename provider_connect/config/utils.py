"""Configuration file discovery utilities."""

import os
from pathlib import Path


def get_xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, falling back to ~/.config."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def get_provider_connect_config_dir() -> Path:
    return get_xdg_config_home() / "provider-connect"


def find_toml_config_file() -> Path | None:
    """Find the TOML settings file.

    Searches in the following order:
    1. .provider-connect.toml in current directory
    2. config.toml in XDG_CONFIG_HOME/provider-connect/

    Returns:
        Path to the first found configuration file, or None if not found.
    """
    current_dir_config = Path.cwd() / ".provider-connect.toml"
    if current_dir_config.exists():
        return current_dir_config

    xdg_config = get_provider_connect_config_dir() / "config.toml"
    if xdg_config.exists():
        return xdg_config

    return None
