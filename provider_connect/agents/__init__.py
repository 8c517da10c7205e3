"""Agent scope resolution."""

from .scope import (
    DEFAULT_AGENT_ID,
    resolve_agent_dir,
    resolve_agent_workspace_dir,
    resolve_default_agent_id,
)


__all__ = [
    "DEFAULT_AGENT_ID",
    "resolve_agent_dir",
    "resolve_agent_workspace_dir",
    "resolve_default_agent_id",
]
