"""Resolve the default agent and its directories from the gateway config."""

from pathlib import Path
from typing import Any

from provider_connect.config.merge_patch import is_plain_record


DEFAULT_AGENT_ID = "main"


def _agent_entries(config: dict[str, Any]) -> list[dict[str, Any]]:
    agents = config.get("agents")
    if not is_plain_record(agents):
        return []
    entries = agents.get("list")
    if not isinstance(entries, list):
        return []
    return [
        e for e in entries if is_plain_record(e) and isinstance(e.get("id"), str)
    ]


def _find_entry(config: dict[str, Any], agent_id: str) -> dict[str, Any] | None:
    for entry in _agent_entries(config):
        if entry["id"] == agent_id:
            return entry
    return None


def _expand(path: str) -> str:
    return str(Path(path).expanduser())


def resolve_default_agent_id(config: dict[str, Any]) -> str:
    """The agent flagged ``default``, else the first listed, else ``main``."""
    entries = _agent_entries(config)
    for entry in entries:
        if entry.get("default") is True:
            return str(entry["id"])
    if entries:
        return str(entries[0]["id"])
    return DEFAULT_AGENT_ID


def resolve_agent_dir(config: dict[str, Any], agent_id: str, state_dir: Path) -> str:
    entry = _find_entry(config, agent_id)
    if entry and isinstance(entry.get("agentDir"), str) and entry["agentDir"].strip():
        return _expand(entry["agentDir"].strip())
    return str(state_dir.expanduser() / "agents" / agent_id / "agent")


def resolve_agent_workspace_dir(
    config: dict[str, Any], agent_id: str, state_dir: Path
) -> str:
    entry = _find_entry(config, agent_id)
    if entry and isinstance(entry.get("workspace"), str) and entry["workspace"].strip():
        return _expand(entry["workspace"].strip())

    is_default = agent_id == resolve_default_agent_id(config)
    if is_default:
        agents = config.get("agents")
        defaults = agents.get("defaults") if is_plain_record(agents) else None
        workspace = defaults.get("workspace") if is_plain_record(defaults) else None
        if isinstance(workspace, str) and workspace.strip():
            return _expand(workspace.strip())
        return str(state_dir.expanduser() / "workspace")
    return str(state_dir.expanduser() / f"workspace-{agent_id}")
