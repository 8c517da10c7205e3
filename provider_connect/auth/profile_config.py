"""Reflect stored credential profiles in the gateway configuration."""

from typing import Any

from provider_connect.config.merge_patch import is_plain_record

from .models import CredentialMode


def apply_auth_profile_config(
    config: dict[str, Any],
    *,
    profile_id: str,
    provider: str,
    mode: CredentialMode,
    email: str | None = None,
) -> dict[str, Any]:
    """Return a copy of ``config`` referencing the profile under ``auth``.

    Sets ``auth.profiles[profile_id]`` to the provider and mode. When an
    explicit ``auth.order[provider]`` list exists the profile moves to its
    front so the newest credential is tried first.
    """
    auth = dict(config["auth"]) if is_plain_record(config.get("auth")) else {}
    profiles = dict(auth["profiles"]) if is_plain_record(auth.get("profiles")) else {}

    entry: dict[str, Any] = {"provider": provider, "mode": mode}
    if email:
        entry["email"] = email
    profiles[profile_id] = entry
    auth["profiles"] = profiles

    order = auth.get("order")
    if is_plain_record(order) and isinstance(order.get(provider), list):
        existing = [pid for pid in order[provider] if pid != profile_id]
        auth["order"] = {**order, provider: [profile_id, *existing]}

    return {**config, "auth": auth}
