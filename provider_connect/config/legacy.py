"""Upgrades older configuration document shapes to the current schema."""

import copy
from dataclasses import dataclass, field
from typing import Any

from .merge_patch import is_plain_record, merge_config_patch


_PROVIDER_KEY_RENAMES = {"api_key": "apiKey", "base_url": "baseUrl"}


@dataclass
class LegacyMigrationResult:
    """``next`` is None when the document needed no migration."""

    next: dict[str, Any] | None
    changes: list[str] = field(default_factory=list)


def _migrate_top_level_providers(doc: dict[str, Any], changes: list[str]) -> None:
    legacy = doc.pop("providers", None)
    if legacy is None:
        return
    if is_plain_record(legacy):
        models = doc.get("models")
        if not is_plain_record(models):
            models = {}
        existing = models.get("providers")
        if not is_plain_record(existing):
            existing = {}
        # entries already under models.providers take precedence
        models = {**models, "providers": merge_config_patch(legacy, existing)}
        doc["models"] = models
    changes.append("Moved providers → models.providers.")


def _migrate_provider_keys(doc: dict[str, Any], changes: list[str]) -> None:
    models = doc.get("models")
    if not is_plain_record(models) or not is_plain_record(models.get("providers")):
        return
    for provider_id, block in models["providers"].items():
        if not isinstance(block, dict):
            continue
        for old, new in _PROVIDER_KEY_RENAMES.items():
            if old not in block:
                continue
            value = block.pop(old)
            if new not in block:
                block[new] = value
            changes.append(f"Renamed models.providers.{provider_id}.{old} → {new}.")


def _migrate_profile_modes(doc: dict[str, Any], changes: list[str]) -> None:
    auth = doc.get("auth")
    if not is_plain_record(auth) or not is_plain_record(auth.get("profiles")):
        return
    for profile_id, profile in auth["profiles"].items():
        if isinstance(profile, dict) and profile.get("mode") == "api-key":
            profile["mode"] = "api_key"
            changes.append(f'Rewrote auth.profiles.{profile_id}.mode "api-key" → "api_key".')


def apply_legacy_migrations(document: dict[str, Any]) -> LegacyMigrationResult:
    """Apply every known migration to a copy of ``document``."""
    doc = copy.deepcopy(document)
    changes: list[str] = []

    _migrate_top_level_providers(doc, changes)
    _migrate_provider_keys(doc, changes)
    _migrate_profile_modes(doc, changes)

    if not changes:
        return LegacyMigrationResult(next=None)
    return LegacyMigrationResult(next=doc, changes=changes)
