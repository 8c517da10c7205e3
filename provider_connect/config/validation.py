"""Schema and plugin validation for the gateway configuration document."""

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError

from .schema import GatewayConfig


@dataclass(frozen=True)
class ConfigIssue:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path or '<root>'}: {self.message}"


@dataclass
class ConfigValidationResult:
    """Outcome of validating a configuration document.

    ``config`` is a copy of the validated document and is only set when ``ok``.
    """

    ok: bool
    config: dict[str, Any] | None = None
    issues: list[ConfigIssue] = field(default_factory=list)


def _issues_from_validation_error(
    exc: ValidationError, prefix: str = ""
) -> list[ConfigIssue]:
    issues = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        path = f"{prefix}.{loc}" if prefix and loc else (prefix or loc)
        issues.append(ConfigIssue(path=path, message=err.get("msg", "invalid")))
    return issues


def validate_config_schema(document: Any) -> ConfigValidationResult:
    """Check a document against the gateway schema only."""
    if not isinstance(document, Mapping):
        return ConfigValidationResult(
            ok=False, issues=[ConfigIssue(path="", message="config must be an object")]
        )
    try:
        GatewayConfig.model_validate(document)
    except ValidationError as e:
        return ConfigValidationResult(ok=False, issues=_issues_from_validation_error(e))
    return ConfigValidationResult(ok=True, config=copy.deepcopy(dict(document)))


def validate_config_object_with_plugins(
    document: Any,
    plugin_config_models: Mapping[str, type[BaseModel] | None],
) -> ConfigValidationResult:
    """Check a document against the schema and each plugin's config model.

    Args:
        document: Candidate configuration document
        plugin_config_models: Registered plugin names mapped to the pydantic
            model validating ``plugins.<name>`` (None when the plugin has no
            settings of its own)
    """
    result = validate_config_schema(document)
    if not result.ok:
        return result

    issues: list[ConfigIssue] = []
    plugins_section = document.get("plugins") or {}
    for name, entry in plugins_section.items():
        if name not in plugin_config_models:
            issues.append(ConfigIssue(path=f"plugins.{name}", message="unknown plugin"))
            continue
        model = plugin_config_models[name]
        if model is None:
            continue
        settings = {k: v for k, v in entry.items() if k != "enabled"}
        try:
            model.model_validate(settings)
        except ValidationError as e:
            issues.extend(_issues_from_validation_error(e, prefix=f"plugins.{name}"))

    if issues:
        return ConfigValidationResult(ok=False, issues=issues)
    return result
