"""Base class for bundled provider plugins."""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from provider_connect.config.merge_patch import is_plain_record
from provider_connect.core.logging import get_plugin_logger

from .types import ProviderDescriptor


ConfigT = TypeVar("ConfigT", bound=BaseModel)


def model_template(base_url: str, model_ids: list[str]) -> dict[str, Any]:
    """Default connection block for ``models.providers.<id>``."""
    return {
        "baseUrl": base_url,
        "models": [{"id": model_id, "name": model_id} for model_id in model_ids],
    }


class BaseProviderPlugin(ABC, Generic[ConfigT]):
    """Reads its settings from ``plugins.<name>`` and builds descriptors."""

    name: ClassVar[str]
    config_model: ClassVar[type[BaseModel]]

    def __init__(self) -> None:
        self.logger = get_plugin_logger(self.name)

    def settings_from(self, config: dict[str, Any]) -> ConfigT:
        """Plugin settings from the config document, defaults on bad input."""
        plugins = config.get("plugins")
        entry = plugins.get(self.name) if is_plain_record(plugins) else None
        data: dict[str, Any] = {}
        if is_plain_record(entry):
            data = {k: v for k, v in entry.items() if k != "enabled"}
        try:
            return self.config_model.model_validate(data)  # type: ignore[return-value]
        except ValidationError as e:
            self.logger.warning(
                "plugin_config_invalid_using_defaults", error=str(e), category="plugin"
            )
            return self.config_model()  # type: ignore[return-value]

    @abstractmethod
    def resolve_providers(
        self, config: dict[str, Any], workspace_dir: str | None
    ) -> list[ProviderDescriptor]: ...
