"""Dependency injection container for the provider connection services."""

from collections.abc import Callable
from typing import Any, TypeVar, cast

import structlog

from provider_connect.auth.oauth.state_store import OAuthStateStore
from provider_connect.config.settings import Settings
from provider_connect.config.store import ConfigFileStore
from provider_connect.plugins.discovery import load_plugins_into
from provider_connect.plugins.registry import ProviderRegistry

from .provider_auth import ProviderAuthService


logger = structlog.get_logger(__name__)

T = TypeVar("T")


class ServiceContainer:
    """Owns the long-lived collaborators shared by every request.

    Services are built lazily from registered factories, so tests can swap any
    of them by registering an instance before first use.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._services: dict[object, Any] = {}
        self._factories: dict[object, Callable[[], Any]] = {}

        self.register_service(Settings, self.settings)
        self.register_service(ServiceContainer, self)
        self.register_service(ProviderRegistry, factory=self._create_registry)
        self.register_service(
            ConfigFileStore,
            factory=lambda: ConfigFileStore(settings.paths.resolved_config_file),
        )
        self.register_service(
            OAuthStateStore,
            factory=lambda: OAuthStateStore(
                ttl_seconds=settings.oauth.state_ttl_seconds
            ),
        )
        self.register_service(ProviderAuthService, factory=self._create_auth_service)

    def register_service(
        self,
        service_type: object,
        instance: Any | None = None,
        factory: Callable[[], Any] | None = None,
    ) -> None:
        """Register a service instance or factory."""
        if instance is not None:
            self._services[service_type] = instance
        elif factory is not None:
            self._services.pop(service_type, None)
            self._factories[service_type] = factory
        else:
            raise ValueError("Either instance or factory must be provided")

    def get_service(self, service_type: type[T]) -> T:
        """Get a service instance by type."""
        if service_type not in self._services:
            if service_type in self._factories:
                self._services[service_type] = self._factories[service_type]()
            else:
                type_name = getattr(service_type, "__name__", str(service_type))
                raise ValueError(f"Service {type_name} not registered")
        return cast(T, self._services[service_type])

    def _create_registry(self) -> ProviderRegistry:
        local_dir = (
            self.settings.plugins_dir if self.settings.enable_local_plugins else None
        )
        return load_plugins_into(ProviderRegistry(), local_dir)

    def _create_auth_service(self) -> ProviderAuthService:
        return ProviderAuthService(
            registry=self.get_provider_registry(),
            config_store=self.get_service(ConfigFileStore),
            state_store=self.get_service(OAuthStateStore),
            state_dir=self.settings.paths.state_dir.expanduser(),
            callback_path=self.settings.oauth.callback_path,
        )

    def get_provider_registry(self) -> ProviderRegistry:
        """Get the provider plugin registry."""
        return self.get_service(ProviderRegistry)

    async def close(self) -> None:
        """Release built services; pending OAuth states are discarded."""
        self._services.clear()
        self.register_service(Settings, self.settings)
        self.register_service(ServiceContainer, self)
        logger.debug("service_container_closed", category="lifecycle")
