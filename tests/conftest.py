"""Shared test fixtures for provider-connect tests.

Fixtures wire real components (config store, state store, registry, service)
against a temporary directory. Only the provider side is faked: the ``acme``
plugin records what it is asked to do and returns canned exchange results.
"""

from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from provider_connect.api.app import create_app
from provider_connect.auth.models import CredentialProfile, OAuthCredential
from provider_connect.auth.oauth.state_store import OAuthStateStore
from provider_connect.config.core import PathSettings
from provider_connect.config.settings import Settings
from provider_connect.config.store import ConfigFileStore
from provider_connect.core.logging import setup_logging
from provider_connect.plugins.registry import ProviderRegistry
from provider_connect.plugins.types import (
    ApiKeyAuthMethod,
    OAuthAuthMethod,
    OAuthCallbackContext,
    OAuthExchangeResult,
    OAuthStartContext,
    OAuthStartResult,
    ProviderDescriptor,
    TokenAuthMethod,
)
from provider_connect.services.container import ServiceContainer
from provider_connect.services.provider_auth import ProviderAuthService


ACME_TEMPLATE: dict[str, Any] = {
    "baseUrl": "https://api.acme.test/v1",
    "models": [{"id": "acme-1", "name": "acme-1"}],
}


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom settings."""
    setup_logging(json_logs=False, log_level_name="DEBUG")


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProviderPlugin:
    """Plugin offering three providers with different capabilities.

    * ``acme``: OAuth (start + callback) and API key, with a default template
    * ``cli-only``: OAuth without web capabilities
    * ``bare``: token only, no default template
    """

    name = "fake"
    config_model = None

    def __init__(self) -> None:
        self.started: list[OAuthStartContext] = []
        self.callbacks: list[OAuthCallbackContext] = []
        self.start_error: Exception | None = None
        self.callback_error: Exception | None = None
        self.config_patch: dict[str, Any] | None = {
            "models": {"providers": {"acme": {**ACME_TEMPLATE, "auth": "oauth"}}}
        }

    async def oauth_start(self, ctx: OAuthStartContext) -> OAuthStartResult:
        self.started.append(ctx)
        if self.start_error is not None:
            raise self.start_error
        return OAuthStartResult(
            url=f"https://auth.acme.test/authorize?state={ctx.state}"
        )

    async def oauth_callback(self, ctx: OAuthCallbackContext) -> OAuthExchangeResult:
        self.callbacks.append(ctx)
        if self.callback_error is not None:
            raise self.callback_error
        return OAuthExchangeResult(
            profiles=[
                CredentialProfile(
                    profile_id="acme:default",
                    credential=OAuthCredential(
                        provider="acme", access="access-token", refresh="refresh-token"
                    ),
                )
            ],
            config_patch=self.config_patch,
        )

    def resolve_providers(
        self, config: dict[str, Any], workspace_dir: str | None
    ) -> list[ProviderDescriptor]:
        return [
            ProviderDescriptor(
                id="acme",
                label="Acme",
                docs_path="/providers/acme",
                aliases=("acme-ai",),
                auth=(
                    OAuthAuthMethod(
                        id="oauth",
                        label="Acme OAuth",
                        hint="Browser sign-in",
                        oauth_start=self.oauth_start,
                        oauth_callback=self.oauth_callback,
                    ),
                    ApiKeyAuthMethod(id="api-key", label="Acme key"),
                ),
                models=dict(ACME_TEMPLATE),
            ),
            ProviderDescriptor(
                id="cli-only",
                label="CLI only",
                auth=(OAuthAuthMethod(id="device", label="Device code"),),
            ),
            ProviderDescriptor(
                id="bare",
                label="Bare",
                auth=(TokenAuthMethod(id="token", label="Token"),),
            ),
        ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def state_store(clock: FakeClock) -> OAuthStateStore:
    return OAuthStateStore(ttl_seconds=600, clock=clock)


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    return tmp_path / "state"


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "gateway.json"


@pytest.fixture
def config_store(config_path: Path) -> ConfigFileStore:
    return ConfigFileStore(config_path)


@pytest.fixture
def fake_plugin() -> FakeProviderPlugin:
    return FakeProviderPlugin()


@pytest.fixture
def registry(fake_plugin: FakeProviderPlugin) -> ProviderRegistry:
    registry = ProviderRegistry()
    registry.register(fake_plugin)
    return registry


@pytest.fixture
def service(
    registry: ProviderRegistry,
    config_store: ConfigFileStore,
    state_store: OAuthStateStore,
    state_dir: Path,
) -> ProviderAuthService:
    return ProviderAuthService(
        registry=registry,
        config_store=config_store,
        state_store=state_store,
        state_dir=state_dir,
    )


@pytest.fixture
def default_agent_dir(state_dir: Path) -> Path:
    return state_dir / "agents" / "main" / "agent"


@pytest.fixture
def test_settings(state_dir: Path, config_path: Path) -> Settings:
    return Settings(paths=PathSettings(state_dir=state_dir, config_file=config_path))


@pytest.fixture
def container(
    test_settings: Settings,
    registry: ProviderRegistry,
    state_store: OAuthStateStore,
) -> ServiceContainer:
    container = ServiceContainer(test_settings)
    container.register_service(ProviderRegistry, instance=registry)
    container.register_service(OAuthStateStore, instance=state_store)
    return container


@pytest.fixture
def client(container: ServiceContainer) -> Generator[TestClient, None, None]:
    with TestClient(create_app(container)) as test_client:
        yield test_client
