"""Provider connection orchestration.

Connects model providers either through an OAuth authorization-code round
trip or by storing a pasted API key/token, then persists the result into the
gateway configuration file.

The OAuth callback writes to two independent resources: the agent's
credential-profile store and the gateway config file. The profile write is
never rolled back; a profile without a matching config entry is harmless and
is reconciled by the next successful connection.
"""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel

from provider_connect.agents import (
    resolve_agent_dir,
    resolve_agent_workspace_dir,
    resolve_default_agent_id,
)
from provider_connect.auth.exceptions import CredentialsError
from provider_connect.auth.models import credential_mode
from provider_connect.auth.oauth.state_store import OAuthStateEntry, OAuthStateStore
from provider_connect.auth.profile_config import apply_auth_profile_config
from provider_connect.auth.profiles import AuthProfileStore
from provider_connect.config.legacy import (
    LegacyMigrationResult,
    apply_legacy_migrations,
)
from provider_connect.config.merge_patch import is_plain_record, merge_config_patch
from provider_connect.config.store import ConfigFileStore, ConfigIOError
from provider_connect.config.validation import (
    ConfigValidationResult,
    validate_config_object_with_plugins,
)
from provider_connect.core.errors import InvalidRequestError, UnavailableError
from provider_connect.core.logging import get_logger
from provider_connect.plugins.matching import (
    OAUTH_KINDS,
    SECRET_KINDS,
    match_provider,
    pick_method,
)
from provider_connect.plugins.registry import ProviderRegistry
from provider_connect.plugins.types import (
    OAuthAuthMethod,
    OAuthCallbackContext,
    OAuthStartContext,
    ProviderDescriptor,
)


logger = get_logger(__name__)

DEFAULT_CALLBACK_PATH = "/auth/callback"


def strip_trailing_slashes(url: str) -> str:
    return url.rstrip("/")


def success_location(base: str | None = None) -> str:
    if base:
        return f"{strip_trailing_slashes(base)}?oauth=success"
    return "/?oauth=success"


def error_location(message: str, base: str | None = None) -> str:
    encoded = quote(message, safe="")
    if base:
        return f"{strip_trailing_slashes(base)}?oauth=error&message={encoded}"
    return f"/?oauth=error&message={encoded}"


class OAuthCallbackParams(BaseModel):
    """Query parameters of the provider redirect, already trimmed."""

    state: str | None = None
    code: str | None = None
    error: str | None = None
    error_description: str | None = None


@dataclass(frozen=True)
class AgentScope:
    agent_id: str
    agent_dir: str
    workspace_dir: str


class ProviderAuthService:
    """Lists providers, starts OAuth flows, handles callbacks, stores API keys."""

    def __init__(
        self,
        registry: ProviderRegistry,
        config_store: ConfigFileStore,
        state_store: OAuthStateStore,
        state_dir: Path,
        callback_path: str = DEFAULT_CALLBACK_PATH,
        profile_store_factory: Callable[[str], AuthProfileStore] = AuthProfileStore,
        migrate: Callable[
            [dict[str, Any]], LegacyMigrationResult
        ] = apply_legacy_migrations,
        validate: Callable[[dict[str, Any]], ConfigValidationResult] | None = None,
    ) -> None:
        self.registry = registry
        self.config_store = config_store
        self.state_store = state_store
        self.state_dir = state_dir
        self.callback_path = callback_path
        self.profile_store_factory = profile_store_factory
        self.migrate = migrate
        self.validate = validate or self._validate_with_plugins

    def _validate_with_plugins(self, document: dict[str, Any]) -> ConfigValidationResult:
        return validate_config_object_with_plugins(
            document, self.registry.config_models()
        )

    # === Helpers ===

    async def _load_config(self) -> dict[str, Any]:
        try:
            return await self.config_store.load()
        except ConfigIOError as e:
            raise UnavailableError(str(e)) from e

    def _default_scope(self, config: dict[str, Any]) -> AgentScope:
        agent_id = resolve_default_agent_id(config)
        return AgentScope(
            agent_id=agent_id,
            agent_dir=resolve_agent_dir(config, agent_id, self.state_dir),
            workspace_dir=resolve_agent_workspace_dir(config, agent_id, self.state_dir),
        )

    def build_callback_uri(self, base_url: str) -> str:
        """Callback address the provider redirects to for ``base_url``."""
        return f"{strip_trailing_slashes(base_url)}{self.callback_path}"

    # === models.auth.list ===

    async def list_providers(self) -> list[dict[str, Any]]:
        """Providers with their auth methods and a connected flag."""
        config = await self._load_config()
        scope = self._default_scope(config)
        providers = self.registry.resolve_providers(config, scope.workspace_dir)

        profile_store: AuthProfileStore | None = self.profile_store_factory(
            scope.agent_dir
        )

        models = config.get("models")
        configured = models.get("providers") if is_plain_record(models) else None
        if not is_plain_record(configured):
            configured = {}

        result = []
        for provider in providers:
            provider_config = configured.get(provider.id)
            api_key = (
                provider_config.get("apiKey")
                if is_plain_record(provider_config)
                else None
            )
            has_api_key = isinstance(api_key, str) and bool(api_key.strip())

            has_profile = False
            if profile_store is not None:
                try:
                    has_profile = bool(
                        await profile_store.list_profiles_for_provider(provider.id)
                    )
                except CredentialsError as e:
                    # unreadable store only means "not connected" for listing
                    logger.debug(
                        "auth_profile_store_unavailable",
                        agent_dir=scope.agent_dir,
                        error=str(e),
                        category="auth",
                    )
                    profile_store = None

            entry: dict[str, Any] = {
                "id": provider.id,
                "label": provider.label,
                "auth": [
                    {
                        k: v
                        for k, v in {
                            "id": m.id,
                            "label": m.label,
                            "hint": m.hint,
                            "kind": m.kind,
                        }.items()
                        if v is not None
                    }
                    for m in provider.auth
                ],
                "connected": has_api_key or has_profile,
            }
            if provider.docs_path is not None:
                entry["docsPath"] = provider.docs_path
            result.append(entry)
        return result

    # === models.auth.oauthStart ===

    async def start_oauth(
        self,
        provider_id: str,
        method_id: str | None,
        redirect_uri: str | None,
        success_redirect_base: str | None = None,
    ) -> dict[str, str]:
        """Create a pending authorization and return the provider's URL.

        Raises:
            InvalidRequestError: Unknown provider, no OAuth method, or no
                redirect base URL
            UnavailableError: Method cannot start from the web flow, or the
                plugin failed to build the URL
        """
        config = await self._load_config()
        scope = self._default_scope(config)
        providers = self.registry.resolve_providers(config, scope.workspace_dir)

        provider = match_provider(providers, provider_id)
        if provider is None:
            raise InvalidRequestError(f"Unknown provider: {provider_id}")

        method = pick_method(provider, OAUTH_KINDS, method_id)
        if not isinstance(method, OAuthAuthMethod):
            raise InvalidRequestError(f"No OAuth auth method for provider {provider_id}")
        if method.oauth_start is None:
            raise UnavailableError(
                "OAuth from Control UI is not supported for this provider yet"
            )

        base = (redirect_uri or "").strip()
        if not base:
            raise InvalidRequestError(
                "redirectUri is required for OAuth (gateway base URL)"
            )
        callback_uri = self.build_callback_uri(base)

        state = self.state_store.create(
            OAuthStateEntry(
                provider_id=provider.id,
                method_id=method.id,
                agent_dir=scope.agent_dir,
                workspace_dir=scope.workspace_dir,
                success_redirect_base=(success_redirect_base or "").strip() or None,
            )
        )

        try:
            started = await method.oauth_start(
                OAuthStartContext(
                    config=config,
                    agent_dir=scope.agent_dir,
                    workspace_dir=scope.workspace_dir,
                    state=state,
                    redirect_uri=callback_uri,
                )
            )
        except Exception as e:
            self.state_store.consume(state)
            logger.error(
                "oauth_start_failed",
                provider=provider.id,
                method=method.id,
                error=str(e),
                exc_info=e,
                category="auth",
            )
            raise UnavailableError(str(e)) from e

        logger.info(
            "oauth_start_completed",
            provider=provider.id,
            method=method.id,
            callback_uri=callback_uri,
            category="auth",
        )
        return {"url": started.url, "state": state}

    # === models.auth.apiKeySet ===

    async def set_api_key(
        self, provider_id: str, method_id: str | None, api_key: str
    ) -> dict[str, bool]:
        """Store a pasted API key or token in the provider's config block.

        Raises:
            InvalidRequestError: Blank secret, unknown provider or no
                api_key/token method
            UnavailableError: Nothing to attach the secret to, or the config
                file cannot be read or written
        """
        secret = api_key.strip() if isinstance(api_key, str) else ""
        if not secret:
            raise InvalidRequestError("apiKey is required and must be non-empty")

        config = await self._load_config()
        scope = self._default_scope(config)
        providers = self.registry.resolve_providers(config, scope.workspace_dir)

        provider = match_provider(providers, provider_id)
        if provider is None:
            raise InvalidRequestError(f"Unknown provider: {provider_id}")

        method = pick_method(provider, SECRET_KINDS, method_id)
        if method is None:
            raise InvalidRequestError(
                f"No API key or token auth method for provider {provider_id}"
            )
        auth_mode = "token" if method.kind == "token" else "api-key"

        base = self._provider_base_block(config, provider)
        if base is None:
            raise UnavailableError(
                f"Provider {provider_id} has no default config; "
                "add provider config first or use CLI."
            )

        merged = {**base, "apiKey": secret, "auth": auth_mode}
        models = dict(config["models"]) if is_plain_record(config.get("models")) else {}
        configured = models.get("providers")
        models["providers"] = {
            **(configured if is_plain_record(configured) else {}),
            provider.id: merged,
        }

        try:
            await self.config_store.write({**config, "models": models})
        except ConfigIOError as e:
            raise UnavailableError(str(e)) from e

        logger.info(
            "provider_api_key_set",
            provider=provider.id,
            method=method.id,
            auth_mode=auth_mode,
            category="auth",
        )
        return {"ok": True}

    @staticmethod
    def _provider_base_block(
        config: dict[str, Any], provider: ProviderDescriptor
    ) -> dict[str, Any] | None:
        models = config.get("models")
        configured = models.get("providers") if is_plain_record(models) else None
        existing = configured.get(provider.id) if is_plain_record(configured) else None
        base = existing if existing is not None else provider.models
        if (
            not is_plain_record(base)
            or not isinstance(base.get("baseUrl"), str)
            or not isinstance(base.get("models"), list)
        ):
            return None
        return dict(base)

    # === GET /auth/callback ===

    async def handle_oauth_callback(
        self, params: OAuthCallbackParams, redirect_uri: str
    ) -> str:
        """Finish an OAuth round-trip and return the browser redirect target.

        Never raises: every failure becomes an ``oauth=error`` location.

        Args:
            params: Trimmed query parameters from the provider redirect
            redirect_uri: Callback address rebuilt from the incoming request
        """
        if params.error:
            # the state is left unconsumed so the user can retry right away
            message = params.error_description or params.error
            logger.info(
                "oauth_callback_provider_error", error=params.error, category="auth"
            )
            return error_location(message)

        state, code = params.state, params.code
        if not state or not code:
            return error_location("Missing state or code")

        entry = self.state_store.consume(state)
        if entry is None:
            logger.info("oauth_callback_state_rejected", category="auth")
            return error_location("Invalid or expired state")

        try:
            return await self._complete_callback(entry, state, code, redirect_uri)
        except Exception as e:
            logger.error(
                "oauth_callback_failed",
                provider=entry.provider_id,
                method=entry.method_id,
                error=str(e),
                exc_info=e,
                category="auth",
            )
            return error_location(str(e), entry.success_redirect_base)

    async def _complete_callback(
        self, entry: OAuthStateEntry, state: str, code: str, redirect_uri: str
    ) -> str:
        config = await self._load_config()
        providers = self.registry.resolve_providers(config, entry.workspace_dir)
        provider = match_provider(providers, entry.provider_id)
        method = pick_method(provider, OAUTH_KINDS, entry.method_id) if provider else None
        if not isinstance(method, OAuthAuthMethod) or method.oauth_callback is None:
            return error_location(
                "Provider or OAuth method not found", entry.success_redirect_base
            )

        result = await method.oauth_callback(
            OAuthCallbackContext(
                config=config,
                agent_dir=entry.agent_dir,
                workspace_dir=entry.workspace_dir,
                state=state,
                code=code,
                redirect_uri=redirect_uri,
            )
        )

        agent_dir = entry.agent_dir or self._default_scope(config).agent_dir
        profile_store = self.profile_store_factory(agent_dir)
        for profile in result.profiles:
            await profile_store.upsert_profile(profile.profile_id, profile.credential)

        await self._update_config_after_exchange(result.profiles, result.config_patch)

        logger.info(
            "oauth_callback_completed",
            provider=entry.provider_id,
            method=entry.method_id,
            profiles=[p.profile_id for p in result.profiles],
            category="auth",
        )
        return success_location(entry.success_redirect_base)

    async def _update_config_after_exchange(
        self, profiles: list[Any], config_patch: dict[str, Any] | None
    ) -> None:
        snapshot = await self.config_store.read_snapshot()
        if not snapshot.valid:
            logger.warning(
                "oauth_config_update_skipped",
                reason="snapshot_invalid",
                path=str(snapshot.path),
                issues=[str(issue) for issue in snapshot.issues],
                category="config",
            )
            return

        next_config: dict[str, Any] = snapshot.config
        if config_patch:
            next_config = merge_config_patch(next_config, config_patch)
        for profile in profiles:
            next_config = apply_auth_profile_config(
                next_config,
                profile_id=profile.profile_id,
                provider=profile.credential.provider,
                mode=credential_mode(profile.credential),
                email=profile.credential.email,
            )

        migrated = self.migrate(next_config)
        resolved = migrated.next if migrated.next is not None else next_config
        if migrated.changes:
            logger.info(
                "config_legacy_migrated", changes=migrated.changes, category="config"
            )

        validated = self.validate(resolved)
        if not validated.ok or validated.config is None:
            logger.warning(
                "oauth_config_update_skipped",
                reason="validation_failed",
                issues=[str(issue) for issue in validated.issues],
                category="config",
            )
            return

        await self.config_store.write(validated.config)
