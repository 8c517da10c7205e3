"""Anthropic provider: Claude OAuth, setup token or API key."""

import time
from typing import Any

from provider_connect.auth.models import CredentialProfile, OAuthCredential
from provider_connect.auth.oauth.flow import AuthorizationCodeFlow
from provider_connect.config.merge_patch import is_plain_record
from provider_connect.plugins.base import BaseProviderPlugin, model_template
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

from .config import AnthropicPluginConfig


PROVIDER_ID = "anthropic"


class AnthropicProviderPlugin(BaseProviderPlugin[AnthropicPluginConfig]):
    name = "anthropic"
    config_model = AnthropicPluginConfig

    def __init__(self) -> None:
        super().__init__()
        self._flows: dict[tuple[str, str, str], AuthorizationCodeFlow] = {}

    def flow_for(self, settings: AnthropicPluginConfig) -> AuthorizationCodeFlow:
        """One long-lived flow per OAuth client so PKCE verifiers survive
        between the start and callback requests."""
        key = (settings.client_id, settings.authorize_url, settings.token_url)
        flow = self._flows.get(key)
        if flow is None:
            flow = AuthorizationCodeFlow(
                client_id=settings.client_id,
                authorize_url=settings.authorize_url,
                token_url=settings.token_url,
                scopes=settings.scopes,
                use_pkce=settings.use_pkce,
                use_json_for_token_exchange=True,
                extra_auth_params={"code": "true"},
                headers={
                    "anthropic-beta": settings.beta_version,
                    "User-Agent": settings.user_agent,
                },
            )
            self._flows[key] = flow
        return flow

    async def oauth_start(self, ctx: OAuthStartContext) -> OAuthStartResult:
        flow = self.flow_for(self.settings_from(ctx.config))
        return OAuthStartResult(
            url=flow.build_authorization_url(ctx.state, ctx.redirect_uri)
        )

    async def oauth_callback(self, ctx: OAuthCallbackContext) -> OAuthExchangeResult:
        settings = self.settings_from(ctx.config)
        tokens = await self.flow_for(settings).exchange_code(
            ctx.state, ctx.code, ctx.redirect_uri
        )

        expires_in = tokens.get("expires_in")
        expires = (
            int((time.time() + float(expires_in)) * 1000)
            if expires_in is not None
            else None
        )
        account = tokens.get("account") if isinstance(tokens.get("account"), dict) else {}
        email = account.get("email_address") or account.get("email")

        profile = CredentialProfile(
            profile_id=f"{PROVIDER_ID}:{email or 'default'}",
            credential=OAuthCredential(
                provider=PROVIDER_ID,
                access=tokens["access_token"],
                refresh=tokens.get("refresh_token"),
                expires=expires,
                email=email,
                account_id=account.get("uuid"),
            ),
        )

        models = ctx.config.get("models")
        providers = models.get("providers") if is_plain_record(models) else None
        if is_plain_record(providers) and is_plain_record(providers.get(PROVIDER_ID)):
            block: dict[str, Any] = {"auth": "oauth"}
        else:
            block = {
                **model_template(settings.api_base_url, settings.default_models),
                "auth": "oauth",
            }

        self.logger.info(
            "anthropic_oauth_exchange_completed",
            profile_id=profile.profile_id,
            category="auth",
        )
        return OAuthExchangeResult(
            profiles=[profile],
            config_patch={"models": {"providers": {PROVIDER_ID: block}}},
        )

    def resolve_providers(
        self, config: dict[str, Any], workspace_dir: str | None
    ) -> list[ProviderDescriptor]:
        settings = self.settings_from(config)
        return [
            ProviderDescriptor(
                id=PROVIDER_ID,
                label="Anthropic",
                docs_path="/providers/anthropic",
                aliases=("claude",),
                auth=(
                    OAuthAuthMethod(
                        id="oauth",
                        label="Claude Pro/Max (OAuth)",
                        hint="Sign in with your Claude subscription",
                        oauth_start=self.oauth_start,
                        oauth_callback=self.oauth_callback,
                    ),
                    TokenAuthMethod(
                        id="setup-token",
                        label="Setup token",
                        hint="Paste the output of `claude setup-token`",
                    ),
                    ApiKeyAuthMethod(id="api-key", label="Anthropic API key"),
                ),
                models=model_template(settings.api_base_url, settings.default_models),
            )
        ]


plugin = AnthropicProviderPlugin()
