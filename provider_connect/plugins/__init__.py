"""Provider plugin system."""

from .matching import OAUTH_KINDS, SECRET_KINDS, match_provider, pick_method
from .registry import ProviderRegistry
from .types import (
    ApiKeyAuthMethod,
    AuthMethod,
    AuthMethodKind,
    OAuthAuthMethod,
    OAuthCallbackContext,
    OAuthExchangeResult,
    OAuthStartContext,
    OAuthStartResult,
    ProviderDescriptor,
    ProviderPlugin,
    TokenAuthMethod,
)


__all__ = [
    "OAUTH_KINDS",
    "SECRET_KINDS",
    "ApiKeyAuthMethod",
    "AuthMethod",
    "AuthMethodKind",
    "OAuthAuthMethod",
    "OAuthCallbackContext",
    "OAuthExchangeResult",
    "OAuthStartContext",
    "OAuthStartResult",
    "ProviderDescriptor",
    "ProviderPlugin",
    "ProviderRegistry",
    "TokenAuthMethod",
    "match_provider",
    "pick_method",
]
