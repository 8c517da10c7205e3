"""Service layer: provider connection orchestration and its container."""

from .container import ServiceContainer
from .provider_auth import OAuthCallbackParams, ProviderAuthService


__all__ = ["OAuthCallbackParams", "ProviderAuthService", "ServiceContainer"]
