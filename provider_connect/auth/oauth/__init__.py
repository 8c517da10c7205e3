"""OAuth authorization-code support."""

from .flow import AuthorizationCodeFlow, PendingAuthorization
from .state_store import DEFAULT_STATE_TTL_SECONDS, OAuthStateEntry, OAuthStateStore


__all__ = [
    "DEFAULT_STATE_TTL_SECONDS",
    "AuthorizationCodeFlow",
    "OAuthStateEntry",
    "OAuthStateStore",
    "PendingAuthorization",
]
