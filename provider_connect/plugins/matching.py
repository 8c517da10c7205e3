"""Resolve caller-supplied provider and method identifiers."""

from collections.abc import Collection, Sequence

from provider_connect.core.provider_ids import normalize_provider_id

from .types import AuthMethod, AuthMethodKind, ProviderDescriptor


OAUTH_KINDS: frozenset[AuthMethodKind] = frozenset({"oauth"})
SECRET_KINDS: frozenset[AuthMethodKind] = frozenset({"api_key", "token"})


def match_provider(
    providers: Sequence[ProviderDescriptor], raw_provider_id: str
) -> ProviderDescriptor | None:
    """Find a provider by primary id, then by alias; first match wins."""
    normalized = normalize_provider_id(raw_provider_id)
    for provider in providers:
        if normalize_provider_id(provider.id) == normalized:
            return provider
    for provider in providers:
        if any(normalize_provider_id(alias) == normalized for alias in provider.aliases):
            return provider
    return None


def pick_method(
    provider: ProviderDescriptor,
    kinds: Collection[AuthMethodKind],
    raw_method_id: str | None = None,
) -> AuthMethod | None:
    """Pick an auth method of one of ``kinds``.

    Without a method id the first method of a matching kind is returned.
    Otherwise the id is compared case-insensitively, then the label.
    """
    methods = [m for m in provider.auth if m.kind in kinds]
    if not methods:
        return None

    raw = (raw_method_id or "").strip()
    if not raw:
        return methods[0]

    wanted = raw.lower()
    for method in methods:
        if method.id.lower() == wanted:
            return method
    for method in methods:
        if method.label.lower() == wanted:
            return method
    return None
