"""Tests for provider and auth method matching."""

import pytest

from provider_connect.core.provider_ids import normalize_provider_id
from provider_connect.plugins.matching import (
    OAUTH_KINDS,
    SECRET_KINDS,
    match_provider,
    pick_method,
)
from provider_connect.plugins.openai.plugin import OpenAIProviderPlugin
from provider_connect.plugins.types import (
    ApiKeyAuthMethod,
    OAuthAuthMethod,
    ProviderDescriptor,
    TokenAuthMethod,
)


@pytest.fixture
def providers() -> list[ProviderDescriptor]:
    return [
        *OpenAIProviderPlugin().resolve_providers({}, None),
        ProviderDescriptor(id="zai", label="Z.AI", aliases=("glm",)),
        ProviderDescriptor(id="shadow", label="Shadow", aliases=("openai",)),
    ]


@pytest.mark.unit
class TestNormalizeProviderId:
    """Test canonical provider ids."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (" OpenAI ", "openai"),
            ("Z.AI", "zai"),
            ("z-ai", "zai"),
            ("opencode-zen", "opencode"),
            ("qwen", "qwen-portal"),
            ("kimi-code", "kimi-coding"),
        ],
    )
    def test_normalize(self, raw, expected):
        """Test trimming, case folding and alternate spellings."""
        assert normalize_provider_id(raw) == expected


@pytest.mark.unit
class TestMatchProvider:
    """Test provider lookup."""

    @pytest.mark.parametrize("raw", ["OpenAI", "oai", "OAI ", "openai"])
    def test_id_and_alias(self, providers, raw):
        """Test the primary id and alias both resolve, in any case."""
        provider = match_provider(providers, raw)
        assert provider is not None
        assert provider.id == "openai"

    def test_primary_id_beats_alias(self, providers):
        """Test a primary id match wins over another provider's alias."""
        provider = match_provider(providers, "openai")
        assert provider is not None
        assert provider.label == "OpenAI"

    def test_alternate_spelling(self, providers):
        """Test alternate spellings are normalized before matching."""
        provider = match_provider(providers, "z.ai")
        assert provider is not None
        assert provider.id == "zai"

    def test_no_match(self, providers):
        """Test an unknown id yields None."""
        assert match_provider(providers, "anthropic") is None


@pytest.mark.unit
class TestPickMethod:
    """Test auth method selection."""

    @pytest.fixture
    def provider(self) -> ProviderDescriptor:
        return ProviderDescriptor(
            id="p",
            label="P",
            auth=(
                OAuthAuthMethod(id="oauth", label="Browser"),
                ApiKeyAuthMethod(id="api-key", label="Paste key"),
                TokenAuthMethod(id="setup-token", label="API-KEY"),
            ),
        )

    def test_first_of_kind_without_id(self, provider):
        """Test the first method of a matching kind is picked by default."""
        assert pick_method(provider, SECRET_KINDS).id == "api-key"
        assert pick_method(provider, OAUTH_KINDS, "  ").id == "oauth"

    def test_id_before_label(self, provider):
        """Test an id match wins over a label match on another method."""
        assert pick_method(provider, SECRET_KINDS, "api-key").id == "api-key"

    def test_label_case_insensitive(self, provider):
        """Test labels match case-insensitively."""
        assert pick_method(provider, SECRET_KINDS, "PASTE KEY").id == "api-key"

    def test_kind_filter(self, provider):
        """Test methods of other kinds are never returned."""
        assert pick_method(provider, SECRET_KINDS, "oauth") is None

    def test_no_methods_of_kind(self):
        """Test a provider without matching kinds yields None."""
        provider = ProviderDescriptor(id="p", label="P")
        assert pick_method(provider, OAUTH_KINDS) is None
