"""Tests for the per-agent credential profile store and config references."""

import asyncio
import json
import stat
import threading

import pytest

from provider_connect.auth.exceptions import CredentialsInvalidError
from provider_connect.auth.models import (
    ApiKeyCredential,
    OAuthCredential,
    TokenCredential,
    credential_mode,
)
from provider_connect.auth.profile_config import apply_auth_profile_config
from provider_connect.auth.profiles import AuthProfileStore


@pytest.mark.unit
class TestCredentialModels:
    """Test credential variants."""

    def test_repr_hides_secrets(self):
        """Test secrets never appear in full in repr output."""
        cred = OAuthCredential(provider="acme", access="a" * 40, refresh="r" * 40)
        text = repr(cred)
        assert "a" * 40 not in text
        assert "r" * 40 not in text

    def test_json_dump_reveals_secret(self):
        """Test JSON serialization writes the real key for storage."""
        cred = ApiKeyCredential(provider="acme", key="sk-123")
        assert cred.model_dump(mode="json")["key"] == "sk-123"
        assert cred.model_dump()["key"].get_secret_value() == "sk-123"

    @pytest.mark.parametrize(
        "credential,mode",
        [
            (ApiKeyCredential(provider="p", key="k"), "api_key"),
            (TokenCredential(provider="p", token="t"), "token"),
            (OAuthCredential(provider="p", access="a"), "oauth"),
        ],
    )
    def test_credential_mode(self, credential, mode):
        """Test each variant maps to its config-side mode."""
        assert credential_mode(credential) == mode


@pytest.mark.unit
class TestAuthProfileStore:
    """Test profile persistence."""

    def test_missing_file_is_empty(self, tmp_path):
        """Test a fresh agent directory has no profiles."""
        assert AuthProfileStore(tmp_path / "agent").load().profiles == {}

    async def test_upsert_and_reload(self, tmp_path):
        """Test an upserted profile is readable from a new store instance."""
        store = AuthProfileStore(tmp_path / "agent")
        await store.upsert_profile(
            "acme:me", OAuthCredential(provider="acme", access="at", email="me@x.test")
        )

        data = AuthProfileStore(tmp_path / "agent").load()
        cred = data.profiles["acme:me"]
        assert data.version == 1
        assert cred.type == "oauth"
        assert cred.access.get_secret_value() == "at"
        assert cred.email == "me@x.test"

    async def test_file_layout_and_permissions(self, tmp_path):
        """Test the on-disk document shape and owner-only mode."""
        store = AuthProfileStore(tmp_path)
        await store.upsert_profile(
            "acme:key", {"type": "api_key", "provider": "acme", "key": "sk"}
        )

        raw = json.loads(store.file_path.read_text())
        assert raw == {
            "version": 1,
            "profiles": {"acme:key": {"provider": "acme", "type": "api_key", "key": "sk"}},
        }
        assert stat.S_IMODE(store.file_path.stat().st_mode) == 0o600

    async def test_last_write_wins(self, tmp_path):
        """Test upserting the same id replaces the credential."""
        store = AuthProfileStore(tmp_path)
        await store.upsert_profile("p", TokenCredential(provider="acme", token="one"))
        await store.upsert_profile("p", TokenCredential(provider="acme", token="two"))

        assert store.load().profiles["p"].token.get_secret_value() == "two"

    async def test_concurrent_upserts_all_succeed(self, tmp_path):
        """Test overlapping writes each complete and leave one valid file."""
        store = AuthProfileStore(tmp_path)
        tokens = [f"token-{i}" for i in range(20)]

        await asyncio.gather(
            *(
                store.upsert_profile("p", TokenCredential(provider="acme", token=t))
                for t in tokens
            )
        )

        assert store.load().profiles["p"].token.get_secret_value() in tokens
        assert [p.name for p in tmp_path.iterdir()] == ["auth-profiles.json"]

    async def test_list_profiles_for_provider_normalizes(self, tmp_path):
        """Test provider ids are compared in canonical form."""
        store = AuthProfileStore(tmp_path)
        await store.upsert_profile("z:1", TokenCredential(provider="Z.AI", token="t"))
        await store.upsert_profile("o:1", TokenCredential(provider="other", token="t"))

        assert await store.list_profiles_for_provider("zai") == ["z:1"]

    async def test_list_profiles_reads_off_the_event_loop(self, tmp_path, monkeypatch):
        """Test the profile lookup reads the file in a worker thread."""
        store = AuthProfileStore(tmp_path)
        loop_thread = threading.get_ident()
        seen: list[int] = []
        original_read = store._read

        def tracking_read():
            seen.append(threading.get_ident())
            return original_read()

        monkeypatch.setattr(store, "_read", tracking_read)

        assert await store.list_profiles_for_provider("acme") == []
        assert seen and seen[0] != loop_thread

    def test_corrupt_file(self, tmp_path):
        """Test malformed content raises an invalid-credentials error."""
        (tmp_path / "auth-profiles.json").write_text("{")
        with pytest.raises(CredentialsInvalidError):
            AuthProfileStore(tmp_path).load()


@pytest.mark.unit
class TestApplyAuthProfileConfig:
    """Test reflecting profiles in the gateway config."""

    def test_adds_profile_reference(self):
        """Test the profile is recorded with provider and mode."""
        config = {"models": {"providers": {}}}

        result = apply_auth_profile_config(
            config, profile_id="acme:me", provider="acme", mode="oauth", email="me@x"
        )

        assert result["auth"]["profiles"]["acme:me"] == {
            "provider": "acme",
            "mode": "oauth",
            "email": "me@x",
        }
        assert "auth" not in config

    def test_moves_profile_to_front_of_order(self):
        """Test an explicit order list gets the profile first, without duplicates."""
        config = {"auth": {"order": {"acme": ["a", "acme:me", "b"], "other": ["x"]}}}

        result = apply_auth_profile_config(
            config, profile_id="acme:me", provider="acme", mode="api_key"
        )

        assert result["auth"]["order"] == {
            "acme": ["acme:me", "a", "b"],
            "other": ["x"],
        }
        assert config["auth"]["order"]["acme"] == ["a", "acme:me", "b"]

    def test_no_order_created(self):
        """Test no order list is invented when none exists."""
        result = apply_auth_profile_config(
            {}, profile_id="p", provider="acme", mode="token"
        )
        assert "order" not in result["auth"]
