"""Tests for the consume-once OAuth state store."""

import threading

import pytest

from provider_connect.auth.oauth.state_store import OAuthStateEntry, OAuthStateStore


def make_entry(provider_id: str = "acme") -> OAuthStateEntry:
    return OAuthStateEntry(
        provider_id=provider_id,
        method_id="oauth",
        agent_dir="/tmp/agent",
        workspace_dir="/tmp/workspace",
    )


@pytest.mark.unit
class TestOAuthStateStore:
    """Test state creation, consumption and expiry."""

    def test_create_returns_hex_token(self, state_store):
        """Test tokens are 64 hex characters."""
        token = state_store.create(make_entry())

        assert len(token) == 64
        int(token, 16)

    def test_tokens_are_unique(self, state_store):
        """Test every create yields a fresh token."""
        tokens = {state_store.create(make_entry()) for _ in range(50)}
        assert len(tokens) == 50
        assert len(state_store) == 50

    def test_consume_returns_entry_once(self, state_store, clock):
        """Test the first consume returns the entry and the second None."""
        token = state_store.create(make_entry())

        entry = state_store.consume(token)

        assert entry is not None
        assert entry.provider_id == "acme"
        assert entry.created_at == clock.now
        assert state_store.consume(token) is None

    def test_consume_unknown_token(self, state_store):
        """Test an unknown token yields None."""
        assert state_store.consume("nope") is None

    def test_entry_valid_at_ttl_boundary(self, state_store, clock):
        """Test an entry exactly TTL seconds old is still accepted."""
        token = state_store.create(make_entry())
        clock.advance(600)

        assert state_store.consume(token) is not None

    def test_expired_entry_is_rejected_and_removed(self, state_store, clock):
        """Test an expired entry is not returned and is deleted."""
        token = state_store.create(make_entry())
        clock.advance(600.5)

        assert state_store.consume(token) is None
        assert len(state_store) == 0

    def test_create_prunes_expired_entries(self, state_store, clock):
        """Test creating a state drops entries past their TTL."""
        old = state_store.create(make_entry("old"))
        clock.advance(400)
        recent = state_store.create(make_entry("recent"))
        clock.advance(300)

        state_store.create(make_entry("new"))

        assert len(state_store) == 2
        assert state_store.consume(old) is None
        assert state_store.consume(recent) is not None

    def test_caller_entry_is_not_mutated(self, state_store):
        """Test the stored copy carries the timestamp, not the caller's object."""
        entry = make_entry()
        state_store.create(entry)
        assert entry.created_at == 0.0

    def test_concurrent_consume_yields_one_winner(self):
        """Test racing threads consume a token at most once."""
        store = OAuthStateStore()
        token = store.create(make_entry())
        results: list[OAuthStateEntry | None] = []
        barrier = threading.Barrier(8)

        def worker() -> None:
            barrier.wait()
            results.append(store.consume(token))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(r is not None for r in results) == 1
