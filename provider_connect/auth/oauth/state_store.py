"""Short-lived store correlating an OAuth start request with its callback."""

import secrets
import threading
import time
from collections.abc import Callable

from pydantic import BaseModel

from provider_connect.core.logging import get_logger


logger = get_logger(__name__)

DEFAULT_STATE_TTL_SECONDS = 10 * 60
STATE_TOKEN_BYTES = 32


class OAuthStateEntry(BaseModel):
    """One pending authorization round-trip."""

    provider_id: str
    method_id: str
    agent_dir: str | None = None
    workspace_dir: str
    success_redirect_base: str | None = None
    created_at: float = 0.0


class OAuthStateStore:
    """Consume-once authorization states with a fixed time-to-live.

    Expired entries are pruned whenever a new state is created; there is no
    background timer. A single lock guards the map so two callbacks racing on
    the same token cannot both consume it.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_STATE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, OAuthStateEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _is_expired(self, entry: OAuthStateEntry, now: float) -> bool:
        return now - entry.created_at > self.ttl_seconds

    def _prune_expired(self, now: float) -> None:
        expired = [
            token
            for token, entry in self._entries.items()
            if self._is_expired(entry, now)
        ]
        for token in expired:
            del self._entries[token]
        if expired:
            logger.debug("oauth_states_pruned", count=len(expired), category="auth")

    def create(self, entry: OAuthStateEntry) -> str:
        """Store ``entry`` stamped with the current time and return its token."""
        with self._lock:
            now = self._clock()
            self._prune_expired(now)
            token = secrets.token_hex(STATE_TOKEN_BYTES)
            self._entries[token] = entry.model_copy(update={"created_at": now})

        logger.debug(
            "oauth_state_created",
            provider=entry.provider_id,
            method=entry.method_id,
            category="auth",
        )
        return token

    def consume(self, token: str) -> OAuthStateEntry | None:
        """Remove and return the entry for ``token``.

        Returns None for unknown and for expired tokens alike. The entry is
        deleted either way.
        """
        with self._lock:
            entry = self._entries.pop(token, None)
            if entry is None:
                return None
            if self._is_expired(entry, self._clock()):
                logger.debug(
                    "oauth_state_expired", provider=entry.provider_id, category="auth"
                )
                return None
            return entry
