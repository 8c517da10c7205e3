"""Reusable authorization-code + PKCE flow for provider plugins."""

import base64
import hashlib
import json
import secrets
import threading
import time
import urllib.parse
from dataclasses import dataclass
from typing import Any

import httpx

from provider_connect.auth.exceptions import OAuthTokenExchangeError
from provider_connect.core.logging import get_logger


logger = get_logger(__name__)


@dataclass
class PendingAuthorization:
    code_verifier: str | None
    redirect_uri: str
    created_at: float


class AuthorizationCodeFlow:
    """Builds authorization URLs and exchanges codes for tokens.

    The PKCE verifier for each flow is kept in memory keyed by the gateway's
    state token, so ``exchange_code`` must run in the same process that
    called ``build_authorization_url``.
    """

    def __init__(
        self,
        client_id: str,
        authorize_url: str,
        token_url: str,
        scopes: list[str],
        client_secret: str | None = None,
        use_pkce: bool = True,
        use_json_for_token_exchange: bool = False,
        extra_auth_params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        pending_ttl_seconds: float = 600.0,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the flow.

        Args:
            client_id: OAuth client ID
            authorize_url: Provider authorization endpoint
            token_url: Provider token endpoint
            scopes: Scopes to request
            client_secret: Client secret for confidential clients
            use_pkce: Send an S256 code challenge
            use_json_for_token_exchange: POST the token request as JSON
                instead of form data
            extra_auth_params: Provider-specific authorization parameters
            headers: Extra headers for the token request
            pending_ttl_seconds: How long a started flow can wait for its code
            timeout: Token request timeout in seconds
            http_client: Optional shared client (tests inject one)
        """
        self.client_id = client_id
        self.authorize_url = authorize_url
        self.token_url = token_url
        self.scopes = scopes
        self.client_secret = client_secret
        self.use_pkce = use_pkce
        self.use_json_for_token_exchange = use_json_for_token_exchange
        self.extra_auth_params = extra_auth_params or {}
        self.headers = headers or {}
        self.pending_ttl_seconds = pending_ttl_seconds
        self.timeout = timeout
        self._http_client = http_client
        self._pending: dict[str, PendingAuthorization] = {}
        self._lock = threading.Lock()

    @staticmethod
    def generate_pkce_pair() -> tuple[str, str]:
        """Generate PKCE code verifier and challenge.

        Returns:
            Tuple of (code_verifier, code_challenge)
        """
        code_verifier = (
            base64.urlsafe_b64encode(secrets.token_bytes(32)).decode().rstrip("=")
        )
        challenge_bytes = hashlib.sha256(code_verifier.encode()).digest()
        code_challenge = base64.urlsafe_b64encode(challenge_bytes).decode().rstrip("=")
        return code_verifier, code_challenge

    def build_authorization_url(self, state: str, redirect_uri: str) -> str:
        """Start a flow for ``state`` and return the URL to send the browser to."""
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "scope": " ".join(self.scopes),
            "state": state,
        }

        code_verifier = None
        if self.use_pkce:
            code_verifier, code_challenge = self.generate_pkce_pair()
            params["code_challenge"] = code_challenge
            params["code_challenge_method"] = "S256"
        params.update(self.extra_auth_params)

        now = time.time()
        with self._lock:
            expired = [
                key
                for key, pending in self._pending.items()
                if now - pending.created_at > self.pending_ttl_seconds
            ]
            for key in expired:
                del self._pending[key]
            self._pending[state] = PendingAuthorization(
                code_verifier=code_verifier, redirect_uri=redirect_uri, created_at=now
            )

        return f"{self.authorize_url}?{urllib.parse.urlencode(params)}"

    def _token_request_data(
        self, code: str, redirect_uri: str, code_verifier: str | None
    ) -> dict[str, str]:
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
            "client_id": self.client_id,
        }
        if code_verifier:
            data["code_verifier"] = code_verifier
        if self.client_secret:
            data["client_secret"] = self.client_secret
        return data

    @staticmethod
    def _extract_error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except (json.JSONDecodeError, ValueError):
            return response.text[:200] or f"HTTP {response.status_code}"
        if isinstance(body, dict):
            detail = body.get("error_description") or body.get("error")
            if detail:
                return str(detail)
        return f"HTTP {response.status_code}"

    async def exchange_code(
        self, state: str, code: str, redirect_uri: str | None = None
    ) -> dict[str, Any]:
        """Exchange an authorization code for the provider's token response.

        Raises:
            OAuthTokenExchangeError: If the flow is unknown or the exchange fails
        """
        with self._lock:
            pending = self._pending.pop(state, None)
        if pending is None:
            raise OAuthTokenExchangeError("No pending authorization for this state")

        data = self._token_request_data(
            code, redirect_uri or pending.redirect_uri, pending.code_verifier
        )
        headers = {"Accept": "application/json", **self.headers}

        logger.debug(
            "token_exchange_start",
            endpoint=self.token_url,
            has_code=bool(code),
            has_verifier=bool(pending.code_verifier),
            category="auth",
        )

        client = self._http_client or httpx.AsyncClient()
        try:
            if self.use_json_for_token_exchange:
                response = await client.post(
                    self.token_url, json=data, headers=headers, timeout=self.timeout
                )
            else:
                response = await client.post(
                    self.token_url, data=data, headers=headers, timeout=self.timeout
                )
            response.raise_for_status()
            token_response = response.json()
        except httpx.HTTPStatusError as e:
            error_detail = self._extract_error_detail(e.response)
            logger.error(
                "token_exchange_http_error",
                status_code=e.response.status_code,
                error_detail=error_detail,
                category="auth",
            )
            raise OAuthTokenExchangeError(
                f"Token exchange failed: {error_detail}"
            ) from e
        except httpx.TimeoutException as e:
            logger.error("token_exchange_timeout", error=str(e), category="auth")
            raise OAuthTokenExchangeError("Token exchange timed out") from e
        except httpx.HTTPError as e:
            logger.error("token_exchange_network_error", error=str(e), category="auth")
            raise OAuthTokenExchangeError(
                f"HTTP error during token exchange: {e}"
            ) from e
        except (json.JSONDecodeError, ValueError) as e:
            raise OAuthTokenExchangeError(
                "Token exchange failed: Invalid JSON response"
            ) from e
        finally:
            if self._http_client is None:
                await client.aclose()

        if not isinstance(token_response, dict) or "access_token" not in token_response:
            raise OAuthTokenExchangeError("Token exchange failed: missing access_token")

        logger.debug(
            "token_exchange_success",
            has_refresh_token="refresh_token" in token_response,
            expires_in=token_response.get("expires_in"),
            category="auth",
        )
        return token_response
