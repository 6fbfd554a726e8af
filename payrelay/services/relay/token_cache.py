"""Access-token cache backed by the OAuth2 client-credentials exchange."""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable

import httpx

from payrelay.common.errors import AuthConfigError, AuthExchangeError, RelayError
from payrelay.common.logging import logger
from payrelay.common.metrics import token_exchanges_total, upstream_latency_seconds
from payrelay.common.result import Err, Ok, Result

EXPIRY_MARGIN_SECONDS = 60


@dataclass(frozen=True)
class CachedCredential:
    token: str
    expires_at: float


class TokenCache:
    """Holds one bearer token and refreshes it once it nears expiry.

    Refresh is serialized by a lock and re-checked after acquiring it, so
    concurrent callers that find the cache stale share a single exchange.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        client_id: str | None,
        client_secret: str | None,
        clock: Callable[[], float] = time.time,
        service_name: str = "payment-relay",
    ) -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.clock = clock
        self.service_name = service_name
        self._credential: CachedCredential | None = None
        self._refresh_lock = asyncio.Lock()

    @property
    def credential(self) -> CachedCredential | None:
        return self._credential

    def _fresh_token(self) -> str | None:
        credential = self._credential
        if credential is not None and self.clock() < credential.expires_at:
            return credential.token
        return None

    def invalidate(self) -> None:
        """Drop the cached credential so the next call exchanges again."""

        self._credential = None

    async def get_token(self) -> Result[str, RelayError]:
        """Return a valid bearer token, exchanging credentials when needed."""

        token = self._fresh_token()
        if token is not None:
            return Ok(token)
        async with self._refresh_lock:
            token = self._fresh_token()
            if token is not None:
                return Ok(token)
            return await self._exchange()

    async def _exchange(self) -> Result[str, RelayError]:
        if not self.client_id or not self.client_secret:
            token_exchanges_total.labels(service=self.service_name, outcome="config_error").inc()
            return Err(AuthConfigError("PAYPAL_CLIENT_ID and PAYPAL_SECRET must be set"))

        now = self.clock()
        try:
            with upstream_latency_seconds.labels(service=self.service_name, endpoint="oauth2_token").time():
                resp = await self.client.post(
                    f"{self.base_url}/v1/oauth2/token",
                    auth=(self.client_id, self.client_secret),
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                    content="grant_type=client_credentials",
                )
        except httpx.HTTPError as exc:
            return self._exchange_failed(f"token request failed: {exc}")

        if resp.status_code >= 400:
            return self._exchange_failed(f"token endpoint returned {resp.status_code}")
        try:
            data = resp.json()
        except ValueError:
            return self._exchange_failed("token response is not JSON")
        if not isinstance(data, dict) or not isinstance(data.get("access_token"), str) or not data["access_token"]:
            return self._exchange_failed("token response missing access_token")
        ttl = data.get("expires_in")
        if isinstance(ttl, bool) or not isinstance(ttl, (int, float)):
            return self._exchange_failed("token response missing expires_in")

        self._credential = CachedCredential(
            token=data["access_token"],
            expires_at=now + ttl - EXPIRY_MARGIN_SECONDS,
        )
        token_exchanges_total.labels(service=self.service_name, outcome="ok").inc()
        logger.info("access token refreshed expires_in=%s", ttl)
        return Ok(self._credential.token)

    def _exchange_failed(self, reason: str) -> Err[AuthExchangeError]:
        token_exchanges_total.labels(service=self.service_name, outcome="exchange_error").inc()
        logger.warning("token exchange failed reason=%s", reason)
        return Err(AuthExchangeError(reason))
