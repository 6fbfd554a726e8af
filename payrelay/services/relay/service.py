"""Order create/capture passthrough to the payment processor.

Each operation fetches a bearer token from the injected `TokenCache` and makes
one upstream call. Failures come back as `Err` values; nothing is retried.
"""

import secrets
from dataclasses import dataclass
from urllib.parse import urlencode, urlsplit, urlunsplit

import httpx

from payrelay.common.errors import RelayError, UpstreamOrderError
from payrelay.common.logging import correlation_token_ctx, logger, order_id_ctx
from payrelay.common.metrics import upstream_latency_seconds
from payrelay.common.result import Err, Ok, Result
from payrelay.services.relay.token_cache import TokenCache

CORRELATION_TOKEN_BYTES = 8
CORRELATION_QUERY_PARAM = "correlation"


@dataclass(frozen=True)
class CreatedOrder:
    order_id: str
    approve_link: str
    correlation_token: str


@dataclass(frozen=True)
class UpstreamReply:
    """Raw upstream response body, relayed without interpretation."""

    body: bytes
    content_type: str


def new_correlation_token() -> str:
    """Return 8 random bytes as 16 lowercase hex characters."""

    return secrets.token_hex(CORRELATION_TOKEN_BYTES)


def with_query_param(url: str, name: str, value: str) -> str:
    """Append one query parameter, keeping any the URL already carries."""

    parts = urlsplit(url)
    extra = urlencode({name: value})
    query = f"{parts.query}&{extra}" if parts.query else extra
    return urlunsplit(parts._replace(query=query))


def find_approve_link(order: dict) -> str:
    """Pull the `approve` href out of an order's HATEOAS link list."""

    links = order.get("links")
    if not isinstance(links, list):
        raise UpstreamOrderError("order response has no links")
    for link in links:
        if not isinstance(link, dict) or link.get("rel") != "approve":
            continue
        href = link.get("href")
        if isinstance(href, str) and href:
            return href
    raise UpstreamOrderError("order response has no approve link")


class OrderGateway:
    """Creates and captures orders on behalf of the caller."""

    def __init__(
        self,
        token_cache: TokenCache,
        client: httpx.AsyncClient,
        base_url: str,
        return_url: str,
        cancel_url: str,
        service_name: str = "payment-relay",
    ) -> None:
        self.token_cache = token_cache
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.return_url = return_url
        self.cancel_url = cancel_url
        self.service_name = service_name

    def _order_payload(self, amount: str, currency: str, payee_email: str, correlation_token: str) -> dict:
        return {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "amount": {"currency_code": currency, "value": amount},
                    "payee": {"email_address": payee_email},
                }
            ],
            "application_context": {
                "return_url": with_query_param(self.return_url, CORRELATION_QUERY_PARAM, correlation_token),
                "cancel_url": self.cancel_url,
            },
        }

    async def create_order(
        self, amount: str, currency: str, payee_email: str
    ) -> Result[CreatedOrder, RelayError]:
        """Create a capture-intent order and return its id and approve link."""

        token = await self.token_cache.get_token()
        if isinstance(token, Err):
            return token

        correlation_token = new_correlation_token()
        correlation_token_ctx.set(correlation_token)
        try:
            with upstream_latency_seconds.labels(service=self.service_name, endpoint="create_order").time():
                resp = await self.client.post(
                    f"{self.base_url}/v2/checkout/orders",
                    headers={"Authorization": f"Bearer {token.value}"},
                    json=self._order_payload(amount, currency, payee_email, correlation_token),
                )
        except httpx.HTTPError as exc:
            return Err(UpstreamOrderError(f"create order request failed: {exc}"))

        try:
            order = resp.json()
        except ValueError:
            return Err(UpstreamOrderError(f"create order returned non-JSON status={resp.status_code}"))
        if not isinstance(order, dict):
            return Err(UpstreamOrderError("create order returned unexpected body"))

        try:
            approve_link = find_approve_link(order)
        except UpstreamOrderError as exc:
            logger.warning("order response incomplete status=%s reason=%s", resp.status_code, exc)
            return Err(exc)
        order_id = order.get("id")
        if not isinstance(order_id, str) or not order_id:
            logger.warning("order response has no usable id status=%s", resp.status_code)
            return Err(UpstreamOrderError("order response has no id"))

        order_id_ctx.set(order_id)
        logger.info("order created status=%s", order.get("status"))
        return Ok(CreatedOrder(order_id=order_id, approve_link=approve_link, correlation_token=correlation_token))

    async def capture_order(self, order_id: str) -> Result[UpstreamReply, RelayError]:
        """Capture an approved order and hand back the upstream body untouched."""

        token = await self.token_cache.get_token()
        if isinstance(token, Err):
            return token

        order_id_ctx.set(order_id)
        try:
            with upstream_latency_seconds.labels(service=self.service_name, endpoint="capture_order").time():
                resp = await self.client.post(
                    f"{self.base_url}/v2/checkout/orders/{order_id}/capture",
                    headers={
                        "Authorization": f"Bearer {token.value}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.HTTPError as exc:
            return Err(UpstreamOrderError(f"capture request failed: {exc}"))

        logger.info("capture relayed upstream_status=%s", resp.status_code)
        return Ok(
            UpstreamReply(
                body=resp.content,
                content_type=resp.headers.get("content-type", "application/json"),
            )
        )
