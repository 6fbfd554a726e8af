"""Shared fixtures: a fake payment processor and a controllable clock."""

import asyncio
import os

os.environ.setdefault("TRACING_ENABLED", "false")

import httpx
import pytest

from payrelay.services.relay.service import OrderGateway
from payrelay.services.relay.token_cache import TokenCache

BASE_URL = "https://api-m.sandbox.test"
TOKEN_PATH = "/v1/oauth2/token"
ORDERS_PATH = "/v2/checkout/orders"


def order_body(order_id: str = "5O190127TN364715T", approve_href: str = "https://www.sandbox.test/checkoutnow?token=5O190127TN364715T") -> dict:
    return {
        "id": order_id,
        "status": "CREATED",
        "links": [
            {"href": f"{BASE_URL}{ORDERS_PATH}/{order_id}", "rel": "self", "method": "GET"},
            {"href": approve_href, "rel": "approve", "method": "GET"},
            {"href": f"{BASE_URL}{ORDERS_PATH}/{order_id}/capture", "rel": "capture", "method": "POST"},
        ],
    }


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeProcessor:
    """Answers token, create and capture calls; records every request.

    A reply is `(status, body)` where body is JSON-able or raw bytes, or an
    exception instance to raise as a transport failure.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.token_reply = (200, {"access_token": "tok-1", "token_type": "Bearer", "expires_in": 3600})
        self.order_reply = (201, order_body())
        self.capture_reply = (201, b'{"id":"5O190127TN364715T","status":"COMPLETED"}')

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def _respond(self, request: httpx.Request, reply) -> httpx.Response:
        if isinstance(reply, Exception):
            raise reply
        status, body = reply
        if isinstance(body, bytes):
            return httpx.Response(status, content=body, headers={"content-type": "application/json"})
        return httpx.Response(status, json=body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == TOKEN_PATH:
            return self._respond(request, self.token_reply)
        if path == ORDERS_PATH:
            return self._respond(request, self.order_reply)
        if path.startswith(ORDERS_PATH) and path.endswith("/capture"):
            return self._respond(request, self.capture_reply)
        return httpx.Response(404, json={"name": "RESOURCE_NOT_FOUND"})


@pytest.fixture
def processor() -> FakeProcessor:
    return FakeProcessor()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def upstream_client(processor):
    client = httpx.AsyncClient(transport=httpx.MockTransport(processor.handler))
    yield client
    asyncio.run(client.aclose())


@pytest.fixture
def token_cache(upstream_client, clock) -> TokenCache:
    return TokenCache(upstream_client, BASE_URL, "client-id", "client-secret", clock=clock)


@pytest.fixture
def gateway(token_cache, upstream_client) -> OrderGateway:
    return OrderGateway(
        token_cache,
        upstream_client,
        base_url=BASE_URL,
        return_url="https://shop.test/paypal/return",
        cancel_url="https://shop.test/paypal/cancel",
    )
