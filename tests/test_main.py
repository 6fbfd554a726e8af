"""HTTP surface of the relay."""

import re

import pytest
from fastapi.testclient import TestClient

from payrelay.services.relay.main import app, get_gateway
from payrelay.services.relay.service import OrderGateway
from payrelay.services.relay.token_cache import TokenCache

from conftest import BASE_URL, order_body

ORDER_PAYLOAD = {"amount": "10.00", "currency": "USD", "payeeEmail": "payee@example.com"}


@pytest.fixture
def client(gateway):
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_create_order_returns_ids(client, processor):
    """Create answers with order id, approve link and correlation token."""

    processor.order_reply = (201, order_body("ORDER-1", approve_href="https://approve.test/ORDER-1"))

    response = client.post("/create-order", json=ORDER_PAYLOAD)

    assert response.status_code == 200
    data = response.json()
    assert data["orderID"] == "ORDER-1"
    assert data["approveLink"] == "https://approve.test/ORDER-1"
    assert re.fullmatch(r"[0-9a-f]{16}", data["correlationToken"])


def test_create_order_missing_approve_link_is_generic_500(client, processor):
    """An order without an approve link gets the fixed failure message."""

    processor.order_reply = (201, {"id": "ORDER-1", "links": []})

    response = client.post("/create-order", json=ORDER_PAYLOAD)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create order"}


@pytest.mark.parametrize(
    "body",
    [
        {"id": 12345, "status": "CREATED", "links": [{"href": "X", "rel": "approve"}]},
        {"id": "ORDER-1", "status": "CREATED", "links": [{"href": {"x": 1}, "rel": "approve"}]},
    ],
)
def test_create_order_mistyped_fields_is_generic_500(client, processor, body):
    """Non-string id or href still gets the fixed JSON failure message."""

    processor.order_reply = (201, body)

    response = client.post("/create-order", json=ORDER_PAYLOAD)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create order"}


def test_auth_failures_look_the_same_to_the_caller(client, processor):
    """A rejected token exchange is indistinguishable from other failures."""

    processor.token_reply = (401, {"error": "invalid_client"})

    response = client.post("/create-order", json=ORDER_PAYLOAD)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create order"}


def test_missing_credentials_is_generic_500(upstream_client, clock):
    """Missing credentials give the fixed capture failure message."""

    cache = TokenCache(upstream_client, BASE_URL, None, None, clock=clock)
    gateway = OrderGateway(cache, upstream_client, BASE_URL, "https://r.test", "https://c.test")
    app.dependency_overrides[get_gateway] = lambda: gateway
    try:
        response = TestClient(app).post("/capture-order", json={"orderID": "ORDER-1"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to capture order"}


def test_capture_body_is_byte_identical(client, processor):
    """Capture relays the upstream bytes unchanged."""

    raw = b'{"id":"ORDER-1",  "status":"COMPLETED","payer":{"payer_id":"QYR5Z8XDVJNXQ"}}'
    processor.capture_reply = (201, raw)

    response = client.post("/capture-order", json={"orderID": "ORDER-1"})

    assert response.status_code == 200
    assert response.content == raw


@pytest.mark.parametrize(
    "path,payload",
    [
        ("/create-order", {"amount": "ten", "currency": "USD", "payeeEmail": "p@example.com"}),
        ("/create-order", {"amount": "10.00", "currency": "usd", "payeeEmail": "p@example.com"}),
        ("/create-order", {"amount": "10.00", "currency": "USD"}),
        ("/capture-order", {"orderID": "../../v1/identity"}),
        ("/capture-order", {}),
    ],
)
def test_malformed_request_is_rejected(client, processor, path, payload):
    """Invalid request bodies are rejected before any upstream call."""

    response = client.post(path, json=payload)

    assert response.status_code == 422
    assert processor.requests == []


def test_health(client):
    """Health probe answers ok."""

    assert client.get("/health").json() == {"ok": True}


def test_metrics_exposes_relay_counters(client):
    """Relay and token counters are exported for scraping."""

    client.post("/create-order", json=ORDER_PAYLOAD)

    body = client.get("/metrics").text

    assert "relay_requests_total" in body
    assert "token_exchanges_total" in body
