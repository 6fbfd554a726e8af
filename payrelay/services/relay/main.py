"""HTTP surface for order creation and capture.

Owns the shared upstream HTTP client and the token cache for the lifetime of
the app. Every failure kind is answered with the same fixed 500 message.
"""

from contextlib import asynccontextmanager
from time import perf_counter
from uuid import uuid4

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response

from payrelay.common.config import settings
from payrelay.common.logging import configure_logging, logger, trace_id_ctx
from payrelay.common.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    metrics_response,
    relay_requests_total,
)
from payrelay.common.result import Err
from payrelay.common.startup import log_startup_config
from payrelay.common.tracing import instrument_app, setup_tracing
from payrelay.services.relay.schemas import (
    CaptureOrderRequest,
    CreateOrderRequest,
    CreateOrderResponse,
    ErrorResponse,
)
from payrelay.services.relay.service import OrderGateway
from payrelay.services.relay.token_cache import TokenCache

CREATE_FAILED_MESSAGE = "Failed to create order"
CAPTURE_FAILED_MESSAGE = "Failed to capture order"

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings.service_name,
    ["SERVICE_NAME", "PORT", "PAYPAL_BASE_URL", "PAYPAL_CLIENT_ID", "PAYPAL_SECRET", "RETURN_URL", "CANCEL_URL"],
)


def build_gateway(client: httpx.AsyncClient) -> OrderGateway:
    """Wire a token cache and gateway around one upstream client."""

    token_cache = TokenCache(
        client,
        base_url=settings.paypal_base_url,
        client_id=settings.paypal_client_id,
        client_secret=settings.paypal_secret,
        service_name=settings.service_name,
    )
    return OrderGateway(
        token_cache,
        client,
        base_url=settings.paypal_base_url,
        return_url=settings.return_url,
        cancel_url=settings.cancel_url,
        service_name=settings.service_name,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the upstream client with app lifecycle."""

    async with httpx.AsyncClient(timeout=settings.upstream_timeout_seconds) as client:
        app.state.gateway = build_gateway(client)
        yield


app = FastAPI(title="Payment Relay", lifespan=lifespan)
instrument_app(app)


def get_gateway(request: Request) -> OrderGateway:
    return request.app.state.gateway


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Record request count and latency for every HTTP call."""

    trace_id_ctx.set(request.headers.get("x-request-id") or str(uuid4()))
    start = perf_counter()
    route = request.url.path
    method = request.method
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        return response
    finally:
        elapsed = max(0.0, perf_counter() - start)
        http_request_duration_seconds.labels(
            service=settings.service_name,
            route=route,
            method=method,
        ).observe(elapsed)
        http_requests_total.labels(
            service=settings.service_name,
            route=route,
            method=method,
            status_code=str(status_code),
        ).inc()


def _failure(operation: str, error, message: str) -> JSONResponse:
    logger.error("%s failed kind=%s reason=%s", operation, error.code, error.message)
    relay_requests_total.labels(service=settings.service_name, operation=operation, outcome="error").inc()
    return JSONResponse(status_code=500, content={"error": message})


@app.post(
    "/create-order",
    response_model=CreateOrderResponse,
    responses={500: {"model": ErrorResponse}},
)
async def create_order(req: CreateOrderRequest, gateway: OrderGateway = Depends(get_gateway)):
    """Create an order upstream and return its approve link."""

    result = await gateway.create_order(req.amount, req.currency, req.payee_email)
    if isinstance(result, Err):
        return _failure("create_order", result.error, CREATE_FAILED_MESSAGE)
    relay_requests_total.labels(service=settings.service_name, operation="create_order", outcome="ok").inc()
    created = result.value
    return CreateOrderResponse(
        order_id=created.order_id,
        approve_link=created.approve_link,
        correlation_token=created.correlation_token,
    )


@app.post("/capture-order", responses={500: {"model": ErrorResponse}})
async def capture_order(req: CaptureOrderRequest, gateway: OrderGateway = Depends(get_gateway)):
    """Capture an approved order and relay the upstream body as-is."""

    result = await gateway.capture_order(req.order_id)
    if isinstance(result, Err):
        return _failure("capture_order", result.error, CAPTURE_FAILED_MESSAGE)
    relay_requests_total.labels(service=settings.service_name, operation="capture_order", outcome="ok").inc()
    return Response(content=result.value.body, media_type=result.value.content_type)


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


@app.get("/health")
def health():
    """Container health probe endpoint."""

    return {"ok": True}
