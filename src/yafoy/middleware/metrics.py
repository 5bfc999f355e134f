"""Prometheus metrics middleware and domain counters."""
import time
from typing import Callable

from prometheus_client import Counter, Gauge, Histogram, generate_latest
from prometheus_client import CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


# =============================================================================
# Prometheus Metrics Definitions
# =============================================================================

# Request metrics
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_requests_active",
    "Number of active HTTP requests",
)

# Order lifecycle metrics
ORDER_TRANSITIONS = Counter(
    "order_transitions_total",
    "Order status transition attempts",
    ["target", "outcome"],  # success, refused, busy, error
)

# Chat metrics
CHAT_MESSAGES = Counter(
    "chat_messages_total",
    "Chat messages submitted",
    ["outcome"],  # sent, rejected
)

# Planner metrics
PLANNER_STREAMS = Counter(
    "planner_streams_total",
    "Event planner completion streams",
    ["outcome"],  # completed, upstream_error
)

PLANNER_STREAM_LATENCY = Histogram(
    "planner_stream_duration_seconds",
    "Duration of a full planner stream in seconds",
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0],
)


# =============================================================================
# Metrics Middleware
# =============================================================================

class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for all HTTP requests."""

    # Endpoints to normalize for metrics (reduce cardinality)
    ENDPOINT_PATTERNS = {
        "/api/v1/auth": "/api/v1/auth",
        "/api/v1/products": "/api/v1/products",
        "/api/v1/orders": "/api/v1/orders",
        "/api/v1/favorites": "/api/v1/favorites",
        "/api/v1/chat": "/api/v1/chat",
        "/api/v1/notifications": "/api/v1/notifications",
        "/api/v1/voice": "/api/v1/voice",
        "/api/v1/planner": "/api/v1/planner",
        "/api/v1/organizers": "/api/v1/organizers",
        "/storage": "/storage",
        "/ws": "/ws",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Skip metrics endpoint to avoid recursion
        if request.url.path == "/metrics":
            return await call_next(request)

        # Track active requests
        ACTIVE_REQUESTS.inc()
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception:
            status_code = 500
            raise
        finally:
            ACTIVE_REQUESTS.dec()
            latency = time.perf_counter() - start_time

            # Normalize endpoint for metrics (reduce cardinality)
            endpoint = self._normalize_endpoint(request.url.path)

            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=endpoint,
                status=status_code,
            ).inc()

            REQUEST_LATENCY.labels(
                method=request.method,
                endpoint=endpoint,
            ).observe(latency)

        return response

    def _normalize_endpoint(self, path: str) -> str:
        """Normalize endpoint path to reduce metric cardinality."""
        for pattern, normalized in self.ENDPOINT_PATTERNS.items():
            if path.startswith(pattern):
                return normalized

        if path in ("/health", "/metrics"):
            return path

        return "/other"


# =============================================================================
# Metrics Endpoint
# =============================================================================

async def metrics_endpoint(request: Request) -> Response:
    """Prometheus metrics scrape endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


# =============================================================================
# Helper Functions for Manual Metric Recording
# =============================================================================

def record_order_transition(target: str, outcome: str) -> None:
    ORDER_TRANSITIONS.labels(target=target, outcome=outcome).inc()


def record_chat_message(outcome: str) -> None:
    CHAT_MESSAGES.labels(outcome=outcome).inc()


def record_planner_stream(outcome: str, duration: float) -> None:
    """Record the outcome and total duration of a planner stream."""
    PLANNER_STREAMS.labels(outcome=outcome).inc()
    PLANNER_STREAM_LATENCY.observe(duration)
