"""
Prometheus metrics for AI Gateway.

HTTP request counters and latency, per-provider call outcomes, token usage
and rate-limit rejections. Exposed at /metrics via make_asgi_app().
"""

import re
import time
from typing import Any, Callable, Optional

from prometheus_client import (
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    make_asgi_app,
)

# =============================================================================
# Path Normalization
# =============================================================================

# More specific patterns first
_PATH_PATTERNS = [
    (re.compile(r"/[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"), "/{id}"),
    (re.compile(r"/\d+(?=/|$)"), "/{id}"),
]

# Bounded set of templated routes; anything else collapses to one label
_KNOWN_PREFIXES = ("/providers/",)


def normalize_path(path: str) -> str:
    """
    Normalize a URL path so the metrics path label stays low-cardinality.

    Examples:
        >>> normalize_path("/health")
        '/health'
        >>> normalize_path("/providers/deepseek")
        '/providers/{id}'
    """
    if path == "/":
        return path
    for prefix in _KNOWN_PREFIXES:
        if path.startswith(prefix) and len(path) > len(prefix):
            return prefix + "{id}"
    normalized = path
    for pattern, replacement in _PATH_PATTERNS:
        normalized = pattern.sub(replacement, normalized)
    return normalized


# =============================================================================
# Metric Definitions
# =============================================================================

REQUESTS_TOTAL = Counter(
    name="ai_gateway_requests_total",
    documentation="Total number of HTTP requests",
    labelnames=["method", "path", "status"],
)

REQUEST_DURATION_SECONDS = Histogram(
    name="ai_gateway_request_duration_seconds",
    documentation="HTTP request duration in seconds",
    labelnames=["method", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

REQUESTS_IN_PROGRESS = Gauge(
    name="ai_gateway_requests_in_progress",
    documentation="Number of HTTP requests currently being processed",
    labelnames=["method"],
)

PROVIDER_REQUESTS_TOTAL = Counter(
    name="ai_gateway_provider_requests_total",
    documentation="Upstream provider calls by operation and outcome",
    labelnames=["provider", "operation", "outcome"],
)

PROVIDER_LATENCY_SECONDS = Histogram(
    name="ai_gateway_provider_latency_seconds",
    documentation="Upstream provider call latency in seconds",
    labelnames=["provider", "operation"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

TOKEN_USAGE_TOTAL = Counter(
    name="ai_gateway_tokens_total",
    documentation="Total number of tokens reported by upstream providers",
    labelnames=["provider", "model", "type"],
)

RATE_LIMIT_REJECTIONS_TOTAL = Counter(
    name="ai_gateway_rate_limit_rejections_total",
    documentation="Requests rejected by the rate limiter",
    labelnames=["route_class"],
)


# =============================================================================
# Helper Functions
# =============================================================================


def record_provider_call(
    provider: str,
    operation: str,
    outcome: str,
    duration_seconds: float,
) -> None:
    """
    Record one upstream provider call.

    Args:
        provider: Provider identifier (deepseek, anthropic, ...)
        operation: chat, stream, embeddings or rerank
        outcome: success or error
        duration_seconds: Wall time of the call
    """
    PROVIDER_REQUESTS_TOTAL.labels(
        provider=provider, operation=operation, outcome=outcome
    ).inc()
    PROVIDER_LATENCY_SECONDS.labels(provider=provider, operation=operation).observe(
        duration_seconds
    )


def record_token_usage(provider: str, model: str, usage: Optional[dict[str, Any]]) -> None:
    """Record prompt/completion token counts from an upstream usage block."""
    if not usage:
        return
    for token_type in ("prompt_tokens", "completion_tokens"):
        count = usage.get(token_type)
        if isinstance(count, int) and count > 0:
            TOKEN_USAGE_TOTAL.labels(
                provider=provider, model=model, type=token_type.split("_")[0]
            ).inc(count)


def record_rate_limit_rejection(route_class: str) -> None:
    RATE_LIMIT_REJECTIONS_TOTAL.labels(route_class=route_class).inc()


# =============================================================================
# MetricsMiddleware
# =============================================================================


class MetricsMiddleware:
    """
    ASGI middleware for Prometheus metrics collection.

    Counts requests per method/path/status, records latency and tracks
    in-progress requests. The /metrics path itself is excluded.
    """

    def __init__(
        self,
        app: Callable[..., Any],
        exclude_paths: Optional[list[str]] = None,
    ) -> None:
        self.app = app
        self.exclude_paths = exclude_paths or ["/metrics"]

    async def __call__(
        self,
        scope: dict[str, Any],
        receive: Callable[..., Any],
        send: Callable[..., Any],
    ) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "GET")
        raw_path = scope.get("path", "/")

        if any(raw_path == p or raw_path.startswith(p + "/") for p in self.exclude_paths):
            await self.app(scope, receive, send)
            return

        path = normalize_path(raw_path)
        REQUESTS_IN_PROGRESS.labels(method=method).inc()
        start_time = time.perf_counter()
        status_code = "500"

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = str(message.get("status", 500))
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration = time.perf_counter() - start_time
            REQUESTS_TOTAL.labels(method=method, path=path, status=status_code).inc()
            REQUEST_DURATION_SECONDS.labels(method=method, path=path).observe(duration)
            REQUESTS_IN_PROGRESS.labels(method=method).dec()


def get_metrics_app() -> Callable[..., Any]:
    """ASGI app serving the Prometheus exposition format."""
    return make_asgi_app()


def generate_metrics() -> str:
    return generate_latest(REGISTRY).decode("utf-8")
