"""
Observability package: structured logging and Prometheus metrics.
"""

from ai_gateway.observability.logging import (
    configure_logging,
    correlation_id_context,
    get_correlation_id,
    get_logger,
    reset_correlation_id,
    set_correlation_id,
)
from ai_gateway.observability.metrics import (
    MetricsMiddleware,
    generate_metrics,
    get_metrics_app,
    record_provider_call,
    record_rate_limit_rejection,
    record_token_usage,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "set_correlation_id",
    "reset_correlation_id",
    "get_correlation_id",
    "correlation_id_context",
    # Metrics
    "MetricsMiddleware",
    "get_metrics_app",
    "generate_metrics",
    "record_provider_call",
    "record_token_usage",
    "record_rate_limit_rejection",
]
