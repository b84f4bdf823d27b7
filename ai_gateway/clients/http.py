"""
HTTP Client Factory

Builds the single httpx.AsyncClient the application shares across provider
adapters and the vector store client. Created in the app lifespan and closed
on shutdown.
"""

from typing import Optional

import httpx

from ai_gateway import __version__

DEFAULT_TIMEOUT_SECONDS: float = 60.0
DEFAULT_MAX_CONNECTIONS: int = 100
DEFAULT_MAX_KEEPALIVE: int = 20


def create_http_client(
    timeout_seconds: Optional[float] = None,
    max_connections: Optional[int] = None,
    max_keepalive: Optional[int] = None,
    headers: Optional[dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create a configured HTTP client with connection pooling and timeouts.

    Connection-level retries are disabled: a failed upstream call is
    reported to the caller, never repeated by the gateway.

    Args:
        timeout_seconds: Default request timeout (default: 60.0)
        max_connections: Maximum connections in pool (default: 100)
        max_keepalive: Maximum keepalive connections (default: 20)
        headers: Additional headers to include in all requests
        transport: Replacement transport (tests pass httpx.MockTransport)

    Returns:
        httpx.AsyncClient: Configured async HTTP client
    """
    timeout = timeout_seconds if timeout_seconds is not None else DEFAULT_TIMEOUT_SECONDS
    max_conn = max_connections if max_connections is not None else DEFAULT_MAX_CONNECTIONS
    max_keep = max_keepalive if max_keepalive is not None else DEFAULT_MAX_KEEPALIVE

    limits = httpx.Limits(
        max_connections=max_conn,
        max_keepalive_connections=max_keep,
    )

    default_headers = {
        "User-Agent": f"ai-gateway/{__version__}",
        "Accept": "application/json",
    }
    if headers:
        default_headers.update(headers)

    if transport is None:
        transport = httpx.AsyncHTTPTransport(retries=0, limits=limits)

    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout, connect=min(10.0, timeout)),
        headers=default_headers,
        transport=transport,
    )
