"""
Provider Adapter Base

This module defines the contract every upstream adapter implements, plus the
HTTP plumbing they share: key checks, JSON calls, upstream error decoding and
server-sent-event parsing.

Contract:
- chat(request) -> upstream completion envelope (OpenAI chat.completion shape)
- stream_chat(request) -> async generator of chat.completion.chunk dicts
- embeddings(request) -> OpenAI embedding list shape (optional capability)
- rerank(request) -> ranked passages (optional capability)

Every failure an adapter reports is a ProviderError carrying the provider id,
the upstream status and the upstream body. Upstream calls are never retried.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional

import httpx

from ai_gateway.core.exceptions import GatewayNotImplementedError, ProviderError
from ai_gateway.models.requests import ChatRequest, EmbeddingRequest, RerankRequest
from ai_gateway.observability.logging import get_logger

logger = get_logger(__name__)

# Upstream bodies longer than this are truncated in error details
MAX_ERROR_BODY_CHARS = 2000


@dataclass(frozen=True)
class ProviderCapabilities:
    chat: bool = True
    streaming: bool = True
    embeddings: bool = False
    rerank: bool = False

    def as_list(self) -> list[str]:
        return [name for name in ("chat", "streaming", "embeddings", "rerank") if getattr(self, name)]


def decode_error_body(response: httpx.Response) -> Any:
    """Parsed JSON body if possible, else the (truncated) raw text."""
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        text = response.text
        return text[:MAX_ERROR_BODY_CHARS] if text else None


def extract_error_message(body: Any, fallback: str) -> str:
    """
    Pull a human message out of an upstream error body.

    Looks at error.message, then a string error, then message; anything else
    yields the fallback.
    """
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str) and error:
            return error
        if isinstance(body.get("message"), str) and body["message"]:
            return body["message"]
        if isinstance(body.get("detail"), str) and body["detail"]:
            return body["detail"]
    return fallback


class ProviderAdapter(ABC):
    """
    Abstract base class for upstream provider adapters.

    Adapters are stateless apart from read-only configuration and a shared
    httpx.AsyncClient owned by the application; one instance serves all
    concurrent requests.

    Class attributes:
        provider_id: Registry key clients send as ``provider``
        display_name: Human readable name used in messages
        capabilities: Operations this adapter supports

    Args:
        http_client: Shared async HTTP client
        api_key: Upstream API key; empty means not configured
        base_url: Upstream API root without trailing slash
        timeout_seconds: Per-call timeout
    """

    provider_id: str = ""
    display_name: str = ""
    capabilities: ProviderCapabilities = ProviderCapabilities()

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        base_url: str,
        timeout_seconds: float = 60.0,
    ) -> None:
        self._client = http_client
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(timeout_seconds, connect=min(10.0, timeout_seconds))

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    # =========================================================================
    # Operations
    # =========================================================================

    @abstractmethod
    async def chat(self, request: ChatRequest) -> dict[str, Any]:
        """
        Issue one non-streaming chat call.

        Args:
            request: Canonical chat request

        Returns:
            Completion envelope in OpenAI chat.completion shape

        Raises:
            ProviderError: non-2xx upstream status or transport failure
        """

    @abstractmethod
    def stream_chat(self, request: ChatRequest) -> AsyncIterator[dict[str, Any]]:
        """
        Stream a chat completion as chat.completion.chunk dicts.

        The returned async generator is lazy, finite and non-restartable.
        It suspends on every upstream read; closing it (or cancelling the
        task consuming it) closes the upstream connection. A malformed or
        truncated upstream stream raises ProviderError instead of ending
        normally.
        """

    async def embeddings(self, request: EmbeddingRequest) -> dict[str, Any]:
        raise GatewayNotImplementedError(
            f"{self.display_name} does not support embeddings"
        )

    async def rerank(self, request: RerankRequest) -> dict[str, Any]:
        raise GatewayNotImplementedError(f"{self.display_name} does not support rerank")

    # =========================================================================
    # Shared HTTP plumbing
    # =========================================================================

    def _require_key(self) -> None:
        if not self._api_key:
            raise ProviderError(
                f"{self.display_name} API key not configured",
                provider=self.provider_id,
            )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def _error_from_response(self, response: httpx.Response) -> ProviderError:
        body = decode_error_body(response)
        message = extract_error_message(
            body,
            f"{self.display_name} request failed with status {response.status_code}",
        )
        logger.warning(
            "provider_error_response",
            provider=self.provider_id,
            status=response.status_code,
        )
        return ProviderError(
            message,
            provider=self.provider_id,
            upstream_status=response.status_code,
            upstream_body=body,
        )

    def _transport_error(self, exc: httpx.HTTPError) -> ProviderError:
        logger.warning(
            "provider_transport_error",
            provider=self.provider_id,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        if isinstance(exc, httpx.TimeoutException):
            message = f"{self.display_name} request timed out"
        else:
            message = f"{self.display_name} request failed: {type(exc).__name__}"
        return ProviderError(message, provider=self.provider_id)

    async def _post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        """POST a JSON payload and return the decoded JSON response."""
        self._require_key()
        try:
            response = await self._client.post(
                url,
                json=payload,
                headers=headers or self._headers(),
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise self._transport_error(e) from e

        if response.status_code >= 400:
            raise self._error_from_response(response)
        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProviderError(
                f"{self.display_name} returned a non-JSON response",
                provider=self.provider_id,
                upstream_status=response.status_code,
                upstream_body=response.text[:MAX_ERROR_BODY_CHARS],
            ) from e
        if not isinstance(data, dict):
            raise ProviderError(
                f"{self.display_name} returned an unexpected response",
                provider=self.provider_id,
                upstream_status=response.status_code,
            )
        return data

    async def _iter_sse(
        self,
        url: str,
        payload: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
        require_done: bool = True,
    ) -> AsyncIterator[dict[str, Any]]:
        """
        Open a streaming POST and yield each ``data:`` event as a dict.

        Lines are reassembled by httpx, so an event split across network
        reads still parses. Comment lines (``:``) and ``event:``/``id:``
        fields are skipped. ``data: [DONE]`` ends the iteration.

        Args:
            require_done: Raise ProviderError if the stream closes without
                ``[DONE]``. Providers with their own terminal event pass False
                and check it themselves.
        """
        self._require_key()
        try:
            async with self._client.stream(
                "POST",
                url,
                json=payload,
                headers=headers or self._headers(),
                timeout=self._timeout,
            ) as response:
                if response.status_code >= 400:
                    await response.aread()
                    raise self._error_from_response(response)

                async for line in response.aiter_lines():
                    line = line.strip()
                    if not line or line.startswith(":") or not line.startswith("data:"):
                        continue
                    data = line[len("data:"):].strip()
                    if data == "[DONE]":
                        return
                    try:
                        event = json.loads(data)
                    except json.JSONDecodeError as e:
                        raise ProviderError(
                            f"{self.display_name} sent a malformed stream event",
                            provider=self.provider_id,
                            upstream_body=data[:MAX_ERROR_BODY_CHARS],
                        ) from e
                    if isinstance(event, dict):
                        yield event
        except httpx.HTTPError as e:
            raise self._transport_error(e) from e

        if require_done:
            raise ProviderError(
                f"{self.display_name} stream ended before completion",
                provider=self.provider_id,
            )
