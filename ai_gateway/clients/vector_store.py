"""
Vector store client.

Calls a Supabase (PostgREST) remote procedure that takes a query embedding,
a similarity threshold and a match count, and returns matches ranked by
descending similarity.
"""

import json
from typing import Any, Optional

import httpx

from ai_gateway.core.exceptions import ProviderError
from ai_gateway.observability.logging import get_logger
from ai_gateway.providers.base import decode_error_body, extract_error_message

logger = get_logger(__name__)

PROVIDER_ID = "supabase"


class SupabaseVectorStoreClient:
    """
    Client for the similarity-search RPC.

    The Supabase project URL and key come from the caller on every request,
    so the client holds no credentials of its own.

    Args:
        http_client: Shared async HTTP client
        rpc_function: Name of the RPC (default: match_documents)
        timeout_seconds: Per-call timeout
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        rpc_function: str = "match_documents",
        timeout_seconds: float = 30.0,
    ) -> None:
        self._client = http_client
        self._rpc_function = rpc_function
        self._timeout = timeout_seconds

    async def match_documents(
        self,
        supabase_url: str,
        supabase_key: str,
        embedding: list[float],
        threshold: float,
        limit: int,
    ) -> list[dict[str, Any]]:
        """
        Run the similarity search.

        The threshold is forwarded as given; filtering is the store's job.

        Raises:
            ProviderError: non-2xx response, transport failure or a body
                that is not a JSON array
        """
        url = f"{supabase_url.rstrip('/')}/rest/v1/rpc/{self._rpc_function}"
        try:
            response = await self._client.post(
                url,
                json={
                    "query_embedding": embedding,
                    "match_threshold": threshold,
                    "match_count": limit,
                },
                headers={
                    "Content-Type": "application/json",
                    "apikey": supabase_key,
                    "Authorization": f"Bearer {supabase_key}",
                },
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning("vector_store_timeout", error=str(e))
            raise ProviderError("Vector store request timed out", provider=PROVIDER_ID) from e
        except httpx.HTTPError as e:
            logger.warning("vector_store_unreachable", error_type=type(e).__name__, error=str(e))
            raise ProviderError(
                f"Vector store request failed: {type(e).__name__}", provider=PROVIDER_ID
            ) from e

        if response.status_code >= 400:
            body = decode_error_body(response)
            raise ProviderError(
                extract_error_message(
                    body, f"Vector store search failed with status {response.status_code}"
                ),
                provider=PROVIDER_ID,
                upstream_status=response.status_code,
                upstream_body=body,
            )

        data: Optional[Any]
        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            data = None
        if not isinstance(data, list):
            raise ProviderError(
                "Vector store returned an unexpected response",
                provider=PROVIDER_ID,
                upstream_status=response.status_code,
            )
        return data
