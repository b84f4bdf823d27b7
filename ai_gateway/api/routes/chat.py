"""
Chat Router

POST /chat relays a canonical chat request to the selected provider, either
as one JSON response or as server-sent events:

    data: <chat.completion.chunk json>\n\n
    ...
    data: [DONE]\n\n

The first upstream chunk is awaited before the response starts, so failures
that happen before any output still produce a normal error response. Once
the first frame is sent the status is committed; a later failure ends the
stream without the [DONE] frame.
"""

import json
from typing import Any, AsyncIterator, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ai_gateway.api.deps import get_chat_service, rate_limit_by_principal
from ai_gateway.api.errors import REQUEST_ID_HEADER, request_id_from_request
from ai_gateway.api.middleware.rate_limit import RateLimitResult, RouteClass
from ai_gateway.core.exceptions import GatewayError
from ai_gateway.models.requests import ChatRequest
from ai_gateway.observability.logging import get_logger
from ai_gateway.services.chat import ChatService

logger = get_logger(__name__)

router = APIRouter(tags=["Chat"])

DONE_FRAME = "data: [DONE]\n\n"


def sse_frame(chunk: dict[str, Any]) -> str:
    return f"data: {json.dumps(chunk, separators=(',', ':'))}\n\n"


async def _first_chunk(stream: AsyncIterator[dict[str, Any]]) -> Optional[dict[str, Any]]:
    try:
        return await stream.__anext__()
    except StopAsyncIteration:
        return None
    except BaseException:
        await stream.aclose()
        raise


async def _sse_frames(
    first: Optional[dict[str, Any]],
    stream: AsyncIterator[dict[str, Any]],
    provider: str,
) -> AsyncIterator[str]:
    try:
        if first is not None:
            yield sse_frame(first)
            async for chunk in stream:
                yield sse_frame(chunk)
        yield DONE_FRAME
    except GatewayError as e:
        logger.warning(
            "stream_terminated",
            provider=provider,
            error_type=e.error_type,
            message=e.message,
        )
    except Exception:
        logger.exception("stream_terminated_unexpectedly", provider=provider)
    finally:
        await stream.aclose()


@router.post("/chat")
async def chat(
    request: Request,
    body: ChatRequest,
    limit: RateLimitResult = Depends(rate_limit_by_principal(RouteClass.CHAT)),
    service: ChatService = Depends(get_chat_service),
):
    """
    Chat completion.

    Non-streaming responses are the upstream completion envelope plus a
    ``gateway`` block. If the client disconnects during a non-streaming
    call the upstream call runs to completion and its result is discarded.
    """
    request_id = request_id_from_request(request)

    if not body.stream:
        return await service.complete(body, request_id)

    stream = service.open_stream(body)
    first = await _first_chunk(stream)
    headers = {
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
        "X-Accel-Buffering": "no",
        REQUEST_ID_HEADER: request_id,
        **limit.headers(),
    }
    return StreamingResponse(
        _sse_frames(first, stream, body.provider),
        media_type="text/event-stream",
        headers=headers,
    )
