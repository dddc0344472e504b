"""
Suggestion HTTP API Router

Relays streamed message ideas from the completion API as plain text
"""
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Body
from fastapi.responses import StreamingResponse

from app.core.errors import UpstreamError
from app.schemas.message import SuggestIn
from app.services.suggestions import SuggestionUnavailable, suggestion_service

logger = logging.getLogger("uvicorn.error")

router = APIRouter(tags=["suggestions"])


async def _relay(first: str, rest: AsyncIterator[str]) -> AsyncIterator[str]:
    yield first
    try:
        async for chunk in rest:
            yield chunk
    except Exception as e:
        # Headers are already sent; the client just sees a shorter stream
        logger.warning("[suggest] stream interrupted: %s", e)
    finally:
        await rest.aclose()


@router.post("/suggest-messages")
async def suggest_messages(body: SuggestIn | None = Body(default=None)):
    """
    Stream suggested questions separated by "||".

    The upstream request is opened before the response starts, so a missing
    API key or an upstream error is still reported as a 500 envelope.
    """
    stream = suggestion_service.stream(body.prompt if body else None)
    try:
        first = await stream.__anext__()
    except StopAsyncIteration:
        first = ""
    except SuggestionUnavailable as e:
        await stream.aclose()
        raise UpstreamError(str(e))
    except Exception as e:
        await stream.aclose()
        logger.error("[suggest] upstream request failed: %s", e)
        raise UpstreamError("Failed to generate suggestions")

    return StreamingResponse(
        _relay(first, stream),
        media_type="text/plain; charset=utf-8",
        headers={"Cache-Control": "no-cache"},
    )
