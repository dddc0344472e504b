"""
Message Suggestion Service

Streams AI-generated question ideas for the send-message page from an
OpenAI-compatible chat completion endpoint. The model is asked for three
questions in one line separated by "||"; split_suggestions() parses that.
Nothing is stored server-side.
"""
import json
import logging
from typing import AsyncIterator, List

import httpx

from ..config import settings

logger = logging.getLogger("uvicorn.error")

SEPARATOR = "||"
DEFAULT_SUGGESTIONS = "What's your favorite movie?||Do you have any pets?||What's your dream job?"

DEFAULT_PROMPT = (
    "Create a list of three open-ended and engaging questions formatted as a single string. "
    "Each question should be separated by '||'. These questions are for an anonymous social "
    "messaging platform and should be suitable for a diverse audience. Avoid personal or "
    "sensitive topics, focusing instead on universal themes that encourage friendly interaction. "
    "For example, your output should be structured like this: "
    "'What's a hobby you've recently started?||If you could have dinner with any historical "
    "figure, who would it be?||What's a simple thing that makes you happy?'. "
    "Ensure the questions are intriguing, foster curiosity, and contribute to a positive and "
    "welcoming conversational environment."
)


class SuggestionUnavailable(RuntimeError):
    """Raised when the completion API is not configured or rejects the request."""


def split_suggestions(text: str) -> List[str]:
    return [part.strip() for part in text.split(SEPARATOR) if part.strip()]


def _parse_sse_line(line: str) -> str | None:
    """Return the text delta carried by one `data:` line, "" for keep-alives, None at [DONE]."""
    if not line.startswith("data:"):
        return ""
    data = line[len("data:"):].strip()
    if data == "[DONE]":
        return None
    try:
        event = json.loads(data)
    except json.JSONDecodeError:
        logger.warning("[suggest] skipping malformed stream line: %r", data[:80])
        return ""
    choices = event.get("choices") or []
    if not choices:
        return ""
    return (choices[0].get("delta") or {}).get("content") or ""


class SuggestionService:
    """Streaming client for the completion API"""

    def __init__(self):
        self.api_key = settings.openai_api_key
        self.api_url = settings.openai_api_url
        self.model = settings.suggestion_model

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def stream(self, prompt: str | None = None) -> AsyncIterator[str]:
        """
        Yield text chunks as the model produces them.

        Closing the iterator (client went away) closes the upstream request.

        Raises:
            SuggestionUnavailable: no API key, or a non-2xx upstream status
        """
        if not self.is_available():
            raise SuggestionUnavailable("Suggestion service is not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt or DEFAULT_PROMPT}],
            "max_tokens": 400,
            "stream": True,
        }

        async with httpx.AsyncClient(timeout=httpx.Timeout(30.0, read=None)) as client:
            async with client.stream("POST", self.api_url, headers=headers, json=payload) as resp:
                if resp.status_code >= 400:
                    body = await resp.aread()
                    logger.error("[suggest] upstream returned %s: %s", resp.status_code, body[:200])
                    raise SuggestionUnavailable(f"Upstream returned {resp.status_code}")
                async for line in resp.aiter_lines():
                    delta = _parse_sse_line(line)
                    if delta is None:
                        break
                    if delta:
                        yield delta


suggestion_service = SuggestionService()
