"""Chat completions over an OpenAI-compatible HTTP API."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from notive.config import AISettings
from notive.domain.entities import ChatMessage
from notive.domain.exceptions import CompletionError
from notive.domain.ports import ICompletionProvider

logger = logging.getLogger(__name__)


class ChatCompletionClient(ICompletionProvider):
    """Posts ``chat/completions`` and returns the first choice's text.

    Every failure (no API key, transport error, non-2xx, a body without text)
    comes out as CompletionError, which the API renders as 502 AI_UNAVAILABLE.

    Example:
        client = ChatCompletionClient.from_settings(settings.ai)
        reply = await client.complete(
            [ChatMessage(MessageRole.USER, "Hi")], max_tokens=100, temperature=0.7
        )
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None,
        model: str = "gpt-3.5-turbo",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.model = model
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: AISettings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "ChatCompletionClient":
        api_key = settings.api_key.get_secret_value() if settings.api_key else None
        return cls(
            base_url=settings.base_url,
            api_key=api_key,
            model=settings.model,
            timeout=settings.timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    def _build_payload(
        self, messages: Sequence[ChatMessage], max_tokens: int, temperature: float
    ) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [message.to_dict() for message in messages],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

    async def complete(
        self, messages: Sequence[ChatMessage], max_tokens: int, temperature: float
    ) -> str:
        if not self._api_key:
            raise CompletionError("AI service is not configured")

        payload = self._build_payload(messages, max_tokens, temperature)
        headers = {"Authorization": f"Bearer {self._api_key}"}
        try:
            response = await self._client.post("chat/completions", json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Chat completion request failed: %s", e)
            raise CompletionError() from e

        if not response.is_success:
            logger.warning("Chat completion returned HTTP %d", response.status_code)
            raise CompletionError()

        try:
            body = response.json()
        except ValueError as e:
            raise CompletionError("AI service returned a non-JSON payload") from e

        text = _first_choice_text(body)
        if not text:
            raise CompletionError("AI service returned an empty reply")
        return text


def _first_choice_text(body: Any) -> str | None:
    if not isinstance(body, Mapping):
        return None
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    message = first.get("message") if isinstance(first, Mapping) else None
    content = message.get("content") if isinstance(message, Mapping) else None
    return content if isinstance(content, str) else None
