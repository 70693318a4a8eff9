"""Tests for ChatCompletionClient against a mocked OpenAI-compatible API."""

import json
from collections.abc import Callable

import httpx
import pytest
from pydantic import SecretStr

from notive.config import AISettings
from notive.domain.entities import ChatMessage, MessageRole
from notive.domain.exceptions import CompletionError
from notive.infrastructure.integrations import ChatCompletionClient

Handler = Callable[[httpx.Request], httpx.Response]
HELLO = [ChatMessage(MessageRole.USER, "Hello")]


def _client(handler: Handler, api_key: str | None = "sk-test") -> ChatCompletionClient:
    return ChatCompletionClient(
        "https://ai.example.com/v1",
        api_key,
        model="test-model",
        transport=httpx.MockTransport(handler),
    )


def _reply(text: str) -> httpx.Response:
    choice = {"message": {"role": "assistant", "content": text}}
    return httpx.Response(200, json={"choices": [choice]})


async def test_posts_chat_completion() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _reply("Hi there!")

    client = _client(handler)

    reply = await client.complete(HELLO, max_tokens=100, temperature=0.5)

    assert reply == "Hi there!"
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://ai.example.com/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-test"
    assert json.loads(request.content) == {
        "model": "test-model",
        "messages": [{"role": "user", "content": "Hello"}],
        "max_tokens": 100,
        "temperature": 0.5,
    }
    await client.close()


async def test_not_configured_makes_no_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    client = _client(handler, api_key=None)

    with pytest.raises(CompletionError, match="not configured"):
        await client.complete(HELLO, max_tokens=10, temperature=0.0)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "overloaded"}),
        httpx.Response(429, json={"error": "rate limited"}),
        httpx.Response(200, text="<html>gateway</html>"),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"choices": [{"message": {"content": ""}}]}),
        httpx.Response(200, json=["not", "an", "object"]),
    ],
)
async def test_bad_answers_raise(response: httpx.Response) -> None:
    client = _client(lambda request: response)

    with pytest.raises(CompletionError) as exc_info:
        await client.complete(HELLO, max_tokens=10, temperature=0.0)

    assert exc_info.value.code == "AI_UNAVAILABLE"


async def test_transport_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)

    with pytest.raises(CompletionError):
        await client.complete(HELLO, max_tokens=10, temperature=0.0)


def test_from_settings_unwraps_key() -> None:
    settings = AISettings(api_key=SecretStr("sk-live"), model="gpt-4o-mini")

    client = ChatCompletionClient.from_settings(settings)

    assert client.model == "gpt-4o-mini"
    assert settings.is_configured
    assert not AISettings(api_key=None).is_configured
    assert not AISettings(api_key=SecretStr("")).is_configured
