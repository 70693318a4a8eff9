"""Small test doubles shared across the suite."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from notive.domain.entities import ChatMessage
from notive.domain.exceptions import CompletionError
from notive.domain.ports import ICompletionProvider

TEST_SECRET = "test-secret-with-at-least-thirty-two-bytes-of-entropy"
OTHER_SECRET = "another-secret-that-is-also-long-enough-for-hs256"


class FakeClock:
    """Callable clock that only moves when a test says so."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@dataclass
class CompletionCall:
    messages: list[ChatMessage]
    max_tokens: int
    temperature: float


class FakeCompletion(ICompletionProvider):
    """Answers from a queue of replies, then with ``default_reply``.

    Set ``fail = True`` to make every call raise CompletionError.
    """

    def __init__(self, default_reply: str = "Sure, happy to help.") -> None:
        self.default_reply = default_reply
        self.replies: list[str] = []
        self.calls: list[CompletionCall] = []
        self.fail = False

    async def complete(
        self, messages: Sequence[ChatMessage], max_tokens: int, temperature: float
    ) -> str:
        self.calls.append(CompletionCall(list(messages), max_tokens, temperature))
        if self.fail:
            raise CompletionError()
        if self.replies:
            return self.replies.pop(0)
        return self.default_reply
