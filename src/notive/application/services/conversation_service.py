"""AI conversations: threads, messages and generated titles.

The assistant itself is an ICompletionProvider. This service decides what gets
sent to it (system prompt plus the whole thread) and what gets stored.
"""

import logging
from collections.abc import Sequence

from notive.domain.entities import (
    ApiErrorCode,
    ChatMessage,
    Conversation,
    Message,
    MessageRole,
)
from notive.domain.exceptions import (
    CompletionError,
    EntityNotFoundException,
    ValidationException,
)
from notive.domain.ports import ICompletionProvider, IConversationRepository, IFolderRepository

logger = logging.getLogger(__name__)

ASSISTANT_PROMPT = (
    "You are NotiveAI, a helpful AI assistant integrated into a note-taking app. "
    "You help users with their notes, answer questions, provide insights, and assist "
    "with productivity tasks. Be concise, helpful, and friendly."
)
TITLE_PROMPT = (
    "Generate a concise, descriptive title (5-7 words) for a conversation based on the "
    "user messages. The title should capture the main topic or intent. Examples: "
    '"Weather Forecast Help", "Recipe Recommendations", "Code Debugging", '
    '"Travel Planning", "Business Strategy Discussion". '
    "Return only the title, no quotes or extra text."
)

REPLY_MAX_TOKENS = 1000
REPLY_TEMPERATURE = 0.7
TITLE_MAX_TOKENS = 25
TITLE_TEMPERATURE = 0.3
# Only the opening user messages say what a conversation is about
TITLE_CONTEXT_MESSAGES = 3
FALLBACK_TITLE = "New Chat"
FALLBACK_TITLE_MAX_LENGTH = 50


def fallback_title(messages: Sequence[ChatMessage]) -> str:
    """First user message, cut to 50 characters, or "New Chat" without one."""
    first = next(
        (m.content for m in messages if m.role is MessageRole.USER and m.content),
        FALLBACK_TITLE,
    )
    if len(first) > FALLBACK_TITLE_MAX_LENGTH:
        return first[: FALLBACK_TITLE_MAX_LENGTH - 3] + "..."
    return first


class ConversationService:
    """Conversation CRUD plus the send-message round trip."""

    def __init__(
        self,
        conversations: IConversationRepository,
        folders: IFolderRepository,
        completion: ICompletionProvider,
    ) -> None:
        self._conversations = conversations
        self._folders = folders
        self._completion = completion

    async def _get_owned(self, user_id: int, conversation_id: int) -> Conversation:
        conversation = await self._conversations.get(user_id, conversation_id)
        if conversation is None:
            raise EntityNotFoundException("Conversation", conversation_id)
        return conversation

    async def list_conversations(
        self, user_id: int, folder_id: int | None = None
    ) -> list[Conversation]:
        return await self._conversations.list_for_user(user_id, folder_id=folder_id)

    async def create_conversation(
        self, user_id: int, title: str | None, folder_id: int | None = None
    ) -> Conversation:
        """Start an empty conversation.

        Raises:
            ValidationException: MISSING_FIELDS without a title
            EntityNotFoundException: folder_id is not one of the user's folders
        """
        if not title or not title.strip():
            raise ValidationException("Title is required", code=ApiErrorCode.MISSING_FIELDS)
        if folder_id and await self._folders.get(user_id, folder_id) is None:
            raise EntityNotFoundException("Folder", folder_id)

        return await self._conversations.add(user_id, title.strip(), folder_id or None)

    async def get_messages(self, user_id: int, conversation_id: int) -> list[Message]:
        """All messages of one of the user's conversations, oldest first."""
        await self._get_owned(user_id, conversation_id)
        return await self._conversations.list_messages(conversation_id)

    # Hey future me - the completion call happens BEFORE anything is written. On SQLite the
    # first INSERT takes the database write lock until commit, and holding that across a
    # multi-second AI call would stall every other writer. It also means a failed call
    # leaves the thread untouched: no orphaned user message without an answer.
    async def send_message(
        self, user_id: int, conversation_id: int, content: str | None
    ) -> tuple[Message, Message]:
        """Ask the assistant and store both sides of the exchange.

        The first user message of a conversation also replaces its title with a
        generated one.

        Returns:
            (user message, assistant message) as stored

        Raises:
            ValidationException: MISSING_FIELDS for empty content
            EntityNotFoundException: Conversation missing or owned by another user
            CompletionError: The assistant could not be reached (nothing is stored)
        """
        text = (content or "").strip()
        if not text:
            raise ValidationException(
                "Message content is required", code=ApiErrorCode.MISSING_FIELDS
            )
        await self._get_owned(user_id, conversation_id)

        history = [m.as_chat() for m in await self._conversations.list_messages(conversation_id)]
        history.append(ChatMessage(MessageRole.USER, text))
        reply = await self._completion.complete(
            [ChatMessage(MessageRole.SYSTEM, ASSISTANT_PROMPT), *history],
            max_tokens=REPLY_MAX_TOKENS,
            temperature=REPLY_TEMPERATURE,
        )

        user_message = await self._conversations.add_message(
            conversation_id, MessageRole.USER, text
        )
        assistant_message = await self._conversations.add_message(
            conversation_id, MessageRole.ASSISTANT, reply
        )
        await self._conversations.touch(conversation_id)

        if await self._conversations.count_messages(conversation_id, MessageRole.USER) == 1:
            title = await self.generate_title(history)
            await self._conversations.update_title(user_id, conversation_id, title)

        return user_message, assistant_message

    async def update_title(
        self, user_id: int, conversation_id: int, title: str | None
    ) -> Conversation:
        """Rename a conversation.

        Raises:
            ValidationException: MISSING_FIELDS for an empty title
            EntityNotFoundException: Conversation missing or owned by another user
        """
        if not title or not title.strip():
            raise ValidationException("Title is required", code=ApiErrorCode.MISSING_FIELDS)
        conversation = await self._conversations.update_title(
            user_id, conversation_id, title.strip()
        )
        if conversation is None:
            raise EntityNotFoundException("Conversation", conversation_id)
        return conversation

    async def regenerate_title(self, user_id: int, conversation_id: int) -> Conversation:
        """Replace the title with a freshly generated one.

        Raises:
            EntityNotFoundException: Conversation missing or owned by another user
            ValidationException: NO_MESSAGES for a conversation without messages
        """
        await self._get_owned(user_id, conversation_id)
        messages = await self._conversations.list_messages(conversation_id)
        if not messages:
            raise ValidationException(code=ApiErrorCode.NO_MESSAGES)

        title = await self.generate_title([m.as_chat() for m in messages])
        conversation = await self._conversations.update_title(user_id, conversation_id, title)
        if conversation is None:
            raise EntityNotFoundException("Conversation", conversation_id)
        return conversation

    async def delete_conversation(self, user_id: int, conversation_id: int) -> None:
        """Delete a conversation with all its messages.

        Raises:
            EntityNotFoundException: Conversation missing or owned by another user
        """
        if not await self._conversations.delete(user_id, conversation_id):
            raise EntityNotFoundException("Conversation", conversation_id)
        logger.debug("User %s deleted conversation %s", user_id, conversation_id)

    async def generate_title(self, messages: Sequence[ChatMessage]) -> str:
        """Summarise the opening user messages into a short title.

        Never fails: when the assistant is unavailable the first user message
        (shortened) is used instead.
        """
        user_texts = [m.content for m in messages if m.role is MessageRole.USER]
        context = " ".join(user_texts[:TITLE_CONTEXT_MESSAGES])
        try:
            title = await self._completion.complete(
                [
                    ChatMessage(MessageRole.SYSTEM, TITLE_PROMPT),
                    ChatMessage(MessageRole.USER, context),
                ],
                max_tokens=TITLE_MAX_TOKENS,
                temperature=TITLE_TEMPERATURE,
            )
        except CompletionError as e:
            logger.warning("Title generation failed, using fallback: %s", e)
            return fallback_title(messages)

        return title.strip() or fallback_title(messages)
