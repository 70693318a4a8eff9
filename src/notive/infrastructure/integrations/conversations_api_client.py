"""Client for the AI conversation endpoints."""

from datetime import datetime
from typing import Any

from notive.domain.entities import Conversation, Message, MessageRole
from notive.infrastructure.integrations.api_errors import json_or_raise
from notive.infrastructure.integrations.session_client import SessionClient


def _conversation(data: dict[str, Any]) -> Conversation:
    return Conversation(
        id=int(data["id"]),
        user_id=int(data["userId"]),
        title=str(data["title"]),
        folder_id=data.get("folderId"),
        message_count=int(data.get("messageCount", 0)),
        created_at=datetime.fromisoformat(data["createdAt"]),
        updated_at=datetime.fromisoformat(data["updatedAt"]),
    )


def _message(data: dict[str, Any]) -> Message:
    return Message(
        id=int(data["id"]),
        conversation_id=int(data["conversationId"]),
        role=MessageRole(data["role"]),
        content=str(data["content"]),
        created_at=datetime.fromisoformat(data["createdAt"]),
    )


class ConversationsApiClient:
    """Conversation threads and the assistant round trip.

    Example:
        chats = ConversationsApiClient(session)
        chat = await chats.create_conversation("Trip ideas")
        question, answer = await chats.send_message(chat.id, "Where should I go in May?")
    """

    def __init__(self, session: SessionClient) -> None:
        self.session = session

    async def list_conversations(self, folder_id: int | None = None) -> list[Conversation]:
        params = {"folderId": folder_id} if folder_id is not None else None
        data = json_or_raise(await self.session.get("/conversations", params=params))
        return [_conversation(item) for item in data.get("conversations", [])]

    async def create_conversation(
        self, title: str, folder_id: int | None = None
    ) -> Conversation:
        response = await self.session.post(
            "/conversations", json={"title": title, "folderId": folder_id}
        )
        return _conversation(json_or_raise(response)["conversation"])

    async def get_messages(self, conversation_id: int) -> list[Message]:
        response = await self.session.get(f"/conversations/{conversation_id}/messages")
        return [_message(item) for item in json_or_raise(response).get("messages", [])]

    async def send_message(self, conversation_id: int, content: str) -> tuple[Message, Message]:
        """Send a user message.

        Returns:
            (stored user message, assistant reply)

        Raises:
            ApiError: NETWORK kind (AI_UNAVAILABLE) when the assistant could not answer
        """
        response = await self.session.post(
            f"/conversations/{conversation_id}/messages", json={"content": content}
        )
        sent, reply = (_message(item) for item in json_or_raise(response)["messages"])
        return sent, reply

    async def update_title(self, conversation_id: int, title: str) -> Conversation:
        response = await self.session.put(
            f"/conversations/{conversation_id}/title", json={"title": title}
        )
        return _conversation(json_or_raise(response)["conversation"])

    async def regenerate_title(self, conversation_id: int) -> Conversation:
        response = await self.session.post(f"/conversations/{conversation_id}/regenerate-title")
        return _conversation(json_or_raise(response)["conversation"])

    async def delete_conversation(self, conversation_id: int) -> None:
        json_or_raise(await self.session.delete(f"/conversations/{conversation_id}"))
