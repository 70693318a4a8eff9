"""API schemas for AI conversations."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from notive.domain.entities import Conversation, Message


class ConversationCreateRequest(BaseModel):
    """Body of POST /conversations."""

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    folder_id: int | None = Field(default=None, alias="folderId")


class TitleRequest(BaseModel):
    """Body of PUT /conversations/{id}/title."""

    title: str | None = None


class MessageRequest(BaseModel):
    """Body of POST /conversations/{id}/messages."""

    content: str | None = None


class ConversationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    user_id: int = Field(alias="userId")
    title: str
    folder_id: int | None = Field(default=None, alias="folderId")
    message_count: int = Field(default=0, alias="messageCount")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @classmethod
    def from_entity(cls, conversation: Conversation) -> "ConversationResponse":
        return cls(
            id=conversation.id,
            user_id=conversation.user_id,
            title=conversation.title,
            folder_id=conversation.folder_id,
            message_count=conversation.message_count,
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
        )


class MessageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    conversation_id: int = Field(alias="conversationId")
    role: str
    content: str
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_entity(cls, message: Message) -> "MessageResponse":
        return cls(
            id=message.id,
            conversation_id=message.conversation_id,
            role=message.role.value,
            content=message.content,
            created_at=message.created_at,
        )


class ConversationListResponse(BaseModel):
    success: bool = True
    conversations: list[ConversationResponse]


class ConversationEnvelope(BaseModel):
    success: bool = True
    conversation: ConversationResponse


class MessageListResponse(BaseModel):
    success: bool = True
    messages: list[MessageResponse]
