"""AI conversation endpoints. All routes require a valid bearer token."""

from fastapi import APIRouter, Depends, Query, status

from notive.api.dependencies import get_conversation_service, get_current_user_id
from notive.api.schemas.auth import SuccessResponse
from notive.api.schemas.conversations import (
    ConversationCreateRequest,
    ConversationEnvelope,
    ConversationListResponse,
    ConversationResponse,
    MessageListResponse,
    MessageRequest,
    MessageResponse,
    TitleRequest,
)
from notive.application.services.conversation_service import ConversationService

router = APIRouter()


@router.get("", response_model=ConversationListResponse)
async def list_conversations(
    folder_id: int | None = Query(default=None, alias="folderId"),
    user_id: int = Depends(get_current_user_id),
    conversations: ConversationService = Depends(get_conversation_service),
) -> ConversationListResponse:
    """List the caller's conversations, most recently active first."""
    items = await conversations.list_conversations(user_id, folder_id=folder_id)
    return ConversationListResponse(
        conversations=[ConversationResponse.from_entity(c) for c in items]
    )


@router.post("", response_model=ConversationEnvelope, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    body: ConversationCreateRequest,
    user_id: int = Depends(get_current_user_id),
    conversations: ConversationService = Depends(get_conversation_service),
) -> ConversationEnvelope:
    conversation = await conversations.create_conversation(
        user_id, body.title, folder_id=body.folder_id
    )
    return ConversationEnvelope(conversation=ConversationResponse.from_entity(conversation))


@router.get("/{conversation_id}/messages", response_model=MessageListResponse)
async def get_messages(
    conversation_id: int,
    user_id: int = Depends(get_current_user_id),
    conversations: ConversationService = Depends(get_conversation_service),
) -> MessageListResponse:
    messages = await conversations.get_messages(user_id, conversation_id)
    return MessageListResponse(messages=[MessageResponse.from_entity(m) for m in messages])


@router.post("/{conversation_id}/messages", response_model=MessageListResponse)
async def send_message(
    conversation_id: int,
    body: MessageRequest,
    user_id: int = Depends(get_current_user_id),
    conversations: ConversationService = Depends(get_conversation_service),
) -> MessageListResponse:
    """Send a message; the response holds the stored user and assistant messages."""
    sent, reply = await conversations.send_message(user_id, conversation_id, body.content)
    return MessageListResponse(
        messages=[MessageResponse.from_entity(sent), MessageResponse.from_entity(reply)]
    )


@router.put("/{conversation_id}/title", response_model=ConversationEnvelope)
async def update_title(
    conversation_id: int,
    body: TitleRequest,
    user_id: int = Depends(get_current_user_id),
    conversations: ConversationService = Depends(get_conversation_service),
) -> ConversationEnvelope:
    conversation = await conversations.update_title(user_id, conversation_id, body.title)
    return ConversationEnvelope(conversation=ConversationResponse.from_entity(conversation))


@router.post("/{conversation_id}/regenerate-title", response_model=ConversationEnvelope)
async def regenerate_title(
    conversation_id: int,
    user_id: int = Depends(get_current_user_id),
    conversations: ConversationService = Depends(get_conversation_service),
) -> ConversationEnvelope:
    conversation = await conversations.regenerate_title(user_id, conversation_id)
    return ConversationEnvelope(conversation=ConversationResponse.from_entity(conversation))


@router.delete("/{conversation_id}", response_model=SuccessResponse)
async def delete_conversation(
    conversation_id: int,
    user_id: int = Depends(get_current_user_id),
    conversations: ConversationService = Depends(get_conversation_service),
) -> SuccessResponse:
    await conversations.delete_conversation(user_id, conversation_id)
    return SuccessResponse()
