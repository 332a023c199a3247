"""Chat session endpoints: create, list, read, rename, delete, append."""

from fastapi import APIRouter, Depends, Response, status

from factory import ServiceFactory
from domain.entities import ChatMessage, Conversation
from adapters.rest.dependencies import CurrentUser, get_current_user, get_factory
from adapters.rest.schemas import (
    ChatCreateBody,
    ChatMessageBody,
    ChatOut,
    ChatRenameBody,
    ConversationOut,
    MessageOut,
)

router = APIRouter(prefix="/chats", tags=["chats"])


def _conversation_out(conversation: Conversation) -> ConversationOut:
    return ConversationOut(
        conversation_id=conversation.conversation_id,
        title=conversation.title,
        last_message_at=conversation.last_message_at,
        created_at=conversation.created_at,
    )


def _message_out(message: ChatMessage) -> MessageOut:
    return MessageOut(
        id=message.id,
        role=message.role,
        content=message.content,
        created_at=message.created_at,
    )


@router.post("", response_model=ConversationOut, status_code=201)
async def create_chat(
    body: ChatCreateBody,
    user: CurrentUser = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    conversation = await factory.create_chat_service().create_chat(user.user_id, body.title)
    return _conversation_out(conversation)


@router.get("", response_model=list[ConversationOut])
async def list_chats(
    user: CurrentUser = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    """The caller's sessions, most recently active first."""
    conversations = await factory.create_chat_service().list_chats(user.user_id)
    return [_conversation_out(c) for c in conversations]


@router.get("/{chat_id}", response_model=ChatOut)
async def get_chat(
    chat_id: str,
    user: CurrentUser = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    transcript = await factory.create_chat_service().get_chat(chat_id, user.user_id)
    return ChatOut(
        **_conversation_out(transcript.conversation).model_dump(),
        messages=[_message_out(m) for m in transcript.messages],
    )


@router.patch("/{chat_id}", response_model=ConversationOut)
async def rename_chat(
    chat_id: str,
    body: ChatRenameBody,
    user: CurrentUser = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    conversation = await factory.create_chat_service().rename_chat(
        chat_id, user.user_id, body.title,
    )
    return _conversation_out(conversation)


@router.delete("/{chat_id}", status_code=204)
async def delete_chat(
    chat_id: str,
    user: CurrentUser = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    await factory.create_chat_service().delete_chat(chat_id, user.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{chat_id}/messages", response_model=MessageOut, status_code=201)
async def add_message(
    chat_id: str,
    body: ChatMessageBody,
    user: CurrentUser = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    message = await factory.create_chat_service().add_message(
        chat_id, user.user_id, body.role, body.content,
    )
    return _message_out(message)
