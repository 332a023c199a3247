"""
application.services.chat_history - Chat session persistence service.

A session is visible and mutable only by its owner.

Reads collapse "not yours" into NotFound so a lookup never reveals that
someone else's session exists. Mutations first run the same owner-scoped
lookup and raise Forbidden when it misses, then NotFound if the session
disappeared before the write landed.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional
from uuid import uuid4

from domain.entities import Conversation, ChatMessage
from domain.exceptions import ForbiddenError, InvalidArgumentError, NotFoundError
from domain.models import MESSAGE_ROLES
from domain.ports import ConversationRepository, ChatMessageRepository
from application.dto import ChatTranscript

logger = logging.getLogger(__name__)


class ChatService:
    """Creates, reads, renames and deletes chat sessions and appends messages."""

    def __init__(
        self,
        conversation_repo: ConversationRepository,
        message_repo: ChatMessageRepository,
    ):
        self._conversation_repo = conversation_repo
        self._message_repo = message_repo

    async def create_chat(
        self, user_id: int, title: Optional[str] = None,
    ) -> Conversation:
        conversation = Conversation(
            user_id=user_id,
            conversation_id=uuid4().hex,
            title=title or f"Chat {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        )
        conversation.id = await self._conversation_repo.save(conversation)
        logger.info(
            "Created conversation %s for user %d",
            conversation.conversation_id, user_id,
        )
        return conversation

    async def list_chats(self, user_id: int) -> list[Conversation]:
        """All of the user's sessions, most recent activity first."""
        return await self._conversation_repo.get_by_user(user_id)

    async def get_chat(self, chat_id: str, user_id: int) -> ChatTranscript:
        conversation = await self._conversation_repo.get_for_owner(chat_id, user_id)
        if conversation is None:
            raise NotFoundError(f"Chat with ID {chat_id} not found")
        messages = await self._message_repo.get_by_conversation(chat_id)
        return ChatTranscript(conversation=conversation, messages=messages)

    async def load_history(self, chat_id: str, user_id: int) -> list[ChatMessage]:
        return (await self.get_chat(chat_id, user_id)).messages

    async def add_message(
        self, chat_id: str, user_id: int, role: str, content: str,
    ) -> ChatMessage:
        """Append one message. The insert is the only write to the log."""
        if role not in MESSAGE_ROLES:
            raise InvalidArgumentError(f"Unsupported message role '{role}'.")
        await self._require_owner(chat_id, user_id)

        if not await self._conversation_repo.touch(chat_id):
            raise NotFoundError(f"Chat with ID {chat_id} not found")

        message = ChatMessage(
            user_id=user_id,
            conversation_id=chat_id,
            role=role,
            content=content,
        )
        message.id = await self._message_repo.append(message)
        return message

    async def rename_chat(self, chat_id: str, user_id: int, title: str) -> Conversation:
        conversation = await self._require_owner(chat_id, user_id)
        if not await self._conversation_repo.update_title(chat_id, title):
            raise NotFoundError(f"Chat with ID {chat_id} not found")
        conversation.title = title
        return conversation

    async def delete_chat(self, chat_id: str, user_id: int) -> None:
        await self._require_owner(chat_id, user_id)
        if not await self._conversation_repo.delete(chat_id):
            raise NotFoundError(f"Chat with ID {chat_id} not found")
        logger.info("Deleted conversation %s for user %d", chat_id, user_id)

    async def _require_owner(self, chat_id: str, user_id: int) -> Conversation:
        conversation = await self._conversation_repo.get_for_owner(chat_id, user_id)
        if conversation is None:
            raise ForbiddenError("You do not have access to this chat")
        return conversation
