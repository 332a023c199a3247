"""
infrastructure.persistence.chat_message_repo - SQLite chat message repository.

Append-only log of conversation messages (user and assistant turns).
Ordering is by insertion id, so concurrent appends to the same session
never reorder earlier messages.
"""

from __future__ import annotations

import logging

from domain.entities import ChatMessage
from infrastructure.persistence.connection import AsyncSQLiteConnection, now_iso

logger = logging.getLogger(__name__)


class SQLiteChatMessageRepository:
    """Async SQLite implementation of ChatMessageRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def append(self, message: ChatMessage) -> int:
        message.created_at = message.created_at or now_iso()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO chat_messages
                   (user_id, conversation_id, role, content, created_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (message.user_id, message.conversation_id,
                 message.role, message.content, message.created_at),
            )
            return cursor.lastrowid

    async def get_by_conversation(
        self, conversation_id: str,
    ) -> list[ChatMessage]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT * FROM chat_messages
                   WHERE conversation_id = ?
                   ORDER BY id ASC""",
                (conversation_id,),
            )
            return [self._row_to_entity(r) for r in rows]

    @staticmethod
    def _row_to_entity(row) -> ChatMessage:
        return ChatMessage(
            id=row["id"],
            user_id=row["user_id"],
            conversation_id=row["conversation_id"] or "",
            role=row["role"] or "",
            content=row["content"] or "",
            created_at=row["created_at"] or "",
        )
