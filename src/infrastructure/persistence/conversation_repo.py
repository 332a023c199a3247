"""
infrastructure.persistence.conversation_repo - SQLite conversation repository.

Stores chat session metadata (session ID, owner, title, timestamps).
Mutations report whether a row was affected so callers can tell a
vanished session apart from a successful write.
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.entities import Conversation
from infrastructure.persistence.connection import AsyncSQLiteConnection, now_iso

logger = logging.getLogger(__name__)


class SQLiteConversationRepository:
    """Async SQLite implementation of ConversationRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def save(self, conversation: Conversation) -> int:
        now = now_iso()
        conversation.created_at = conversation.updated_at = now
        conversation.last_message_at = now
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO conversations
                   (user_id, conversation_id, title, last_message_at,
                    created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (conversation.user_id, conversation.conversation_id,
                 conversation.title, now, now, now),
            )
            return cursor.lastrowid

    async def get_by_user(self, user_id: int) -> list[Conversation]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT * FROM conversations
                   WHERE user_id = ?
                   ORDER BY last_message_at DESC, id DESC""",
                (user_id,),
            )
            return [self._row_to_entity(r) for r in rows]

    async def get_for_owner(
        self, conversation_id: str, user_id: int,
    ) -> Optional[Conversation]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT * FROM conversations
                   WHERE conversation_id = ? AND user_id = ?""",
                (conversation_id, user_id),
            )
            return self._row_to_entity(rows[0]) if rows else None

    async def touch(self, conversation_id: str) -> bool:
        now = now_iso()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """UPDATE conversations
                   SET last_message_at = ?, updated_at = ?
                   WHERE conversation_id = ?""",
                (now, now, conversation_id),
            )
            return cursor.rowcount > 0

    async def update_title(self, conversation_id: str, title: str) -> bool:
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """UPDATE conversations SET title = ?, updated_at = ?
                   WHERE conversation_id = ?""",
                (title, now_iso(), conversation_id),
            )
            return cursor.rowcount > 0

    async def delete(self, conversation_id: str) -> bool:
        """Remove the session and its message log in one transaction."""
        async with self._conn.acquire() as conn:
            await conn.execute(
                "DELETE FROM chat_messages WHERE conversation_id = ?",
                (conversation_id,),
            )
            cursor = await conn.execute(
                "DELETE FROM conversations WHERE conversation_id = ?",
                (conversation_id,),
            )
            return cursor.rowcount > 0

    @staticmethod
    def _row_to_entity(row) -> Conversation:
        return Conversation(
            id=row["id"],
            user_id=row["user_id"],
            conversation_id=row["conversation_id"] or "",
            title=row["title"] or "",
            last_message_at=row["last_message_at"] or "",
            created_at=row["created_at"] or "",
            updated_at=row["updated_at"] or "",
        )
