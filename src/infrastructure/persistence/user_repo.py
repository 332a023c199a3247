"""
infrastructure.persistence.user_repo - SQLite user repository.

Implements UserRepository port. Accounts carry their bcrypt hash; the
email is the join key to the customer record.
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.entities import User
from infrastructure.persistence.connection import AsyncSQLiteConnection, now_iso

logger = logging.getLogger(__name__)


class SQLiteUserRepository:
    """Async SQLite implementation of UserRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def get_by_id(self, user_id: int) -> Optional[User]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM users WHERE id = ?", (user_id,),
            )
            return self._row_to_user(rows[0]) if rows else None

    async def get_by_email(self, email: str) -> Optional[User]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM users WHERE email = ?", (email,),
            )
            return self._row_to_user(rows[0]) if rows else None

    async def save(self, user: User) -> int:
        now = now_iso()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO users (email, username, password, role, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (user.email, user.username, user.password, user.role, now, now),
            )
            return cursor.lastrowid

    @staticmethod
    def _row_to_user(row) -> User:
        return User(
            id=row["id"],
            email=row["email"] or "",
            username=row["username"] or "",
            password=row["password"] or "",
            role=row["role"] or "user",
            created_at=row["created_at"] or "",
            updated_at=row["updated_at"] or "",
        )
