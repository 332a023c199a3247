"""
infrastructure.persistence.agent_repo - SQLite sales-agent repository.
"""

from __future__ import annotations

from typing import Optional

from domain.entities import Agent
from infrastructure.persistence.connection import AsyncSQLiteConnection, now_iso


class SQLiteAgentRepository:
    """Async SQLite implementation of AgentRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def save(self, agent: Agent) -> int:
        now = now_iso()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO agents (code, name, email, status, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (agent.code, agent.name, agent.email, agent.status, now, now),
            )
            return cursor.lastrowid

    async def get_by_id(self, agent_id: int) -> Optional[Agent]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM agents WHERE id = ?", (agent_id,),
            )
            return self._row_to_entity(rows[0]) if rows else None

    async def get_first_active(self) -> Optional[Agent]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM agents WHERE status = 'active' ORDER BY id LIMIT 1",
            )
            return self._row_to_entity(rows[0]) if rows else None

    async def count(self) -> int:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall("SELECT COUNT(*) FROM agents")
            return rows[0][0]

    @staticmethod
    def _row_to_entity(row) -> Agent:
        return Agent(
            id=row["id"],
            code=row["code"],
            name=row["name"],
            email=row["email"],
            status=row["status"] or "",
            created_at=row["created_at"] or "",
            updated_at=row["updated_at"] or "",
        )
