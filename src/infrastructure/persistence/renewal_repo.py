"""
infrastructure.persistence.renewal_repo - SQLite renewal repository.
"""

from __future__ import annotations

from domain.entities import Renewal
from infrastructure.persistence.connection import (
    AsyncSQLiteConnection,
    from_iso,
    now_iso,
    to_iso,
)


class SQLiteRenewalRepository:
    """Async SQLite implementation of RenewalRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def save(self, renewal: Renewal) -> int:
        now = now_iso()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO renewals
                   (policy_id, previous_end, new_end, status, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (renewal.policy_id, to_iso(renewal.previous_end),
                 to_iso(renewal.new_end), renewal.status, now, now),
            )
            return cursor.lastrowid

    async def get_by_policy(self, policy_id: int) -> list[Renewal]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM renewals WHERE policy_id = ? ORDER BY id",
                (policy_id,),
            )
            return [self._row_to_entity(r) for r in rows]

    async def update_status(self, renewal_id: int, status: str) -> None:
        async with self._conn.acquire() as conn:
            await conn.execute(
                "UPDATE renewals SET status = ?, updated_at = ? WHERE id = ?",
                (status, now_iso(), renewal_id),
            )

    @staticmethod
    def _row_to_entity(row) -> Renewal:
        return Renewal(
            id=row["id"],
            policy_id=row["policy_id"],
            previous_end=from_iso(row["previous_end"]),
            new_end=from_iso(row["new_end"]),
            status=row["status"],
            created_at=row["created_at"] or "",
            updated_at=row["updated_at"] or "",
        )
