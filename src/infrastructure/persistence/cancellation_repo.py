"""
infrastructure.persistence.cancellation_repo - SQLite cancellation request repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from domain.entities import CancellationRequest
from infrastructure.persistence.connection import (
    AsyncSQLiteConnection,
    from_iso,
    now_iso,
    to_iso,
)


class SQLiteCancellationRepository:
    """Async SQLite implementation of CancellationRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def save(self, request: CancellationRequest) -> int:
        now = now_iso()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO cancellation_requests
                   (policy_id, reason, status, requested_at, resolved_at,
                    created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (request.policy_id, request.reason, request.status,
                 to_iso(request.requested_at), to_iso(request.resolved_at),
                 now, now),
            )
            return cursor.lastrowid

    async def get_by_policy(self, policy_id: int) -> list[CancellationRequest]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM cancellation_requests WHERE policy_id = ? ORDER BY id",
                (policy_id,),
            )
            return [self._row_to_entity(r) for r in rows]

    async def update_status(
        self,
        request_id: int,
        status: str,
        resolved_at: Optional[datetime] = None,
    ) -> None:
        async with self._conn.acquire() as conn:
            await conn.execute(
                """UPDATE cancellation_requests
                   SET status = ?, resolved_at = ?, updated_at = ?
                   WHERE id = ?""",
                (status, to_iso(resolved_at), now_iso(), request_id),
            )

    @staticmethod
    def _row_to_entity(row) -> CancellationRequest:
        return CancellationRequest(
            id=row["id"],
            policy_id=row["policy_id"],
            reason=row["reason"],
            status=row["status"],
            requested_at=from_iso(row["requested_at"]),
            resolved_at=from_iso(row["resolved_at"]),
            created_at=row["created_at"] or "",
            updated_at=row["updated_at"] or "",
        )
