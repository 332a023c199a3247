"""
infrastructure.persistence.payment_repo - SQLite payment repository.
"""

from __future__ import annotations

from domain.entities import Payment
from infrastructure.persistence.connection import (
    AsyncSQLiteConnection,
    from_iso,
    now_iso,
    to_iso,
)


class SQLitePaymentRepository:
    """Async SQLite implementation of PaymentRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def save(self, payment: Payment) -> int:
        now = now_iso()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO payments
                   (policy_id, type, amount, status, gateway_ref, paid_at,
                    created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (payment.policy_id, payment.type, payment.amount, payment.status,
                 payment.gateway_ref, to_iso(payment.paid_at), now, now),
            )
            return cursor.lastrowid

    async def get_by_policy(self, policy_id: int) -> list[Payment]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM payments WHERE policy_id = ? ORDER BY id",
                (policy_id,),
            )
            return [self._row_to_entity(r) for r in rows]

    @staticmethod
    def _row_to_entity(row) -> Payment:
        return Payment(
            id=row["id"],
            policy_id=row["policy_id"],
            type=row["type"],
            amount=row["amount"],
            status=row["status"],
            gateway_ref=row["gateway_ref"] or "",
            paid_at=from_iso(row["paid_at"]),
            created_at=row["created_at"] or "",
            updated_at=row["updated_at"] or "",
        )
