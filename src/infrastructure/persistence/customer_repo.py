"""
infrastructure.persistence.customer_repo - SQLite customer repository.

Customers are keyed by email; that is how a login account finds its policies.
"""

from __future__ import annotations

from typing import Optional

from domain.entities import Customer
from infrastructure.persistence.connection import AsyncSQLiteConnection, now_iso


class SQLiteCustomerRepository:
    """Async SQLite implementation of CustomerRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def save(self, customer: Customer) -> int:
        now = now_iso()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO customers (name, email, phone, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (customer.name, customer.email, customer.phone, now, now),
            )
            return cursor.lastrowid

    async def get_by_id(self, customer_id: int) -> Optional[Customer]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM customers WHERE id = ?", (customer_id,),
            )
            return self._row_to_entity(rows[0]) if rows else None

    async def get_by_email(self, email: str) -> Optional[Customer]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM customers WHERE email = ?", (email,),
            )
            return self._row_to_entity(rows[0]) if rows else None

    @staticmethod
    def _row_to_entity(row) -> Customer:
        return Customer(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            phone=row["phone"] or "",
            created_at=row["created_at"] or "",
            updated_at=row["updated_at"] or "",
        )
