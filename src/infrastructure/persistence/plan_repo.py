"""
infrastructure.persistence.plan_repo - SQLite plan catalog repository.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from domain.entities import Plan
from infrastructure.persistence.connection import AsyncSQLiteConnection, now_iso

logger = logging.getLogger(__name__)


class SQLitePlanRepository:
    """Async SQLite implementation of PlanRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def save(self, plan: Plan) -> int:
        now = now_iso()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO plans
                   (code, name, category, base_premium, sum_insured, riders,
                    created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (plan.code, plan.name, plan.category, plan.base_premium,
                 plan.sum_insured, json.dumps(plan.riders), now, now),
            )
            return cursor.lastrowid

    async def get_by_id(self, plan_id: int) -> Optional[Plan]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM plans WHERE id = ?", (plan_id,),
            )
            return self._row_to_entity(rows[0]) if rows else None

    async def get_by_name(self, name: str) -> Optional[Plan]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM plans WHERE name = ?", (name,),
            )
            return self._row_to_entity(rows[0]) if rows else None

    async def get_by_category(self, category: str) -> list[Plan]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM plans WHERE category = ? ORDER BY id", (category,),
            )
            return [self._row_to_entity(r) for r in rows]

    async def get_all(self) -> list[Plan]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall("SELECT * FROM plans ORDER BY id")
            return [self._row_to_entity(r) for r in rows]

    async def count(self) -> int:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall("SELECT COUNT(*) FROM plans")
            return rows[0][0]

    @staticmethod
    def _row_to_entity(row) -> Plan:
        return Plan(
            id=row["id"],
            code=row["code"],
            name=row["name"],
            category=row["category"],
            base_premium=row["base_premium"],
            sum_insured=row["sum_insured"] or 0.0,
            riders=json.loads(row["riders"] or "[]"),
            created_at=row["created_at"] or "",
            updated_at=row["updated_at"] or "",
        )
