"""
infrastructure.persistence.policy_repo - SQLite policy repository.

The insured party and beneficiaries are stored as JSON columns; the
term dates round-trip as ISO strings.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import datetime
from typing import Optional

from domain.entities import Beneficiary, Insured, Policy
from infrastructure.persistence.connection import (
    AsyncSQLiteConnection,
    from_iso,
    now_iso,
    to_iso,
)

logger = logging.getLogger(__name__)


class SQLitePolicyRepository:
    """Async SQLite implementation of PolicyRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def save(self, policy: Policy) -> int:
        now = now_iso()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO policies
                   (policy_number, status, start_date, end_date, premium,
                    insured, beneficiaries, customer_id, plan_id, agent_id,
                    created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    policy.policy_number,
                    policy.status,
                    to_iso(policy.start_date),
                    to_iso(policy.end_date),
                    policy.premium,
                    json.dumps(asdict(policy.insured)),
                    json.dumps([asdict(b) for b in policy.beneficiaries]),
                    policy.customer_id,
                    policy.plan_id,
                    policy.agent_id,
                    now,
                    now,
                ),
            )
            return cursor.lastrowid

    async def get_by_id(self, policy_id: int) -> Optional[Policy]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM policies WHERE id = ?", (policy_id,),
            )
            return self._row_to_entity(rows[0]) if rows else None

    async def get_by_policy_number(self, policy_number: str) -> Optional[Policy]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM policies WHERE policy_number = ?", (policy_number,),
            )
            return self._row_to_entity(rows[0]) if rows else None

    async def get_by_customer(self, customer_id: int) -> list[Policy]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT * FROM policies WHERE customer_id = ?
                   ORDER BY created_at DESC, id DESC""",
                (customer_id,),
            )
            return [self._row_to_entity(r) for r in rows]

    async def update_term(
        self, policy_id: int, end_date: datetime, status: str,
    ) -> None:
        async with self._conn.acquire() as conn:
            await conn.execute(
                """UPDATE policies SET end_date = ?, status = ?, updated_at = ?
                   WHERE id = ?""",
                (to_iso(end_date), status, now_iso(), policy_id),
            )

    async def update_status(self, policy_id: int, status: str) -> None:
        async with self._conn.acquire() as conn:
            await conn.execute(
                "UPDATE policies SET status = ?, updated_at = ? WHERE id = ?",
                (status, now_iso(), policy_id),
            )

    @staticmethod
    def _row_to_entity(row) -> Policy:
        insured = json.loads(row["insured"] or "{}")
        beneficiaries = json.loads(row["beneficiaries"] or "[]")
        return Policy(
            id=row["id"],
            policy_number=row["policy_number"],
            status=row["status"],
            start_date=from_iso(row["start_date"]),
            end_date=from_iso(row["end_date"]),
            premium=row["premium"],
            insured=Insured(**insured),
            beneficiaries=[Beneficiary(**b) for b in beneficiaries],
            customer_id=row["customer_id"],
            plan_id=row["plan_id"],
            agent_id=row["agent_id"],
            created_at=row["created_at"] or "",
            updated_at=row["updated_at"] or "",
        )
