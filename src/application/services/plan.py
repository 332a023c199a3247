"""
application.services.plan - Read-only access to the plan catalog.

Not user-scoped: any authenticated caller sees the same catalog.
"""

from __future__ import annotations

import logging

from domain.entities import Plan
from domain.exceptions import InvalidArgumentError, NotFoundError
from domain.models import PLAN_CATEGORIES
from domain.ports import PlanRepository

logger = logging.getLogger(__name__)


class PlanService:

    def __init__(self, plan_repo: PlanRepository):
        self._plan_repo = plan_repo

    async def list_plans(self) -> list[Plan]:
        return await self._plan_repo.get_all()

    async def get_plan(self, plan_id: int) -> Plan:
        plan = await self._plan_repo.get_by_id(plan_id)
        if plan is None:
            raise NotFoundError("Plan not found")
        return plan

    async def list_plans_by_category(self, category: str) -> list[Plan]:
        category = category.strip().lower()
        if category not in PLAN_CATEGORIES:
            raise InvalidArgumentError(
                f"Unknown category '{category}'. "
                f"Choose one of: {', '.join(PLAN_CATEGORIES)}."
            )
        plans = await self._plan_repo.get_by_category(category)
        if not plans:
            raise NotFoundError(f"No plans found in category '{category}'")
        return plans
