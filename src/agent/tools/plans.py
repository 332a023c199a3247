"""
agent.tools.plans - Plan catalog lookups.

The catalog is the same for every caller, so these tools ignore the
session identity entirely.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from application.context import SessionContext
from application.services.plan import PlanService
from agent.tools.base import BaseTool, NoArguments, ToolInput, ToolResult, dump_json


class PlanIdInput(ToolInput):
    plan_id: int = Field(description="The numeric ID of the insurance plan.")


class PlanCategoryInput(ToolInput):
    category: Literal["health", "life", "motor", "home"] = Field(
        description="The category of insurance plans to retrieve.",
    )


class GetAllPlansTool(BaseTool):

    name = "get_all_plans"
    description = (
        "Retrieve all available insurance plans: name, category "
        "(health/life/motor/home), base premium, sum insured and riders. "
        "Use when the user asks what plans exist or wants to compare plans."
    )

    def __init__(self, plan_service: PlanService):
        self._plan_service = plan_service

    def get_schema(self) -> type[BaseModel]:
        return NoArguments

    async def execute(self, ctx: SessionContext, **kwargs) -> ToolResult:
        plans = await self._plan_service.list_plans()
        return ToolResult(output=dump_json({"count": len(plans), "plans": plans}), data=plans)


class GetPlanByIdTool(BaseTool):

    name = "get_plan_by_id"
    description = (
        "Retrieve one insurance plan by its numeric ID. Use when the user refers to "
        "a specific plan from an earlier listing or needs details before purchasing."
    )

    def __init__(self, plan_service: PlanService):
        self._plan_service = plan_service

    def get_schema(self) -> type[BaseModel]:
        return PlanIdInput

    async def execute(self, ctx: SessionContext, plan_id: int = 0, **kwargs) -> ToolResult:
        plan = await self._plan_service.get_plan(plan_id)
        return ToolResult(output=dump_json(plan), data=plan)


class GetPlansByCategoryTool(BaseTool):

    name = "get_plans_by_category"
    description = (
        "Retrieve all insurance plans in one category (health, life, motor or home). "
        "Use for requests like 'show me health insurance plans' or "
        "'what life insurance do you offer'."
    )

    def __init__(self, plan_service: PlanService):
        self._plan_service = plan_service

    def get_schema(self) -> type[BaseModel]:
        return PlanCategoryInput

    async def execute(self, ctx: SessionContext, category: str = "", **kwargs) -> ToolResult:
        plans = await self._plan_service.list_plans_by_category(category)
        return ToolResult(output=dump_json({"count": len(plans), "plans": plans}), data=plans)
