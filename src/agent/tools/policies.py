"""
agent.tools.policies - Policy purchase, renewal, cancellation and lookup tools.

Every tool here acts on the caller taken from SessionContext. The input
schemas have no identity fields and ToolInput drops unknown keys, so a
user id or email the model makes up is discarded before execution.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from domain.entities import Beneficiary, Insured
from application.context import SessionContext
from application.dto import PurchaseRequest
from application.services.policy import PolicyService
from agent.tools.base import BaseTool, NoArguments, ToolInput, ToolResult, dump_json

POLICY_NUMBER_HINT = "The policy number, e.g. POL-1731234567890-ABCD1234."


class InsuredInput(BaseModel):
    name: str = Field(min_length=1, description="Name of the person insured.")
    relation: str = Field(
        min_length=1,
        description="Relationship to the customer, e.g. self, spouse, child.",
    )
    dob: str = Field(description="Date of birth in ISO format (YYYY-MM-DD).")

    @field_validator("dob")
    @classmethod
    def check_iso_date(cls, v: str) -> str:
        date.fromisoformat(v)
        return v


class BeneficiaryInput(BaseModel):
    name: str = Field(min_length=1, description="Beneficiary name.")
    relation: str = Field(min_length=1, description="Relationship to the insured.")


class PurchaseInsuranceInput(ToolInput):
    """Input schema for the purchase_insurance tool."""

    plan_name: str = Field(
        min_length=1,
        description=(
            "Exact name of the insurance plan, e.g. 'Basic Health Insurance'. "
            "Use get_all_plans to see available plans."
        ),
    )
    insured: InsuredInput
    beneficiaries: List[BeneficiaryInput] = Field(
        default_factory=list,
        description="Optional list of beneficiaries who will receive benefits.",
    )
    customer_phone: str = Field(min_length=1, description="Customer's phone number.")
    agent_id: Optional[int] = Field(
        default=None,
        description="Optional ID of the selling agent (auto-assigned if omitted).",
    )


class PolicyNumberInput(ToolInput):
    policy_number: str = Field(min_length=1, description=POLICY_NUMBER_HINT)


class CancelInsuranceInput(ToolInput):
    policy_number: str = Field(min_length=1, description=POLICY_NUMBER_HINT)
    reason: Optional[str] = Field(
        default=None,
        description="Optional reason for cancellation, e.g. 'Found a better plan'.",
    )


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------

class _PolicyTool(BaseTool):

    def __init__(self, policy_service: PolicyService):
        self._policy_service = policy_service


class PurchaseInsuranceTool(_PolicyTool):

    name = "purchase_insurance"
    description = (
        "Purchase a new insurance policy. Creates the customer record if needed, "
        "the policy and its payment. Requires the exact plan name, the insured "
        "person (name, relation, date of birth) and a phone number. Customer name "
        "and email are taken from the logged-in account; the user is identified "
        "automatically."
    )

    def get_schema(self) -> type[BaseModel]:
        return PurchaseInsuranceInput

    async def execute(
        self,
        ctx: SessionContext,
        plan_name: str = "",
        insured: Optional[dict] = None,
        beneficiaries: Optional[list[dict]] = None,
        customer_phone: str = "",
        agent_id: Optional[int] = None,
        **kwargs,
    ) -> ToolResult:
        request = PurchaseRequest(
            plan_name=plan_name,
            insured=Insured(**(insured or {})),
            customer_phone=customer_phone,
            beneficiaries=[Beneficiary(**b) for b in beneficiaries or []],
            agent_id=agent_id,
        )
        result = await self._policy_service.purchase(ctx, request)
        payload = {
            "message": result.message,
            "policy_number": result.policy_number,
            "policy": result.policy,
            "plan": result.plan,
            "customer": result.customer,
            "payment": result.payment,
            "agent": result.agent,
        }
        return ToolResult(output=dump_json(payload), data=result)


class RenewInsuranceTool(_PolicyTool):

    name = "renew_insurance"
    description = (
        "Renew one of the user's policies by policy number. Extends the end date "
        "by one year, records the renewal and a pending renewal payment. The user "
        "is identified automatically."
    )

    def get_schema(self) -> type[BaseModel]:
        return PolicyNumberInput

    async def execute(self, ctx: SessionContext, policy_number: str = "", **kwargs) -> ToolResult:
        result = await self._policy_service.renew(ctx, policy_number)
        return ToolResult(output=dump_json(result), data=result)


class CancelInsuranceTool(_PolicyTool):

    name = "cancel_insurance"
    description = (
        "Cancel one of the user's policies by policy number, with an optional "
        "reason. Records an approved cancellation request and sets the policy "
        "status to 'cancelled'. The user is identified automatically."
    )

    def get_schema(self) -> type[BaseModel]:
        return CancelInsuranceInput

    async def execute(
        self,
        ctx: SessionContext,
        policy_number: str = "",
        reason: Optional[str] = None,
        **kwargs,
    ) -> ToolResult:
        result = await self._policy_service.cancel(ctx, policy_number, reason)
        return ToolResult(output=dump_json(result), data=result)


class GetInsuranceTool(_PolicyTool):

    name = "get_insurance"
    description = (
        "List all insurance policies owned by the logged-in user, with plan and "
        "agent details. Use when the user asks about their policies or policy "
        "status without giving a policy number. Takes no input."
    )

    def get_schema(self) -> type[BaseModel]:
        return NoArguments

    async def execute(self, ctx: SessionContext, **kwargs) -> ToolResult:
        overviews = await self._policy_service.list_policies(ctx)
        return ToolResult(
            output=dump_json({"count": len(overviews), "policies": overviews}),
            data=overviews,
        )


class GetInsuranceByPolicyNumberTool(_PolicyTool):

    name = "get_insurance_by_policy_number"
    description = (
        "Get full details of one of the user's policies by policy number, including "
        "all payments, renewals and cancellation requests. Use when the user names "
        "a specific policy."
    )

    def get_schema(self) -> type[BaseModel]:
        return PolicyNumberInput

    async def execute(self, ctx: SessionContext, policy_number: str = "", **kwargs) -> ToolResult:
        details = await self._policy_service.get_policy(ctx, policy_number)
        return ToolResult(output=dump_json(details), data=details)
