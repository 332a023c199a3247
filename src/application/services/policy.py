"""
application.services.policy - Policy purchase, renewal, cancellation and lookup.

Every operation takes the caller's user id from the SessionContext built
by the adapter; nothing here trusts an identity supplied by the model.

Ownership chain: user account → email → customer record → policy.customer_id.
A missing user or customer is NotFound; an email mismatch is Forbidden.

There is no transaction spanning the individual writes of one operation.
A datastore failure mid-way surfaces as RepositoryError and is never
swallowed.
"""

from __future__ import annotations

import logging
import secrets
import string
import time
from datetime import datetime, timedelta

from domain.entities import (
    Agent,
    CancellationRequest,
    Customer,
    Payment,
    Policy,
    Renewal,
    User,
)
from domain.exceptions import ForbiddenError, NotFoundError
from domain.models import (
    CancellationStatus,
    PaymentStatus,
    PaymentType,
    PolicyStatus,
    RenewalStatus,
)
from domain.ports import (
    AgentRepository,
    CancellationRepository,
    CustomerRepository,
    PaymentRepository,
    PlanRepository,
    PolicyRepository,
    RenewalRepository,
    UserRepository,
)
from application.context import SessionContext
from application.dto import (
    CancellationResult,
    PolicyDetails,
    PolicyOverview,
    PurchaseRequest,
    PurchaseResult,
    RenewalResult,
)

logger = logging.getLogger(__name__)

POLICY_TERM_DAYS = 365
DEFAULT_CANCEL_REASON = "User requested"

_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def generate_policy_number() -> str:
    """POL-<epoch millis>-<8 uppercase alphanumerics>."""
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(8))
    return f"POL-{int(time.time() * 1000)}-{suffix}"


def add_one_year(value: datetime) -> datetime:
    """Same calendar day next year; 29 Feb falls back to 28 Feb."""
    try:
        return value.replace(year=value.year + 1)
    except ValueError:
        return value.replace(year=value.year + 1, day=28)


class PolicyService:
    """Policy lifecycle operations scoped to the authenticated caller."""

    def __init__(
        self,
        user_repo: UserRepository,
        customer_repo: CustomerRepository,
        policy_repo: PolicyRepository,
        plan_repo: PlanRepository,
        payment_repo: PaymentRepository,
        renewal_repo: RenewalRepository,
        cancellation_repo: CancellationRepository,
        agent_repo: AgentRepository,
    ):
        self._user_repo = user_repo
        self._customer_repo = customer_repo
        self._policy_repo = policy_repo
        self._plan_repo = plan_repo
        self._payment_repo = payment_repo
        self._renewal_repo = renewal_repo
        self._cancellation_repo = cancellation_repo
        self._agent_repo = agent_repo

    # ================================================================
    # Mutations
    # ================================================================

    async def purchase(
        self, ctx: SessionContext, request: PurchaseRequest,
    ) -> PurchaseResult:
        """Buy a policy for the caller.

        Every lookup that can fail runs before the first write, so an
        unknown plan or agent leaves no customer, policy or payment behind.
        """
        user = await self._require_user(ctx.user_id)

        plan = await self._plan_repo.get_by_name(request.plan_name)
        if plan is None:
            raise NotFoundError(f"No plan found with name: {request.plan_name}")

        agent = await self._resolve_agent(request.agent_id)

        customer = await self._customer_repo.get_by_email(user.email)
        if customer is None:
            customer = Customer(
                name=user.username,
                email=user.email,
                phone=request.customer_phone,
            )
            customer.id = await self._customer_repo.save(customer)
            logger.info("Created customer %d for user %d", customer.id, user.id)

        now = datetime.now()
        policy = Policy(
            policy_number=generate_policy_number(),
            status=PolicyStatus.ACTIVE,
            start_date=now,
            end_date=now + timedelta(days=POLICY_TERM_DAYS),
            premium=plan.base_premium,
            insured=request.insured,
            beneficiaries=list(request.beneficiaries),
            customer_id=customer.id,
            plan_id=plan.id,
            agent_id=agent.id if agent else None,
        )
        policy.id = await self._policy_repo.save(policy)

        payment = Payment(
            policy_id=policy.id,
            type=PaymentType.PURCHASE,
            amount=plan.base_premium,
            status=PaymentStatus.SUCCESS,
            paid_at=now,
        )
        payment.id = await self._payment_repo.save(payment)

        logger.info(
            "User %d purchased %s (policy %s)",
            ctx.user_id, plan.name, policy.policy_number,
        )
        return PurchaseResult(
            policy=policy, customer=customer, plan=plan,
            payment=payment, agent=agent,
        )

    async def renew(self, ctx: SessionContext, policy_number: str) -> RenewalResult:
        """Extend the policy by one calendar year.

        Not guarded against repeated calls: each call adds another year,
        another renewal record and another pending payment.
        """
        policy = await self._require_policy(policy_number)
        await self._verify_ownership(ctx.user_id, policy)

        previous_end = policy.end_date
        new_end = add_one_year(previous_end)

        renewal = Renewal(
            policy_id=policy.id,
            previous_end=previous_end,
            new_end=new_end,
            status=RenewalStatus.REQUESTED,
        )
        renewal.id = await self._renewal_repo.save(renewal)

        await self._policy_repo.update_term(policy.id, new_end, PolicyStatus.ACTIVE)

        payment = Payment(
            policy_id=policy.id,
            type=PaymentType.RENEWAL,
            amount=policy.premium,
            status=PaymentStatus.PENDING,
        )
        payment.id = await self._payment_repo.save(payment)

        await self._renewal_repo.update_status(renewal.id, RenewalStatus.COMPLETED)
        renewal.status = RenewalStatus.COMPLETED

        logger.info("Policy %s renewed until %s", policy_number, new_end.date())
        return RenewalResult(
            policy=await self._policy_repo.get_by_id(policy.id),
            renewal=renewal,
            payment=payment,
        )

    async def cancel(
        self,
        ctx: SessionContext,
        policy_number: str,
        reason: str | None = None,
    ) -> CancellationResult:
        """Cancel the policy and approve the request immediately.

        Cancelling twice records a second approved request; status stays
        cancelled.
        """
        policy = await self._require_policy(policy_number)
        await self._verify_ownership(ctx.user_id, policy)

        request = CancellationRequest(
            policy_id=policy.id,
            reason=reason or DEFAULT_CANCEL_REASON,
            status=CancellationStatus.REQUESTED,
            requested_at=datetime.now(),
        )
        request.id = await self._cancellation_repo.save(request)

        await self._policy_repo.update_status(policy.id, PolicyStatus.CANCELLED)

        resolved_at = datetime.now()
        await self._cancellation_repo.update_status(
            request.id, CancellationStatus.APPROVED, resolved_at,
        )
        request.status = CancellationStatus.APPROVED
        request.resolved_at = resolved_at

        logger.info("Policy %s cancelled (%s)", policy_number, request.reason)
        return CancellationResult(
            policy=await self._policy_repo.get_by_id(policy.id),
            cancellation_request=request,
        )

    # ================================================================
    # Reads
    # ================================================================

    async def list_policies(self, ctx: SessionContext) -> list[PolicyOverview]:
        """All of the caller's policies; empty if they have never bought one."""
        user = await self._require_user(ctx.user_id)
        customer = await self._customer_repo.get_by_email(user.email)
        if customer is None:
            return []

        overviews = []
        for policy in await self._policy_repo.get_by_customer(customer.id):
            plan = await self._plan_repo.get_by_id(policy.plan_id)
            agent = (
                await self._agent_repo.get_by_id(policy.agent_id)
                if policy.agent_id else None
            )
            overviews.append(PolicyOverview(policy=policy, plan=plan, agent=agent))
        return overviews

    async def get_policy(self, ctx: SessionContext, policy_number: str) -> PolicyDetails:
        policy = await self._require_policy(policy_number)
        await self._verify_ownership(ctx.user_id, policy)

        return PolicyDetails(
            policy=policy,
            plan=await self._plan_repo.get_by_id(policy.plan_id),
            payments=await self._payment_repo.get_by_policy(policy.id),
            renewals=await self._renewal_repo.get_by_policy(policy.id),
            cancellations=await self._cancellation_repo.get_by_policy(policy.id),
        )

    # ================================================================
    # Private helpers
    # ================================================================

    async def _require_user(self, user_id: int) -> User:
        user = await self._user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def _require_policy(self, policy_number: str) -> Policy:
        policy = await self._policy_repo.get_by_policy_number(policy_number)
        if policy is None:
            raise NotFoundError(f"No policy found with policy number: {policy_number}")
        return policy

    async def _resolve_agent(self, agent_id: int | None) -> Agent | None:
        if agent_id is not None:
            agent = await self._agent_repo.get_by_id(agent_id)
            if agent is None:
                raise NotFoundError("Agent not found")
            return agent
        return await self._agent_repo.get_first_active()

    async def _verify_ownership(self, user_id: int, policy: Policy) -> None:
        user = await self._require_user(user_id)
        customer = await self._customer_repo.get_by_id(policy.customer_id)
        if customer is None:
            raise NotFoundError("Customer not found")
        if customer.email != user.email:
            logger.warning(
                "User %d denied access to policy %s", user_id, policy.policy_number,
            )
            raise ForbiddenError("You do not have permission to access this policy")
