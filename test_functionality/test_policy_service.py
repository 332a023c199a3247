"""Policy lifecycle: purchase, renew, cancel and ownership checks."""

from datetime import datetime

import pytest

from application.dto import PurchaseRequest
from application.services.policy import add_one_year, generate_policy_number
from domain.entities import Beneficiary, Insured
from domain.exceptions import ForbiddenError, NotFoundError
from domain.models import CancellationStatus, PaymentStatus, PaymentType, PolicyStatus


def _request(plan_name="Basic Health Insurance", agent_id=None) -> PurchaseRequest:
    return PurchaseRequest(
        plan_name=plan_name,
        insured=Insured(name="Asha Rao", relation="self", dob="1990-04-12"),
        customer_phone="+91-9000000000",
        beneficiaries=[Beneficiary(name="Ravi Rao", relation="spouse")],
        agent_id=agent_id,
    )


@pytest.fixture
def policies(factory):
    return factory.create_policy_service()


class TestPolicyNumber:
    def test_format(self):
        number = generate_policy_number()
        prefix, millis, suffix = number.split("-")
        assert prefix == "POL"
        assert millis.isdigit()
        assert len(suffix) == 8
        assert suffix.isalnum() and suffix.upper() == suffix

    def test_unique(self):
        assert len({generate_policy_number() for _ in range(50)}) == 50


class TestAddOneYear:
    def test_same_day_next_year(self):
        assert add_one_year(datetime(2025, 3, 15, 10, 30)) == datetime(2026, 3, 15, 10, 30)

    def test_leap_day_falls_back(self):
        assert add_one_year(datetime(2024, 2, 29)) == datetime(2025, 2, 28)


class TestPurchase:
    async def test_creates_customer_policy_and_payment(self, policies, ctx):
        result = await policies.purchase(ctx, _request())

        assert result.policy.policy_number.startswith("POL-")
        assert result.policy.status == PolicyStatus.ACTIVE
        assert result.policy.premium == result.plan.base_premium
        assert (result.policy.end_date - result.policy.start_date).days == 365
        assert result.customer.email == ctx.email
        assert result.customer.phone == "+91-9000000000"
        assert result.payment.type == PaymentType.PURCHASE
        assert result.payment.status == PaymentStatus.SUCCESS
        assert result.payment.amount == result.plan.base_premium
        assert result.agent is not None and result.agent.code == "AGT001"

    async def test_second_purchase_reuses_customer(self, policies, ctx):
        first = await policies.purchase(ctx, _request())
        second = await policies.purchase(ctx, _request("Term Life Insurance"))
        assert first.customer.id == second.customer.id
        assert first.policy_number != second.policy_number

    async def test_unknown_plan_writes_nothing(self, policies, ctx):
        with pytest.raises(NotFoundError, match="No plan found with name: Moon Insurance"):
            await policies.purchase(ctx, _request("Moon Insurance"))
        assert await policies.list_policies(ctx) == []

    async def test_unknown_agent_writes_nothing(self, policies, ctx):
        with pytest.raises(NotFoundError, match="Agent not found"):
            await policies.purchase(ctx, _request(agent_id=999))
        assert await policies.list_policies(ctx) == []

    async def test_explicit_agent(self, policies, ctx):
        result = await policies.purchase(ctx, _request(agent_id=2))
        assert result.agent.id == 2
        assert result.policy.agent_id == 2


class TestRenew:
    async def test_extends_by_one_year(self, policies, ctx):
        bought = await policies.purchase(ctx, _request())
        result = await policies.renew(ctx, bought.policy_number)

        assert result.policy.end_date == add_one_year(bought.policy.end_date)
        assert result.policy.status == PolicyStatus.ACTIVE
        assert result.renewal.status == "completed"
        assert result.payment.type == PaymentType.RENEWAL
        assert result.payment.status == PaymentStatus.PENDING

    async def test_renewing_twice_adds_two_years(self, policies, ctx):
        bought = await policies.purchase(ctx, _request())
        await policies.renew(ctx, bought.policy_number)
        second = await policies.renew(ctx, bought.policy_number)

        assert second.policy.end_date == add_one_year(add_one_year(bought.policy.end_date))
        details = await policies.get_policy(ctx, bought.policy_number)
        assert len(details.renewals) == 2
        assert len(details.payments) == 3

    async def test_unknown_policy(self, policies, ctx):
        with pytest.raises(NotFoundError):
            await policies.renew(ctx, "POL-0-NOPE0000")


class TestCancel:
    async def test_cancel_with_default_reason(self, policies, ctx):
        bought = await policies.purchase(ctx, _request())
        result = await policies.cancel(ctx, bought.policy_number)

        assert result.policy.status == PolicyStatus.CANCELLED
        assert result.cancellation_request.reason == "User requested"
        assert result.cancellation_request.status == CancellationStatus.APPROVED
        assert result.cancellation_request.resolved_at is not None

    async def test_cancelling_twice_records_two_requests(self, policies, ctx):
        bought = await policies.purchase(ctx, _request())
        await policies.cancel(ctx, bought.policy_number, "Found a better plan")
        await policies.cancel(ctx, bought.policy_number)

        details = await policies.get_policy(ctx, bought.policy_number)
        assert details.policy.status == PolicyStatus.CANCELLED
        assert [c.reason for c in details.cancellations] == ["Found a better plan", "User requested"]


class TestOwnership:
    async def test_other_user_is_forbidden(self, policies, ctx, other_ctx):
        bought = await policies.purchase(ctx, _request())
        with pytest.raises(ForbiddenError, match="You do not have permission"):
            await policies.get_policy(other_ctx, bought.policy_number)

    async def test_missing_policy_is_not_found_but_foreign_policy_is_forbidden(
        self, policies, ctx, other_ctx,
    ):
        bought = await policies.purchase(ctx, _request())
        with pytest.raises(NotFoundError):
            await policies.cancel(other_ctx, "POL-0-MISSING0")
        with pytest.raises(ForbiddenError):
            await policies.cancel(other_ctx, bought.policy_number)
        details = await policies.get_policy(ctx, bought.policy_number)
        assert details.policy.status == PolicyStatus.ACTIVE

    async def test_forbidden_after_other_user_has_customer(self, policies, ctx, other_ctx):
        bought = await policies.purchase(ctx, _request())
        await policies.purchase(other_ctx, _request("Term Life Insurance"))
        with pytest.raises(ForbiddenError):
            await policies.renew(other_ctx, bought.policy_number)
        details = await policies.get_policy(ctx, bought.policy_number)
        assert details.renewals == []

    async def test_list_is_scoped_to_caller(self, policies, ctx, other_ctx):
        await policies.purchase(ctx, _request())
        await policies.purchase(other_ctx, _request("Term Life Insurance"))

        mine = await policies.list_policies(ctx)
        theirs = await policies.list_policies(other_ctx)
        assert [o.plan.name for o in mine] == ["Basic Health Insurance"]
        assert [o.plan.name for o in theirs] == ["Term Life Insurance"]
