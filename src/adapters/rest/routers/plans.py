"""Plan catalog endpoints. Public: the catalog holds no user data."""

from fastapi import APIRouter, Depends

from factory import ServiceFactory
from domain.entities import Plan
from adapters.rest.dependencies import get_factory
from adapters.rest.schemas import PlanOut

router = APIRouter(prefix="/plans", tags=["plans"])


def _plan_out(plan: Plan) -> PlanOut:
    return PlanOut(
        id=plan.id,
        code=plan.code,
        name=plan.name,
        category=plan.category,
        base_premium=plan.base_premium,
        sum_insured=plan.sum_insured,
        riders=list(plan.riders),
    )


@router.get("", response_model=list[PlanOut])
async def list_plans(factory: ServiceFactory = Depends(get_factory)):
    plans = await factory.create_plan_service().list_plans()
    return [_plan_out(p) for p in plans]


@router.get("/category/{category}", response_model=list[PlanOut])
async def list_plans_by_category(
    category: str,
    factory: ServiceFactory = Depends(get_factory),
):
    plans = await factory.create_plan_service().list_plans_by_category(category)
    return [_plan_out(p) for p in plans]


@router.get("/{plan_id}", response_model=PlanOut)
async def get_plan(plan_id: int, factory: ServiceFactory = Depends(get_factory)):
    plan = await factory.create_plan_service().get_plan(plan_id)
    return _plan_out(plan)
