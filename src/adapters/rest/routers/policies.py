"""Policy lifecycle endpoints: purchase, list, details, renew, cancel.

Responses are the service result dataclasses, serialized by FastAPI.
"""

from fastapi import APIRouter, Depends

from factory import ServiceFactory
from domain.entities import Beneficiary, Insured
from application.dto import PurchaseRequest
from adapters.rest.dependencies import (
    CurrentUser, build_session_ctx, get_current_user, get_factory,
)
from adapters.rest.schemas import CancelBody, PurchaseBody

router = APIRouter(prefix="/policies", tags=["policies"])


@router.post("/purchase", status_code=201)
async def purchase(
    body: PurchaseBody,
    user: CurrentUser = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    request = PurchaseRequest(
        plan_name=body.plan_name,
        insured=Insured(**body.insured.model_dump()),
        customer_phone=body.customer_phone,
        beneficiaries=[Beneficiary(**b.model_dump()) for b in body.beneficiaries],
        agent_id=body.agent_id,
    )
    result = await factory.create_policy_service().purchase(build_session_ctx(user), request)
    return {
        "message": result.message,
        "policy_number": result.policy_number,
        "policy": result.policy,
        "plan": result.plan,
        "customer": result.customer,
        "payment": result.payment,
        "agent": result.agent,
    }


@router.get("")
async def list_policies(
    user: CurrentUser = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    overviews = await factory.create_policy_service().list_policies(build_session_ctx(user))
    return {"count": len(overviews), "policies": overviews}


@router.get("/{policy_number}")
async def get_policy(
    policy_number: str,
    user: CurrentUser = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    return await factory.create_policy_service().get_policy(
        build_session_ctx(user), policy_number,
    )


@router.post("/{policy_number}/renew")
async def renew(
    policy_number: str,
    user: CurrentUser = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    return await factory.create_policy_service().renew(build_session_ctx(user), policy_number)


@router.post("/{policy_number}/cancel")
async def cancel(
    policy_number: str,
    body: CancelBody | None = None,
    user: CurrentUser = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    reason = body.reason if body else None
    return await factory.create_policy_service().cancel(
        build_session_ctx(user), policy_number, reason,
    )
