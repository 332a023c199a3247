"""Tool catalog: registration, argument validation and identity binding."""

import json

import pytest

from agent.tools.base import BaseTool, NoArguments, ToolResult
from agent.tools.registry import ToolRegistry
from domain.exceptions import InvalidArgumentError

from conftest import PURCHASE_ARGS

EXPECTED_TOOLS = {
    "purchase_insurance",
    "renew_insurance",
    "cancel_insurance",
    "get_insurance",
    "get_insurance_by_policy_number",
    "get_all_plans",
    "get_plan_by_id",
    "get_plans_by_category",
    "general_assistant_knowledge",
}


class EchoTool(BaseTool):
    name = "echo"
    description = "Echo the caller id."

    def get_schema(self):
        return NoArguments

    async def execute(self, ctx, **kwargs):
        return ToolResult(output=str(ctx.user_id))


@pytest.fixture
def registry(factory):
    return factory.create_tool_registry()


async def test_catalog_is_complete(registry):
    assert set(registry.names()) == EXPECTED_TOOLS


def test_duplicate_registration_rejected():
    registry = ToolRegistry()
    registry.register(EchoTool())
    with pytest.raises(ValueError):
        registry.register(EchoTool())


async def test_unknown_tool(registry, ctx):
    with pytest.raises(InvalidArgumentError, match="Unknown tool"):
        await registry.invoke("delete_everything", ctx, {})


async def test_invalid_arguments_are_rejected_before_execution(registry, ctx, factory):
    bad = dict(PURCHASE_ARGS, insured={"name": "Asha", "relation": "self", "dob": "12/04/1990"})
    with pytest.raises(InvalidArgumentError, match="Invalid arguments for purchase_insurance"):
        await registry.invoke("purchase_insurance", ctx, bad)
    assert await factory.create_policy_service().list_policies(ctx) == []


async def test_unknown_category_fails_validation(registry, ctx):
    with pytest.raises(InvalidArgumentError):
        await registry.invoke("get_plans_by_category", ctx, {"category": "pets"})


async def test_get_all_plans(registry, ctx):
    payload = json.loads(await registry.invoke("get_all_plans", ctx))
    assert payload["count"] == 5
    assert {p["category"] for p in payload["plans"]} == {"health", "life", "motor", "home"}


async def test_get_plans_by_category(registry, ctx):
    payload = json.loads(await registry.invoke("get_plans_by_category", ctx, {"category": "health"}))
    assert [p["name"] for p in payload["plans"]] == [
        "Basic Health Insurance", "Premium Health Insurance",
    ]


async def test_model_supplied_identity_is_ignored(registry, ctx, other_ctx):
    await registry.invoke("purchase_insurance", other_ctx, PURCHASE_ARGS)

    output = await registry.invoke(
        "get_insurance", ctx, {"user_id": other_ctx.user_id, "email": other_ctx.email},
    )
    assert json.loads(output)["count"] == 0


async def test_purchase_payload(registry, ctx):
    payload = json.loads(await registry.invoke("purchase_insurance", ctx, PURCHASE_ARGS))
    assert payload["message"] == "Insurance purchased successfully"
    assert payload["policy_number"].startswith("POL-")
    assert payload["policy"]["insured"]["name"] == "Asha Rao"
    assert payload["customer"]["email"] == ctx.email


async def test_langchain_wrappers_run_as_bound_caller(ctx):
    registry = ToolRegistry()
    registry.register(EchoTool())
    (wrapper,) = registry.to_langchain_tools(ctx)
    assert wrapper.name == "echo"
    assert await wrapper.ainvoke({}) == str(ctx.user_id)
