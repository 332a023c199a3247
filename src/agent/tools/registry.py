"""
agent.tools.registry - Tool registration, validation, and invocation.

Central registry that manages the closed tool catalog and provides
LangChain-compatible tool wrappers bound to one caller's context.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from langchain_core.tools import StructuredTool
from pydantic import ValidationError

from application.context import SessionContext
from domain.exceptions import InvalidArgumentError
from agent.tools.base import BaseTool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Manages tool registration and invocation."""

    def __init__(self):
        self._tools: dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        """Register a tool by its name. Names are unique."""
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' already registered")
        self._tools[tool.name] = tool
        logger.debug("Registered tool: %s", tool.name)

    def get(self, name: str) -> BaseTool:
        """Get a tool by name."""
        if name not in self._tools:
            raise KeyError(f"Tool '{name}' not registered")
        return self._tools[name]

    def all(self) -> list[BaseTool]:
        """Return all registered tools."""
        return list(self._tools.values())

    def names(self) -> list[str]:
        """Return all registered tool names."""
        return list(self._tools.keys())

    async def invoke(
        self,
        name: str,
        ctx: SessionContext,
        arguments: Optional[dict[str, Any]] = None,
    ) -> str:
        """Validate *arguments* against the tool's schema, then run it.

        Returns the string output (what the LLM sees). Unknown tools and
        arguments that fail validation raise InvalidArgumentError before
        anything executes.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise InvalidArgumentError(f"Unknown tool '{name}'.")

        try:
            parsed = tool.get_schema().model_validate(arguments or {})
        except ValidationError as exc:
            raise InvalidArgumentError(
                f"Invalid arguments for {name}: {_describe(exc)}"
            ) from exc

        logger.info(
            "Invoking tool %s (user=%d, request=%s)", name, ctx.user_id, ctx.request_id,
        )
        result = await tool.execute(ctx, **parsed.model_dump())
        return result.output

    def to_langchain_tools(self, ctx: SessionContext) -> list[StructuredTool]:
        """Convert all registered tools to LangChain StructuredTools.

        AgentExecutor only passes these to ``bind_tools`` for their names,
        descriptions and argument schemas; it runs the calls the model asks
        for itself, through ``invoke()`` with the turn's ctx (see
        ``AgentExecutor._dispatch``). The wrappers also close over *ctx*,
        so a caller that runs them directly gets the same identity binding.
        """
        lc_tools = []
        for tool in self._tools.values():

            def _make_coroutine(tool_name: str, context: SessionContext):
                async def coroutine(**kwargs: Any) -> str:
                    return await self.invoke(tool_name, context, kwargs)
                return coroutine

            lc_tools.append(StructuredTool.from_function(
                coroutine=_make_coroutine(tool.name, ctx),
                name=tool.name,
                description=tool.description,
                args_schema=tool.get_schema(),
            ))
        return lc_tools


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{location}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)
