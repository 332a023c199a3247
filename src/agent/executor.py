"""
agent.executor - Agent execution engine.

Runs the model + tool loop for one turn as an explicit, bounded loop:

    invoke model → no tool calls?  return the text
                 → tool calls?     run each, append results, invoke again

The system message is element 0 of the message list and the list is only
ever appended to, so every model call in the turn starts with it.

Business errors raised by a tool go back to the model as the tool result.
Anything else ends the turn as an InfrastructureError.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, ToolMessage

from application.context import SessionContext
from domain.exceptions import (
    BusinessError,
    InfrastructureError,
    LLMProviderError,
    OrchestrationLimitError,
)
from agent.memory import compose_turn
from agent.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class AgentExecutor:
    """Runs the LLM + tool selection loop.

    Constructed once by factory.py with all dependencies injected.
    Stateless per call: all per-turn state flows through SessionContext
    and the local message list.
    """

    def __init__(
        self,
        llm: BaseChatModel,
        tools: ToolRegistry,
        system_prompt: str,
        max_iterations: int = 8,
    ):
        self._llm = llm
        self._tools = tools
        self._system_prompt = system_prompt
        self._max_iterations = max_iterations

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    async def run(
        self,
        ctx: SessionContext,
        user_input: str,
        history: Iterable[Any] = (),
    ) -> str:
        """Process one user message and return the assistant's reply.

        Args:
            ctx:        Caller identity and session for this turn.
            user_input: The user's message text.
            history:    Prior turns (objects with ``role`` and ``content``).

        Raises:
            LLMProviderError: the model call failed.
            OrchestrationLimitError: no final answer within max_iterations rounds.
            InfrastructureError: a tool failed for a non-business reason.
        """
        messages = compose_turn(self._system_prompt, history, user_input)
        model = self._llm.bind_tools(self._tools.to_langchain_tools(ctx))

        logger.info(
            "Agent processing (user=%d, conversation=%s): %s",
            ctx.user_id, ctx.conversation_id, user_input[:80],
        )

        for round_no in range(1, self._max_iterations + 1):
            try:
                response = await model.ainvoke(list(messages))
            except Exception as exc:
                logger.exception(
                    "Model call failed (user=%d, round=%d)", ctx.user_id, round_no,
                )
                raise LLMProviderError("The language model request failed.") from exc

            messages.append(response)
            tool_calls = getattr(response, "tool_calls", None) or []
            if not tool_calls:
                output = extract_text(response)
                logger.info(
                    "Agent finished after %d round(s): %s", round_no, output[:80],
                )
                return output

            for index, call in enumerate(tool_calls):
                name = call.get("name", "")
                output = await self._dispatch(ctx, name, call.get("args") or {})
                messages.append(ToolMessage(
                    content=output,
                    tool_call_id=call.get("id") or f"call_{round_no}_{index}",
                    name=name,
                ))

        logger.error(
            "Agent hit the %d-round ceiling (user=%d, request=%s)",
            self._max_iterations, ctx.user_id, ctx.request_id,
        )
        raise OrchestrationLimitError(
            f"No final answer after {self._max_iterations} tool rounds."
        )

    async def _dispatch(
        self, ctx: SessionContext, name: str, arguments: dict[str, Any],
    ) -> str:
        """Run one requested tool call as ctx; business errors become its result.

        This is where the caller identity is bound: the model's arguments
        are validated against the tool schema and any identity fields it
        sends are dropped.
        """
        try:
            return await self._tools.invoke(name, ctx, arguments)
        except BusinessError as exc:
            logger.info("Tool %s returned business error: %s", name, exc)
            return f"Error: {exc}"
        except InfrastructureError:
            raise
        except Exception as exc:
            logger.exception("Tool %s failed unexpectedly", name)
            raise InfrastructureError(f"Tool '{name}' failed.") from exc


def extract_text(message: AIMessage) -> str:
    """Plain string content as-is; anything structured as sorted JSON."""
    content = message.content
    if isinstance(content, str):
        return content
    return json.dumps(content, sort_keys=True, default=str)
