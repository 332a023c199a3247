"""
application.services.conversation - One conversational turn with session lifecycle.

Loads or creates the chat session, records the user message, runs the
agent, records the reply. Intermediate tool traffic never reaches the
session log: each successful turn adds exactly two messages.

If the agent fails, the user message stays recorded and the error
propagates to the adapter.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Sequence

from domain.exceptions import InvalidArgumentError
from domain.models import ASSISTANT_ROLE, USER_ROLE
from application.context import SessionContext
from application.dto import TurnRequest, TurnResult
from application.services.chat_history import ChatService

if TYPE_CHECKING:
    from agent.executor import AgentExecutor

logger = logging.getLogger(__name__)

TITLE_LENGTH = 50


def title_from_input(text: str) -> str:
    return text[:TITLE_LENGTH] + ("..." if len(text) > TITLE_LENGTH else "")


class ConversationService:
    """Wraps the agent executor with chat-session bookkeeping."""

    def __init__(self, agent: AgentExecutor, chat_service: ChatService):
        self._agent = agent
        self._chat_service = chat_service

    async def run_turn(self, ctx: SessionContext, request: TurnRequest) -> TurnResult:
        """Answer one user message.

        Raises:
            InvalidArgumentError: empty input.
            NotFoundError: chat_id does not name one of the caller's sessions.
            InfrastructureError: the agent turn failed.
        """
        if not request.input or not request.input.strip():
            raise InvalidArgumentError("Input must not be empty.")

        if request.chat_id:
            stored: Sequence[Any] = await self._chat_service.load_history(
                request.chat_id, ctx.user_id,
            )
            chat_id = request.chat_id
        else:
            conversation = await self._chat_service.create_chat(
                ctx.user_id, title_from_input(request.input),
            )
            stored = []
            chat_id = conversation.conversation_id

        history = request.conversation_history or stored

        await self._chat_service.add_message(chat_id, ctx.user_id, USER_ROLE, request.input)

        ctx.conversation_id = chat_id
        ctx.new_request()
        try:
            output = await self._agent.run(ctx, request.input, history)
        except Exception:
            logger.error(
                "Turn failed (user=%d, chat=%s, request=%s)",
                ctx.user_id, chat_id, ctx.request_id,
            )
            raise

        await self._chat_service.add_message(chat_id, ctx.user_id, ASSISTANT_ROLE, output)
        return TurnResult(output=output, chat_id=chat_id)
