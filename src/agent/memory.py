"""
agent.memory - Conversation history to LangChain messages.

History is rebuilt for every turn from whatever the caller supplies
(a replay from the client, or the stored session log). Only user and
assistant turns survive; the system instruction is never taken from
history.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from domain.models import ASSISTANT_ROLE, USER_ROLE

logger = logging.getLogger(__name__)


class _Turn(Protocol):
    role: str
    content: str


def history_to_messages(history: Iterable[_Turn]) -> list[BaseMessage]:
    """Convert prior turns to LangChain messages, dropping any other role."""
    messages: list[BaseMessage] = []
    dropped = 0
    for turn in history:
        if turn.role == USER_ROLE:
            messages.append(HumanMessage(content=turn.content))
        elif turn.role == ASSISTANT_ROLE:
            messages.append(AIMessage(content=turn.content))
        else:
            dropped += 1
    if dropped:
        logger.debug("Dropped %d history message(s) with unsupported roles", dropped)
    return messages


def compose_turn(
    system_prompt: str,
    history: Iterable[_Turn],
    utterance: str,
) -> list[BaseMessage]:
    """[system] + replayed history + the new user message."""
    return [
        SystemMessage(content=system_prompt),
        *history_to_messages(history),
        HumanMessage(content=utterance),
    ]
