"""The conversational turn endpoint."""

from fastapi import APIRouter, Depends

from factory import ServiceFactory
from application.dto import HistoryEntry, TurnRequest
from adapters.rest.dependencies import (
    CurrentUser, build_session_ctx, get_current_user, get_factory,
)
from adapters.rest.schemas import AgentBody, AgentOut

router = APIRouter(tags=["agent"])


@router.post("/agent", response_model=AgentOut)
async def run_agent(
    body: AgentBody,
    user: CurrentUser = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    """Answer one user message. Creates a chat session when chat_id is omitted.

    Business failures come back inside `output`; only backend failures
    surface as a 500 with a generic detail.
    """
    history = None
    if body.conversation_history:
        history = [
            HistoryEntry(role=item.role, content=item.content)
            for item in body.conversation_history
        ]

    service = factory.create_conversation_service()
    result = await service.run_turn(
        build_session_ctx(user, body.chat_id),
        TurnRequest(input=body.input, chat_id=body.chat_id, conversation_history=history),
    )
    return AgentOut(output=result.output, chat_id=result.chat_id)
