"""Full turns through ConversationService with a scripted model."""

import asyncio
import json

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage

from agent.tools.knowledge import NO_RELEVANT_DATA
from application.dto import HistoryEntry, TurnRequest
from application.services.conversation import title_from_input
from domain.exceptions import InvalidArgumentError, LLMProviderError, NotFoundError

from conftest import PURCHASE_ARGS, reply, tool_call


@pytest.fixture
def conversations(factory):
    return factory.create_conversation_service()


@pytest.fixture
def chats(factory):
    return factory.create_chat_service()


def test_title_from_input():
    assert title_from_input("short") == "short"
    long_text = "x" * 60
    assert title_from_input(long_text) == "x" * 50 + "..."


async def test_purchase_turn(conversations, chats, chat_model, factory, ctx):
    chat_model.script(
        tool_call("purchase_insurance", PURCHASE_ARGS),
        reply("Done! Your Basic Health Insurance policy is active."),
    )

    result = await conversations.run_turn(
        ctx, TurnRequest(input="Buy Basic Health Insurance for me"),
    )

    assert result.output == "Done! Your Basic Health Insurance policy is active."
    tool_result = chat_model.calls[1][-1]
    assert isinstance(tool_result, ToolMessage)
    assert json.loads(tool_result.content)["policy_number"].startswith("POL-")

    policies = await factory.create_policy_service().list_policies(ctx)
    assert len(policies) == 1

    transcript = await chats.get_chat(result.chat_id, ctx.user_id)
    assert transcript.conversation.title == "Buy Basic Health Insurance for me"
    assert [(m.role, m.content) for m in transcript.messages] == [
        ("user", "Buy Basic Health Insurance for me"),
        ("assistant", "Done! Your Basic Health Insurance policy is active."),
    ]


async def test_second_turn_replays_stored_history(conversations, chats, chat_model, ctx):
    chat_model.script(reply("We offer five plans."), reply("Yes, it covers hospitalization."))

    first = await conversations.run_turn(ctx, TurnRequest(input="What plans exist?"))
    second = await conversations.run_turn(
        ctx, TurnRequest(input="Does Basic Health cover hospitals?", chat_id=first.chat_id),
    )

    assert second.chat_id == first.chat_id
    sent = chat_model.calls[-1]
    assert [type(m) for m in sent] == [SystemMessage, HumanMessage, AIMessage, HumanMessage]
    assert sent[1].content == "What plans exist?"
    assert sent[2].content == "We offer five plans."

    transcript = await chats.get_chat(first.chat_id, ctx.user_id)
    assert len(transcript.messages) == 4


async def test_policy_status_turn_after_purchase(conversations, chats, chat_model, ctx):
    chat_model.script(
        tool_call("purchase_insurance", PURCHASE_ARGS),
        reply("Your policy is active."),
        tool_call("get_insurance"),
        reply("Your Basic Health Insurance policy is active."),
    )

    first = await conversations.run_turn(ctx, TurnRequest(input="Buy Basic Health Insurance"))
    policy_number = json.loads(chat_model.calls[1][-1].content)["policy_number"]

    second = await conversations.run_turn(
        ctx, TurnRequest(input="What's my policy status?", chat_id=first.chat_id),
    )

    assert second.chat_id == first.chat_id
    status_call = chat_model.calls[-1][-2]
    assert isinstance(status_call, AIMessage)
    assert [c["name"] for c in status_call.tool_calls] == ["get_insurance"]
    status_result = chat_model.calls[-1][-1]
    assert isinstance(status_result, ToolMessage)
    payload = json.loads(status_result.content)
    assert payload["count"] == 1
    assert policy_number in status_result.content

    transcript = await chats.get_chat(first.chat_id, ctx.user_id)
    assert [m.role for m in transcript.messages] == ["user", "assistant", "user", "assistant"]
    assert transcript.messages[-1].content == "Your Basic Health Insurance policy is active."


async def test_concurrent_turns_on_one_chat_store_two_messages_each(conversations, chats, ctx):
    first = await conversations.run_turn(ctx, TurnRequest(input="hello"))

    await asyncio.gather(*(
        conversations.run_turn(ctx, TurnRequest(input=f"question {i}", chat_id=first.chat_id))
        for i in range(10)
    ))

    transcript = await chats.get_chat(first.chat_id, ctx.user_id)
    assert len(transcript.messages) == 22
    questions = [m.content for m in transcript.messages if m.role == "user"]
    assert sorted(questions) == sorted(["hello"] + [f"question {i}" for i in range(10)])
    assert sum(m.role == "assistant" for m in transcript.messages) == 11


async def test_caller_history_takes_precedence(conversations, chat_model, ctx):
    chat_model.script(reply("first"), reply("second"))
    first = await conversations.run_turn(ctx, TurnRequest(input="stored question"))

    await conversations.run_turn(ctx, TurnRequest(
        input="follow up",
        chat_id=first.chat_id,
        conversation_history=[HistoryEntry("user", "replayed question")],
    ))

    contents = [m.content for m in chat_model.calls[-1][1:]]
    assert contents == ["replayed question", "follow up"]


async def test_failed_turn_keeps_only_the_user_message(conversations, chats, chat_model, ctx):
    chat_model.script(reply("hello"))
    first = await conversations.run_turn(ctx, TurnRequest(input="hi"))

    chat_model.error = ConnectionError("provider down")
    with pytest.raises(LLMProviderError):
        await conversations.run_turn(ctx, TurnRequest(input="are you there?", chat_id=first.chat_id))

    transcript = await chats.get_chat(first.chat_id, ctx.user_id)
    assert [m.content for m in transcript.messages] == ["hi", "hello", "are you there?"]


async def test_empty_input_rejected(conversations, chats, ctx):
    with pytest.raises(InvalidArgumentError):
        await conversations.run_turn(ctx, TurnRequest(input="   "))
    assert await chats.list_chats(ctx.user_id) == []


async def test_foreign_chat_id_is_not_found(conversations, chats, chat_model, ctx, other_ctx):
    chat_model.script(reply("hi"))
    theirs = await conversations.run_turn(other_ctx, TurnRequest(input="hello"))

    with pytest.raises(NotFoundError):
        await conversations.run_turn(ctx, TurnRequest(input="peek", chat_id=theirs.chat_id))
    transcript = await chats.get_chat(theirs.chat_id, other_ctx.user_id)
    assert len(transcript.messages) == 2


async def test_business_error_is_explained_not_raised(conversations, chat_model, ctx):
    chat_model.script(
        tool_call("renew_insurance", {"policy_number": "POL-1-UNKNOWN1"}),
        reply("I could not find that policy."),
    )
    result = await conversations.run_turn(ctx, TurnRequest(input="renew POL-1-UNKNOWN1"))

    assert result.output == "I could not find that policy."
    assert chat_model.calls[1][-1].content == (
        "Error: No policy found with policy number: POL-1-UNKNOWN1"
    )


async def test_knowledge_without_documents_returns_sentinel(conversations, chat_model, ctx):
    chat_model.script(
        tool_call("general_assistant_knowledge", {"query": "flood cover exclusions"}),
        reply(NO_RELEVANT_DATA),
    )
    result = await conversations.run_turn(ctx, TurnRequest(input="What about flood cover?"))

    assert chat_model.calls[1][-1].content == NO_RELEVANT_DATA
    assert result.output == NO_RELEVANT_DATA


async def test_system_prompt_lists_every_tool(factory, chat_model, ctx, conversations):
    chat_model.script(reply("hi"))
    await conversations.run_turn(ctx, TurnRequest(input="hello"))

    system = chat_model.calls[0][0].content
    for name in factory.create_tool_registry().names():
        assert name in system
    assert {t.name for t in chat_model.bound_tools} == set(factory.create_tool_registry().names())
