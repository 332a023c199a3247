"""
Shared fixtures.

The chat model is a scripted stand-in: each call pops the next prepared
AIMessage and records the exact message list it was given. Embeddings
are LangChain's deterministic fake, so the FAISS index runs for real
without downloading a model.
"""

from __future__ import annotations

from typing import Any, Optional

import pytest
import pytest_asyncio
from langchain_core.embeddings import DeterministicFakeEmbedding
from langchain_core.messages import AIMessage

from application.context import SessionContext
from application.dto import RegisterRequest
from factory import ServiceFactory
from infrastructure.config import Settings


class ScriptedChatModel:
    """Duck-typed chat model: bind_tools() then ainvoke() per round."""

    def __init__(self):
        self.responses: list[AIMessage] = []
        self.calls: list[list[Any]] = []
        self.bound_tools: list[Any] = []
        self.error: Optional[Exception] = None

    def script(self, *responses: AIMessage) -> None:
        self.responses.extend(responses)

    def bind_tools(self, tools, **kwargs):
        self.bound_tools = list(tools)
        return self

    async def ainvoke(self, messages, **kwargs) -> AIMessage:
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        if not self.responses:
            return AIMessage(content="Done.")
        return self.responses.pop(0)


def tool_call(name: str, args: Optional[dict] = None, call_id: Optional[str] = None) -> AIMessage:
    """An assistant message requesting one tool call."""
    return AIMessage(
        content="",
        tool_calls=[{"name": name, "args": args or {}, "id": call_id or f"call_{name}"}],
    )


def reply(text: str) -> AIMessage:
    return AIMessage(content=text)


PURCHASE_ARGS = {
    "plan_name": "Basic Health Insurance",
    "insured": {"name": "Asha Rao", "relation": "self", "dob": "1990-04-12"},
    "customer_phone": "+91-9000000000",
    "beneficiaries": [{"name": "Ravi Rao", "relation": "spouse"}],
}


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        project_root=tmp_path,
        db_path=str(tmp_path / "test.db"),
        vectorstore_path=str(tmp_path / "index"),
        upload_dir=str(tmp_path / "uploads"),
        jwt_secret="test-secret",
        agent_max_iterations=4,
        retrieval_top_k=3,
    )


@pytest.fixture
def chat_model() -> ScriptedChatModel:
    return ScriptedChatModel()


@pytest.fixture
def embeddings() -> DeterministicFakeEmbedding:
    return DeterministicFakeEmbedding(size=32)


@pytest_asyncio.fixture
async def factory(settings, chat_model, embeddings) -> ServiceFactory:
    factory = ServiceFactory(settings, llm=chat_model, embeddings=embeddings)
    await factory.initialize()
    return factory


async def _register(factory: ServiceFactory, email: str) -> SessionContext:
    token = await factory.create_authentication_service().register(
        RegisterRequest(email=email, password="secret123", username=email.split("@")[0]),
    )
    return SessionContext(user_id=token.user_id, email=token.email, role=token.role)


@pytest_asyncio.fixture
async def ctx(factory) -> SessionContext:
    return await _register(factory, "asha@example.com")


@pytest_asyncio.fixture
async def other_ctx(factory) -> SessionContext:
    return await _register(factory, "bala@example.com")
