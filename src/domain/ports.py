"""
domain.ports - Abstract interfaces (Protocols) for all system boundaries.

These define WHAT the system needs without specifying HOW. Infrastructure
modules provide concrete implementations. Application services depend only
on these protocols, never on concrete classes.

Using typing.Protocol (structural typing) instead of ABC: any class that
implements the methods satisfies the port without explicit inheritance.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from domain.models import RetrievalChunk
from domain.entities import (
    User,
    Plan,
    Agent,
    Customer,
    Policy,
    Payment,
    Renewal,
    CancellationRequest,
    Conversation,
    ChatMessage,
)


# ---------------------------------------------------------------------------
# Retrieval Port
# ---------------------------------------------------------------------------

@runtime_checkable
class DocumentIndex(Protocol):
    """Vector index over embedded document chunks.

    search() must apply the owner filter BEFORE ranking, so the top-k slots
    are never consumed by chunks the caller cannot see.
    """

    async def search(
        self, query: str, owner_ids: set[Optional[int]], k: int,
    ) -> list[RetrievalChunk]: ...
    async def add_chunks(self, chunks: list[RetrievalChunk]) -> int: ...


@runtime_checkable
class DocumentChunker(Protocol):
    """Turns a document on disk into owner-tagged chunks (synchronous)."""

    def split(
        self, file_path: str, owner_id: Optional[int], file_name: str,
    ) -> list[RetrievalChunk]: ...


# ---------------------------------------------------------------------------
# Repository Ports
# ---------------------------------------------------------------------------

@runtime_checkable
class UserRepository(Protocol):
    async def get_by_id(self, user_id: int) -> User | None: ...
    async def get_by_email(self, email: str) -> User | None: ...
    async def save(self, user: User) -> int: ...


@runtime_checkable
class PlanRepository(Protocol):
    async def save(self, plan: Plan) -> int: ...
    async def get_by_id(self, plan_id: int) -> Plan | None: ...
    async def get_by_name(self, name: str) -> Plan | None: ...
    async def get_by_category(self, category: str) -> list[Plan]: ...
    async def get_all(self) -> list[Plan]: ...
    async def count(self) -> int: ...


@runtime_checkable
class AgentRepository(Protocol):
    async def save(self, agent: Agent) -> int: ...
    async def get_by_id(self, agent_id: int) -> Agent | None: ...
    async def get_first_active(self) -> Agent | None: ...
    async def count(self) -> int: ...


@runtime_checkable
class CustomerRepository(Protocol):
    async def save(self, customer: Customer) -> int: ...
    async def get_by_id(self, customer_id: int) -> Customer | None: ...
    async def get_by_email(self, email: str) -> Customer | None: ...


@runtime_checkable
class PolicyRepository(Protocol):
    async def save(self, policy: Policy) -> int: ...
    async def get_by_id(self, policy_id: int) -> Policy | None: ...
    async def get_by_policy_number(self, policy_number: str) -> Policy | None: ...
    async def get_by_customer(self, customer_id: int) -> list[Policy]: ...
    async def update_term(self, policy_id: int, end_date: datetime, status: str) -> None: ...
    async def update_status(self, policy_id: int, status: str) -> None: ...


@runtime_checkable
class PaymentRepository(Protocol):
    async def save(self, payment: Payment) -> int: ...
    async def get_by_policy(self, policy_id: int) -> list[Payment]: ...


@runtime_checkable
class RenewalRepository(Protocol):
    async def save(self, renewal: Renewal) -> int: ...
    async def get_by_policy(self, policy_id: int) -> list[Renewal]: ...
    async def update_status(self, renewal_id: int, status: str) -> None: ...


@runtime_checkable
class CancellationRepository(Protocol):
    async def save(self, request: CancellationRequest) -> int: ...
    async def get_by_policy(self, policy_id: int) -> list[CancellationRequest]: ...
    async def update_status(
        self, request_id: int, status: str, resolved_at: datetime | None = None,
    ) -> None: ...


@runtime_checkable
class ConversationRepository(Protocol):
    """CRUD for Conversation metadata."""

    async def save(self, conversation: Conversation) -> int: ...
    async def get_by_user(self, user_id: int) -> list[Conversation]: ...
    async def get_for_owner(
        self, conversation_id: str, user_id: int,
    ) -> Conversation | None: ...
    async def touch(self, conversation_id: str) -> bool: ...
    async def update_title(self, conversation_id: str, title: str) -> bool: ...
    async def delete(self, conversation_id: str) -> bool: ...


@runtime_checkable
class ChatMessageRepository(Protocol):
    """Append-only message log."""

    async def append(self, message: ChatMessage) -> int: ...
    async def get_by_conversation(self, conversation_id: str) -> list[ChatMessage]: ...
