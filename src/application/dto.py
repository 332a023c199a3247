"""
application.dto - Data Transfer Objects for service input/output.

These are the structured results that services return to callers
(agent tools, REST endpoints, CLI adapters).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from domain.entities import (
    Agent,
    Beneficiary,
    CancellationRequest,
    ChatMessage,
    Conversation,
    Customer,
    Insured,
    Payment,
    Plan,
    Policy,
    Renewal,
)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RegisterRequest:
    """Input for user registration."""
    email: str
    password: str
    username: str = ""
    role: str = "user"


@dataclass(frozen=True)
class LoginRequest:
    """Input for user login."""
    email: str
    password: str


@dataclass(frozen=True)
class AuthToken:
    """JWT token returned after login/register."""
    access_token: str
    user_id: int
    email: str
    role: str
    token_type: str = "bearer"


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PurchaseRequest:
    """Input for buying a policy. Customer name and email come from the account."""
    plan_name: str
    insured: Insured
    customer_phone: str
    beneficiaries: list[Beneficiary] = field(default_factory=list)
    agent_id: Optional[int] = None


@dataclass(frozen=True)
class PurchaseResult:
    policy: Policy
    customer: Customer
    plan: Plan
    payment: Payment
    agent: Optional[Agent] = None
    message: str = "Insurance purchased successfully"

    @property
    def policy_number(self) -> str:
        return self.policy.policy_number


@dataclass(frozen=True)
class RenewalResult:
    policy: Policy
    renewal: Renewal
    payment: Payment
    message: str = "Insurance renewed successfully"


@dataclass(frozen=True)
class CancellationResult:
    policy: Policy
    cancellation_request: CancellationRequest
    message: str = "Insurance cancelled successfully"


@dataclass(frozen=True)
class PolicyOverview:
    """A policy with its plan and agent resolved, for listings."""
    policy: Policy
    plan: Optional[Plan] = None
    agent: Optional[Agent] = None


@dataclass(frozen=True)
class PolicyDetails:
    """A policy with its full payment, renewal and cancellation history."""
    policy: Policy
    plan: Optional[Plan] = None
    payments: list[Payment] = field(default_factory=list)
    renewals: list[Renewal] = field(default_factory=list)
    cancellations: list[CancellationRequest] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HistoryEntry:
    """One replayed prior turn as supplied by the caller."""
    role: str
    content: str


@dataclass(frozen=True)
class TurnRequest:
    """Input for one conversational turn."""
    input: str
    chat_id: Optional[str] = None
    conversation_history: Optional[list[HistoryEntry]] = None


@dataclass(frozen=True)
class TurnResult:
    output: str
    chat_id: str


@dataclass(frozen=True)
class IngestionResult:
    file_name: str
    chunks_stored: int
    message: str = "PDF processed and embeddings stored successfully."


@dataclass(frozen=True)
class ChatTranscript:
    """A chat session with its ordered message log."""
    conversation: Conversation
    messages: list[ChatMessage] = field(default_factory=list)
