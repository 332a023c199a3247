"""
domain.entities - Persistence-aware types (have IDs, timestamps).

Plain dataclasses decoupled from any persistence strategy: no SQL
concerns, no DB imports. Bookkeeping timestamps (created_at, updated_at)
are ISO strings set by the repository implementations; business dates
(policy term, renewal ends, payment times) are datetimes because the
services do arithmetic on them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class User:
    """Registered account. The email links a user to their customer record."""
    id: Optional[int] = None
    email: str = ""
    username: str = ""
    password: str = ""
    role: str = "user"
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Plan:
    """Insurance product from the catalog."""
    id: Optional[int] = None
    code: str = ""
    name: str = ""
    category: str = ""  # health | life | motor | home
    base_premium: float = 0.0
    sum_insured: float = 0.0
    riders: list[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Agent:
    """Sales agent a policy can be assigned to."""
    id: Optional[int] = None
    code: str = ""
    name: str = ""
    email: str = ""
    status: str = "active"
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Customer:
    """Policy holder. One per email address."""
    id: Optional[int] = None
    name: str = ""
    email: str = ""
    phone: str = ""
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Insured:
    """Person covered by a policy."""
    name: str = ""
    relation: str = ""
    dob: str = ""  # ISO date


@dataclass
class Beneficiary:
    name: str = ""
    relation: str = ""


@dataclass
class Policy:
    """An issued insurance policy."""
    id: Optional[int] = None
    policy_number: str = ""
    status: str = "pending"  # pending | active | lapsed | cancelled
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    premium: float = 0.0
    insured: Insured = field(default_factory=Insured)
    beneficiaries: list[Beneficiary] = field(default_factory=list)
    customer_id: Optional[int] = None
    plan_id: Optional[int] = None
    agent_id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Payment:
    id: Optional[int] = None
    policy_id: Optional[int] = None
    type: str = ""  # purchase | renewal | refund
    amount: float = 0.0
    status: str = "pending"  # pending | success | failed
    gateway_ref: str = ""
    paid_at: Optional[datetime] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Renewal:
    id: Optional[int] = None
    policy_id: Optional[int] = None
    previous_end: Optional[datetime] = None
    new_end: Optional[datetime] = None
    status: str = "requested"  # requested | completed | failed
    created_at: str = ""
    updated_at: str = ""


@dataclass
class CancellationRequest:
    id: Optional[int] = None
    policy_id: Optional[int] = None
    reason: str = ""
    status: str = "requested"  # requested | approved | rejected | refunded
    requested_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Conversation:
    """Metadata for a chat session. Owned by exactly one user."""
    id: Optional[int] = None
    user_id: Optional[int] = None
    conversation_id: str = ""
    title: str = ""
    last_message_at: str = ""
    created_at: str = ""
    updated_at: str = ""


@dataclass
class ChatMessage:
    """A single message in a conversation. Immutable once stored."""
    id: Optional[int] = None
    user_id: Optional[int] = None
    conversation_id: str = ""
    role: str = ""  # "user" or "assistant"
    content: str = ""
    created_at: str = ""
