"""
domain.models - Value objects and vocabulary for the insurance assistant.

Immutable data containers with no business logic and no dependencies on
infrastructure (no LangChain, no FAISS, no SQLite).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

PLAN_CATEGORIES: tuple[str, ...] = ("health", "life", "motor", "home")

USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"
MESSAGE_ROLES: tuple[str, ...] = (USER_ROLE, ASSISTANT_ROLE)


class PolicyStatus:
    PENDING = "pending"
    ACTIVE = "active"
    LAPSED = "lapsed"
    CANCELLED = "cancelled"


class PaymentType:
    PURCHASE = "purchase"
    RENEWAL = "renewal"
    REFUND = "refund"


class PaymentStatus:
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class RenewalStatus:
    REQUESTED = "requested"
    COMPLETED = "completed"
    FAILED = "failed"


class CancellationStatus:
    REQUESTED = "requested"
    APPROVED = "approved"
    REJECTED = "rejected"
    REFUNDED = "refunded"


# ---------------------------------------------------------------------------
# Retrieval
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RetrievalChunk:
    """An embedded text fragment from an ingested document.

    owner_id is None for the shared knowledge corpus. Chunks are written by
    the ingestion pipeline and only ever read by the agent.
    """
    text: str
    owner_id: Optional[int] = None
    file_name: str = ""
    chunk_index: int = 0
    score: Optional[float] = None

    @property
    def is_shared(self) -> bool:
        return self.owner_id is None

    def visible_to(self, user_id: int) -> bool:
        """True when the chunk belongs to *user_id* or to the shared corpus."""
        return self.owner_id is None or self.owner_id == user_id
