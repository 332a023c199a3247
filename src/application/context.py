"""
application.context - Request-scoped session context.

Every function receives its context explicitly. Two concurrent users
get two different SessionContext instances; no shared state.

The identity fields come from the verified token, never from model output.
Tools that touch user data read the caller from here and ignore any
user-shaped argument the model sends.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from uuid import uuid4


@dataclass
class SessionContext:
    """Per-turn context passed through all layers.

    Attributes:
        user_id:          Authenticated user ID (provided by adapter).
        email:            Account email, as carried by the token.
        role:             Account role.
        conversation_id:  Chat session the turn belongs to, if any.
        request_id:       Unique per request, for tracing/logging.
    """
    user_id: int
    email: str = ""
    role: str = "user"
    conversation_id: Optional[str] = None
    request_id: str = field(default_factory=lambda: uuid4().hex)

    def new_request(self) -> None:
        """Reset per-request state for a new turn within the same session."""
        self.request_id = uuid4().hex
