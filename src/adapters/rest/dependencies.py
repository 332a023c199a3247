"""
Shared FastAPI dependencies.

- get_factory(): returns the initialized ServiceFactory (set at startup).
- get_current_user(): JWT bearer token extraction and validation.
- build_session_ctx(): the per-request SessionContext for service calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from factory import ServiceFactory
from application.context import SessionContext
from domain.exceptions import AuthenticationError

# Module-level reference set by app lifespan
_factory: ServiceFactory | None = None


def set_factory(factory: ServiceFactory | None) -> None:
    global _factory
    _factory = factory


def get_factory() -> ServiceFactory:
    if _factory is None:
        raise RuntimeError("ServiceFactory not initialized.")
    return _factory


# --- JWT Bearer ---

_bearer_scheme = HTTPBearer()


@dataclass
class CurrentUser:
    """Extracted from JWT payload. Passed to route handlers."""
    user_id: int
    email: str
    role: str


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    factory: ServiceFactory = Depends(get_factory),
) -> CurrentUser:
    """Validate JWT and return CurrentUser. Raises 401 on failure."""
    auth_service = factory.create_authentication_service()
    try:
        payload = auth_service.verify_token(credentials.credentials)
    except AuthenticationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return CurrentUser(
        user_id=payload["user_id"],
        email=payload.get("email", ""),
        role=payload.get("role", "user"),
    )


def build_session_ctx(
    user: CurrentUser, conversation_id: Optional[str] = None,
) -> SessionContext:
    """Create a SessionContext from the verified principal."""
    return SessionContext(
        user_id=user.user_id,
        email=user.email,
        role=user.role,
        conversation_id=conversation_id,
    )
