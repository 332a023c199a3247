"""
application.services.authentication - User registration and login.

Handles password hashing (bcrypt) and JWT creation/verification. The
token carries the principal {user_id, email, role} that every other
entry point trusts without re-validating.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt as _bcrypt
from jose import jwt, JWTError

from domain.entities import User
from domain.ports import UserRepository
from domain.exceptions import AuthenticationError, DuplicateAccountError
from application.dto import RegisterRequest, LoginRequest, AuthToken

logger = logging.getLogger(__name__)


class AuthenticationService:
    """Handles registration, login, and JWT management."""

    def __init__(
        self,
        user_repo: UserRepository,
        jwt_secret: str,
        jwt_expiry_hours: int = 24,
        jwt_algorithm: str = "HS256",
    ):
        self._user_repo = user_repo
        self._jwt_secret = jwt_secret
        self._jwt_expiry_hours = jwt_expiry_hours
        self._jwt_algorithm = jwt_algorithm
        # bcrypt is used directly (passlib is incompatible with bcrypt >= 4.0)

    async def register(self, request: RegisterRequest) -> AuthToken:
        """Create a new account and return a JWT for it."""
        email = request.email.strip().lower()
        existing = await self._user_repo.get_by_email(email)
        if existing is not None:
            raise DuplicateAccountError(f"Email '{email}' is already registered.")

        user = User(
            email=email,
            username=request.username or email.split("@")[0],
            password=_bcrypt.hashpw(
                request.password.encode(), _bcrypt.gensalt(),
            ).decode(),
            role=request.role or "user",
        )
        user_id = await self._user_repo.save(user)

        logger.info("Registered user %d with email '%s'", user_id, email)
        return self._create_token(user_id, email, user.role)

    async def login(self, request: LoginRequest) -> AuthToken:
        """Verify credentials and return JWT."""
        user = await self._user_repo.get_by_email(request.email.strip().lower())
        if user is None:
            raise AuthenticationError("Invalid email or password.")

        if not _bcrypt.checkpw(
            request.password.encode(), user.password.encode(),
        ):
            raise AuthenticationError("Invalid email or password.")

        logger.info("User %d logged in", user.id)
        return self._create_token(user.id, user.email, user.role)

    def verify_token(self, token: str) -> dict[str, Any]:
        """Decode and validate a JWT. Returns the payload dict."""
        try:
            payload = jwt.decode(
                token, self._jwt_secret, algorithms=[self._jwt_algorithm],
            )
        except JWTError as exc:
            raise AuthenticationError(f"Token verification failed: {exc}")
        if payload.get("user_id") is None:
            raise AuthenticationError("Invalid token payload.")
        return payload

    def _create_token(self, user_id: int, email: str, role: str) -> AuthToken:
        expire = datetime.now(timezone.utc) + timedelta(hours=self._jwt_expiry_hours)
        payload = {
            "user_id": user_id,
            "email": email,
            "role": role,
            "exp": expire,
        }
        token = jwt.encode(payload, self._jwt_secret, algorithm=self._jwt_algorithm)
        return AuthToken(access_token=token, user_id=user_id, email=email, role=role)
