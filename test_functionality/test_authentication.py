"""Registration, login and token verification."""

import pytest

from application.dto import LoginRequest, RegisterRequest
from domain.exceptions import AuthenticationError, DuplicateAccountError
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.user_repo import SQLiteUserRepository


@pytest.fixture
def auth_service(factory):
    return factory.create_authentication_service()


async def test_register_defaults_username_to_email_prefix(auth_service, settings):
    token = await auth_service.register(RegisterRequest(email="Zoe@Example.com", password="secret123"))
    user = await SQLiteUserRepository(AsyncSQLiteConnection(settings.db_path)).get_by_id(token.user_id)
    assert user.email == "zoe@example.com"
    assert user.username == "zoe"
    assert user.password != "secret123"


async def test_duplicate_email_is_case_insensitive(auth_service):
    await auth_service.register(RegisterRequest(email="zoe@example.com", password="secret123"))
    with pytest.raises(DuplicateAccountError):
        await auth_service.register(RegisterRequest(email="ZOE@example.com", password="other123"))


async def test_login_and_verify(auth_service):
    registered = await auth_service.register(RegisterRequest(email="zoe@example.com", password="secret123"))
    token = await auth_service.login(LoginRequest(email="zoe@example.com", password="secret123"))

    payload = auth_service.verify_token(token.access_token)
    assert payload["user_id"] == registered.user_id
    assert payload["email"] == "zoe@example.com"
    assert payload["role"] == "user"


async def test_login_failures_share_one_message(auth_service):
    await auth_service.register(RegisterRequest(email="zoe@example.com", password="secret123"))
    with pytest.raises(AuthenticationError, match="Invalid email or password."):
        await auth_service.login(LoginRequest(email="zoe@example.com", password="nope-nope"))
    with pytest.raises(AuthenticationError, match="Invalid email or password."):
        await auth_service.login(LoginRequest(email="nobody@example.com", password="secret123"))


async def test_tampered_token_rejected(auth_service):
    with pytest.raises(AuthenticationError):
        auth_service.verify_token("header.payload.signature")
