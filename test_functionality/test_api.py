"""REST adapter tests using FastAPI's TestClient."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from adapters.rest.app import app
from adapters.rest.dependencies import set_factory
from factory import ServiceFactory

from conftest import PURCHASE_ARGS, ScriptedChatModel, reply, tool_call


@pytest.fixture
def api_model():
    return ScriptedChatModel()


@pytest.fixture
def client(settings, api_model, embeddings):
    factory = ServiceFactory(settings, llm=api_model, embeddings=embeddings)
    asyncio.run(factory.initialize())
    set_factory(factory)
    with TestClient(app) as test_client:
        yield test_client
    set_factory(None)


def _register(client, email="asha@example.com"):
    response = client.post("/auth/register", json={"email": email, "password": "secret123"})
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth(client):
    return _register(client)


@pytest.fixture
def other_auth(client):
    return _register(client, "bala@example.com")


def _purchase_body():
    return {key: value for key, value in PURCHASE_ARGS.items()}


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestAuth:
    def test_register_returns_token(self, client):
        response = client.post(
            "/auth/register", json={"email": "New@Example.com", "password": "secret123"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "new@example.com"
        assert body["token_type"] == "bearer"
        assert body["access_token"]

    def test_duplicate_email(self, client, auth):
        response = client.post(
            "/auth/register", json={"email": "asha@example.com", "password": "secret123"},
        )
        assert response.status_code == 409

    def test_short_password(self, client):
        response = client.post("/auth/register", json={"email": "a@b.co", "password": "123"})
        assert response.status_code == 422

    def test_login(self, client, auth):
        response = client.post(
            "/auth/login", json={"email": "asha@example.com", "password": "secret123"},
        )
        assert response.status_code == 200

    def test_wrong_password(self, client, auth):
        response = client.post(
            "/auth/login", json={"email": "asha@example.com", "password": "wrong-one"},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password."

    def test_me_returns_the_token_principal(self, client, auth):
        response = client.get("/auth/me", headers=auth)
        assert response.status_code == 200
        body = response.json()
        assert body["email"] == "asha@example.com"
        assert body["role"] == "user"
        assert isinstance(body["user_id"], int)

    def test_me_requires_a_valid_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_bad_token(self, client):
        response = client.get("/chats", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_missing_token(self, client):
        response = client.post("/agent", json={"input": "hello"})
        assert response.status_code in (401, 403)


class TestPlans:
    def test_list(self, client):
        response = client.get("/plans")
        assert response.status_code == 200
        assert len(response.json()) == 5

    def test_by_category(self, client):
        response = client.get("/plans/category/motor")
        assert [p["name"] for p in response.json()] == ["Comprehensive Motor Insurance"]

    def test_unknown_category(self, client):
        assert client.get("/plans/category/pets").status_code == 400

    def test_unknown_plan(self, client):
        response = client.get("/plans/999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Plan not found"


class TestPolicies:
    def test_purchase_renew_cancel(self, client, auth):
        response = client.post("/policies/purchase", json=_purchase_body(), headers=auth)
        assert response.status_code == 201
        number = response.json()["policy_number"]
        assert response.json()["payment"]["status"] == "success"

        listed = client.get("/policies", headers=auth).json()
        assert listed["count"] == 1

        renewed = client.post(f"/policies/{number}/renew", headers=auth)
        assert renewed.status_code == 200
        assert renewed.json()["payment"]["status"] == "pending"

        cancelled = client.post(
            f"/policies/{number}/cancel", json={"reason": "Too expensive"}, headers=auth,
        )
        assert cancelled.status_code == 200
        assert cancelled.json()["policy"]["status"] == "cancelled"

        details = client.get(f"/policies/{number}", headers=auth).json()
        assert len(details["payments"]) == 2
        assert details["cancellations"][0]["reason"] == "Too expensive"

    def test_unknown_plan(self, client, auth):
        body = dict(_purchase_body(), plan_name="Moon Insurance")
        response = client.post("/policies/purchase", json=body, headers=auth)
        assert response.status_code == 404
        assert response.json()["detail"] == "No plan found with name: Moon Insurance"

    def test_foreign_policy_forbidden(self, client, auth, other_auth):
        number = client.post(
            "/policies/purchase", json=_purchase_body(), headers=auth,
        ).json()["policy_number"]
        response = client.post(f"/policies/{number}/cancel", headers=other_auth)
        assert response.status_code == 403

    def test_unknown_policy(self, client, auth):
        assert client.get("/policies/POL-0-NOTHING0", headers=auth).status_code == 404


class TestAgent:
    def test_turn_creates_chat(self, client, auth, api_model):
        api_model.script(
            tool_call("purchase_insurance", PURCHASE_ARGS),
            reply("Your policy is active."),
        )
        response = client.post("/agent", json={"input": "Buy basic health"}, headers=auth)
        assert response.status_code == 200
        body = response.json()
        assert body["output"] == "Your policy is active."

        chat = client.get(f"/chats/{body['chat_id']}", headers=auth).json()
        assert [m["role"] for m in chat["messages"]] == ["user", "assistant"]
        assert client.get("/policies", headers=auth).json()["count"] == 1

    def test_continue_chat(self, client, auth, api_model):
        api_model.script(reply("one"), reply("two"))
        first = client.post("/agent", json={"input": "hi"}, headers=auth).json()
        second = client.post(
            "/agent", json={"input": "again", "chat_id": first["chat_id"]}, headers=auth,
        ).json()
        assert second["chat_id"] == first["chat_id"]
        chat = client.get(f"/chats/{first['chat_id']}", headers=auth).json()
        assert len(chat["messages"]) == 4

    def test_model_failure_is_generic_500(self, client, auth, api_model):
        api_model.error = RuntimeError("secret provider detail")
        response = client.post("/agent", json={"input": "hi"}, headers=auth)
        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}

    def test_empty_input(self, client, auth):
        assert client.post("/agent", json={"input": ""}, headers=auth).status_code == 422

    def test_foreign_chat(self, client, auth, other_auth, api_model):
        api_model.script(reply("hi"))
        chat_id = client.post("/agent", json={"input": "hello"}, headers=auth).json()["chat_id"]
        response = client.post(
            "/agent", json={"input": "peek", "chat_id": chat_id}, headers=other_auth,
        )
        assert response.status_code == 404


class TestChats:
    def test_crud(self, client, auth):
        created = client.post("/chats", json={"title": "Claims"}, headers=auth)
        assert created.status_code == 201
        chat_id = created.json()["conversation_id"]

        added = client.post(
            f"/chats/{chat_id}/messages",
            json={"role": "user", "content": "How do I claim?"},
            headers=auth,
        )
        assert added.status_code == 201

        renamed = client.patch(f"/chats/{chat_id}", json={"title": "Claims help"}, headers=auth)
        assert renamed.json()["title"] == "Claims help"

        listed = client.get("/chats", headers=auth).json()
        assert [c["title"] for c in listed] == ["Claims help"]

        assert client.delete(f"/chats/{chat_id}", headers=auth).status_code == 204
        assert client.get(f"/chats/{chat_id}", headers=auth).status_code == 404

    def test_other_user_cannot_read(self, client, auth, other_auth):
        chat_id = client.post("/chats", json={}, headers=auth).json()["conversation_id"]
        assert client.get(f"/chats/{chat_id}", headers=other_auth).status_code == 404
        assert client.delete(f"/chats/{chat_id}", headers=other_auth).status_code == 403

    def test_invalid_role(self, client, auth):
        chat_id = client.post("/chats", json={}, headers=auth).json()["conversation_id"]
        response = client.post(
            f"/chats/{chat_id}/messages", json={"role": "system", "content": "x"}, headers=auth,
        )
        assert response.status_code == 422


class TestDocuments:
    def test_rejects_non_pdf(self, client, auth):
        response = client.post(
            "/documents/upload",
            files={"file": ("notes.txt", b"plain text", "text/plain")},
            headers=auth,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Only PDF files are allowed."
