"""Fixtures for API tests: a client wired to a fresh in-memory container."""

import json

import pytest
from fastapi.testclient import TestClient

from api.app import app
from tests.conftest import sign_relay_body


@pytest.fixture
def client(container):
    """Create a test client for the API."""
    return TestClient(app)


@pytest.fixture
def register_user(client):
    """Register and log in a user; returns ``(user_id, auth_headers)``."""

    def _register(email: str = "alice@ledgerly.io", password: str = "correct-horse-1"):
        response = client.post("/api/users/register", json={"email": email, "password": password})
        assert response.status_code == 201, response.text
        login = client.post("/api/users/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        return response.json()["id"], {"Authorization": f"Bearer {login.json()['access_token']}"}

    return _register


@pytest.fixture
def relay_post(client):
    """POST a relay-signed JSON body, optionally on behalf of a binding."""

    def _post(path: str, payload: dict, binding_id: str = None):
        body = json.dumps(payload).encode("utf-8")
        headers = {"Content-Type": "application/json", "X-Relay-Signature": sign_relay_body(body)}
        if binding_id:
            headers["X-Chat-Binding"] = binding_id
        return client.post(path, content=body, headers=headers)

    return _post


@pytest.fixture
def relay_get(client):
    """GET with a relay signature over the empty body."""

    def _get(path: str, binding_id: str):
        headers = {"X-Relay-Signature": sign_relay_body(b""), "X-Chat-Binding": binding_id}
        return client.get(path, headers=headers)

    return _get


@pytest.fixture
def bind_chat(client, relay_post):
    """Run the whole bind flow for ``headers``' user and return the binding JSON."""

    def _bind(headers: dict, group_id: str, chat_id: str = "-100123"):
        issued = relay_post("/api/chat-bind-requests", {"platform": "telegram", "external_chat_id": chat_id})
        assert issued.status_code == 201, issued.text
        request_id = issued.json()["request_id"]
        nonce = issued.json()["nonce"]

        claimed = client.post(f"/api/chat-bind-requests/{request_id}/claim", headers=headers)
        assert claimed.status_code == 200, claimed.text

        confirmed = client.post(
            "/api/chat-bindings/confirm",
            json={"request_id": request_id, "nonce": nonce, "group_id": group_id},
            headers=headers,
        )
        assert confirmed.status_code == 201, confirmed.text
        return confirmed.json()

    return _bind
