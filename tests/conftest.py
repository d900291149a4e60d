# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Environment variables are set before any app import because app.config
# builds its Settings at import time.
# =============================================================================

import os

os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["STORE_BACKEND"] = "memory"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["LOG_FILE"] = ""

import pytest
from fastapi.testclient import TestClient

from app.services.auth_service import AuthService
from app.services.memory_store import MemoryStore
from app.services.todo_service import TodoService
from main import create_app

PASSWORD = "correct horse battery"


# =============================================================================
# Service fixtures
# =============================================================================

@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def auth_service(store):
    return AuthService(store, expire_minutes=1440)


@pytest.fixture
def todo_service(store):
    return TodoService(store)


# =============================================================================
# API fixtures
# =============================================================================

@pytest.fixture
def app(store):
    return create_app(store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def register_and_login(client, email="ada@example.com", name="Ada"):
    """Register a user over HTTP and return (token, user)."""
    response = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": PASSWORD}
    )
    assert response.status_code == 201, response.text

    response = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    body = response.json()
    return body["token"], body["user"]


@pytest.fixture
def auth_headers(client):
    token, _ = register_and_login(client)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def login_user(client):
    def _login(email="ada@example.com", name="Ada"):
        return register_and_login(client, email=email, name=name)
    return _login
