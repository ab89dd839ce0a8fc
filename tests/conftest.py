"""Pytest fixtures: test client on an in-memory SQLite database, registered users, fakes."""
import os
import uuid

import pytest
from fastapi.testclient import TestClient

# Must be set before app is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_REGISTER_PER_MINUTE", "1000")
os.environ.setdefault("RATE_LIMIT_LOGIN", "1000/minute")
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "1000")
os.environ.setdefault("VAPID_PUBLIC_KEY", "BTestPublicKey-base64url")
os.environ.setdefault("VAPID_PRIVATE_KEY", "test-private-key")

from app.core.security import TokenConfig, TokenIssuer
from app.main import app
from app.services.auth import AuthService
from app.services.push import PushSubscriptionManager, VapidConfig
from app.stores.memory import MemorySubscriptionStore, MemoryUserStore


@pytest.fixture(scope="function")
def client():
    """TestClient; the lifespan creates the tables in the in-memory DB."""
    with TestClient(app) as c:
        yield c


def _register_and_login(client: TestClient, password: str = "pw123456") -> dict:
    username = f"user-{uuid.uuid4().hex[:10]}"
    r = client.post("/auth/register", json={"username": username, "password": password})
    assert r.status_code == 201, f"Register failed: {r.status_code} {r.text}"
    user = r.json()
    r = client.post("/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, f"Login failed: {r.status_code} {r.text}"
    token = r.json()["access_token"]
    return {
        "id": user["id"],
        "username": username,
        "password": password,
        "token": token,
        "headers": {"Authorization": f"Bearer {token}"},
    }


@pytest.fixture
def account(client: TestClient) -> dict:
    """A freshly registered user with a valid bearer token."""
    return _register_and_login(client)


@pytest.fixture
def other_account(client: TestClient) -> dict:
    return _register_and_login(client)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(TokenConfig(secret_key="unit-test-secret", expire_minutes=30))


@pytest.fixture
def user_store() -> MemoryUserStore:
    return MemoryUserStore()


@pytest.fixture
def sub_store() -> MemorySubscriptionStore:
    return MemorySubscriptionStore()


@pytest.fixture
def auth_service(user_store, sub_store, issuer) -> AuthService:
    return AuthService(user_store, issuer, subscriptions=sub_store, bcrypt_rounds=4)


@pytest.fixture
def vapid() -> VapidConfig:
    return VapidConfig(public_key="BPublicKeyForTests", private_key="private-key-for-tests", email="ops@example.com")


@pytest.fixture
def push_manager(sub_store, vapid) -> PushSubscriptionManager:
    return PushSubscriptionManager(sub_store, vapid)
