"""Auth endpoints: register, login, protected resource, account lifecycle."""
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from jose import jwt

from app.core.config import settings
from app.core.security import Identity, TokenConfig, TokenIssuer


def test_register_success(client: TestClient):
    r = client.post("/auth/register", json={"username": "  new-user-1  ", "password": "secure123"})
    assert r.status_code == 201
    j = r.json()
    assert j.get("username") == "new-user-1"
    assert isinstance(j.get("id"), int)
    assert "password" not in j and "hashed_password" not in j


def test_register_duplicate_conflict(client: TestClient):
    body = {"username": "dup-user", "password": "secure123"}
    assert client.post("/auth/register", json=body).status_code == 201
    r = client.post("/auth/register", json=body)
    assert r.status_code == 409
    assert r.json().get("error") == "Username already exists"


def test_register_validation(client: TestClient):
    r = client.post("/auth/register", json={"username": "", "password": "123"})
    assert r.status_code == 400
    assert r.json().get("status_code") == 400
    r = client.post("/auth/register", json={"username": "someone"})
    assert r.status_code == 400


def test_register_accepts_short_password_rejects_empty(client: TestClient):
    assert client.post("/auth/register", json={"username": "short-pw-user", "password": "pw1"}).status_code == 201
    r = client.post("/auth/register", json={"username": "empty-pw-user", "password": ""})
    assert r.status_code == 400


def test_login_success(client: TestClient):
    client.post("/auth/register", json={"username": "login-user", "password": "pass123456"})
    r = client.post("/auth/login", json={"username": "login-user", "password": "pass123456"})
    assert r.status_code == 200
    j = r.json()
    assert j.get("token_type") == "bearer"
    assert j.get("access_token")


def test_login_wrong_password_and_unknown_user_look_alike(client: TestClient):
    client.post("/auth/register", json={"username": "wrong-user", "password": "right123"})
    wrong = client.post("/auth/login", json={"username": "wrong-user", "password": "wrongpass"})
    unknown = client.post("/auth/login", json={"username": "no-such-user", "password": "right123"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json()["error"] == unknown.json()["error"]


def test_me_requires_auth(client: TestClient):
    r = client.get("/auth/me")
    assert r.status_code == 401
    assert r.headers.get("www-authenticate") == "Bearer"


def test_me_with_token(client: TestClient, account: dict):
    r = client.get("/auth/me", headers=account["headers"])
    assert r.status_code == 200
    assert r.json().get("username") == account["username"]
    assert r.json().get("id") == account["id"]


def test_end_to_end_alice(client: TestClient):
    assert client.post("/auth/register", json={"username": "alice", "password": "pw123"}).status_code == 201
    token = client.post("/auth/login", json={"username": "alice", "password": "pw123"}).json()["access_token"]

    assert client.get("/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 200
    assert client.get("/auth/me").status_code == 401

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"}).json()
    issuer = TokenIssuer(TokenConfig.from_settings(settings))
    expired = issuer.issue(
        Identity(id=me["id"], username="alice"),
        now=datetime.now(timezone.utc) - timedelta(minutes=settings.access_token_expire_minutes + 5),
    )
    assert client.get("/auth/me", headers={"Authorization": f"Bearer {expired}"}).status_code == 401


def test_tampered_token_rejected(client: TestClient, account: dict):
    token = account["token"]
    i = len(token) - 10
    tampered = token[:i] + ("A" if token[i] != "A" else "B") + token[i + 1 :]
    r = client.get("/auth/me", headers={"Authorization": f"Bearer {tampered}"})
    assert r.status_code == 401


def test_token_without_username_claim_rejected(client: TestClient, account: dict):
    exp = datetime.now(timezone.utc) + timedelta(minutes=5)
    token = jwt.encode({"sub": str(account["id"]), "exp": exp}, settings.secret_key, algorithm=settings.jwt_algorithm)
    r = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_token_for_deleted_user_rejected(client: TestClient, account: dict):
    r = client.post("/auth/delete-account", json={"password": account["password"]}, headers=account["headers"])
    assert r.status_code == 200
    assert client.get("/auth/me", headers=account["headers"]).status_code == 401
    r = client.post("/auth/login", json={"username": account["username"], "password": account["password"]})
    assert r.status_code == 401


def test_delete_account_wrong_password(client: TestClient, account: dict):
    r = client.post("/auth/delete-account", json={"password": "nope"}, headers=account["headers"])
    assert r.status_code == 401
    assert client.get("/auth/me", headers=account["headers"]).status_code == 200


def test_change_password(client: TestClient, account: dict):
    r = client.post(
        "/auth/change-password",
        json={"current_password": "wrong", "new_password": "brand-new-1"},
        headers=account["headers"],
    )
    assert r.status_code == 401
    r = client.post(
        "/auth/change-password",
        json={"current_password": account["password"], "new_password": "brand-new-1"},
        headers=account["headers"],
    )
    assert r.status_code == 200
    old = client.post("/auth/login", json={"username": account["username"], "password": account["password"]})
    assert old.status_code == 401
    new = client.post("/auth/login", json={"username": account["username"], "password": "brand-new-1"})
    assert new.status_code == 200
