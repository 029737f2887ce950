import time

import jwt
import pytest

from auth import security
from auth.dependencies import get_optional_identity

from conftest import bearer, token_headers


def test_access_token_round_trip():
    token = security.build_access_token(user_id=7, username="mira")

    identity = security.identity_from_token(token)

    assert identity == security.Identity(user_id=7, username="mira")


def test_expired_token_is_rejected(monkeypatch):
    monkeypatch.setattr(security, "now_epoch_s", lambda: int(time.time()) - 3 * 3600)
    token = security.build_access_token(user_id=7, username="mira")

    with pytest.raises(security.AuthSecurityError, match="expired"):
        security.identity_from_token(token)


def test_non_access_token_is_rejected():
    token = jwt.encode({"sub": "7", "type": "refresh"}, security.jwt_secret(), algorithm="HS256")

    with pytest.raises(security.AuthSecurityError, match="not an access token"):
        security.decode_access_token(token)


def test_non_numeric_subject_is_rejected():
    token = jwt.encode({"sub": "mira", "type": "access"}, security.jwt_secret(), algorithm="HS256")

    with pytest.raises(security.AuthSecurityError, match="subject"):
        security.identity_from_token(token)


def test_password_hashing():
    hashed = security.hash_password("correct horse")

    assert security.verify_password("correct horse", hashed)
    assert not security.verify_password("wrong horse", hashed)
    assert not security.verify_password("correct horse", "not-a-bcrypt-hash")


@pytest.mark.asyncio
async def test_optional_identity():
    token = security.build_access_token(user_id=3, username="guest")

    assert await get_optional_identity(None) is None
    assert await get_optional_identity("Basic abc") is None
    assert await get_optional_identity("Bearer not-a-jwt") is None
    assert await get_optional_identity(f"Bearer {token}") == security.Identity(3, "guest")


@pytest.mark.parametrize(
    "header",
    [None, "Bearer", "Token abc", "Bearer not-a-jwt"],
)
def test_protected_route_rejects_bad_credentials(client, store, header):
    headers = {"Authorization": header} if header is not None else {}

    resp = client.delete("/api/v1/music-posts/1/unlike", headers=headers)

    assert resp.status_code == 401
    assert "message" in resp.json()


def test_register_login_me(client, store):
    registered = client.post(
        "/api/v1/auth/register",
        json={"username": "mira", "email": "Mira@Example.org", "password": "hunter22!", "bio": "synths"},
    )
    assert registered.status_code == 201
    body = registered.json()
    assert body["user"]["username"] == "mira"
    assert body["user"]["bio"] == "synths"
    assert body["tokenType"] == "bearer"

    login = client.post("/api/v1/auth/login", json={"username": "mira", "password": "hunter22!"})
    assert login.status_code == 200
    token = login.json()["accessToken"]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["id"] == body["user"]["id"]


def test_register_conflicts(client, store):
    store.add_user("mira")

    same_name = client.post(
        "/api/v1/auth/register",
        json={"username": "mira", "email": "other@example.org", "password": "hunter22!"},
    )
    same_email = client.post(
        "/api/v1/auth/register",
        json={"username": "theo", "email": "MIRA@example.org", "password": "hunter22!"},
    )

    assert same_name.status_code == 409
    assert same_email.status_code == 409


def test_login_with_wrong_password(client, store):
    store.add_user("mira", password_hash=security.hash_password("right-password"))

    resp = client.post("/api/v1/auth/login", json={"username": "mira", "password": "wrong-password"})

    assert resp.status_code == 401
    assert resp.json() == {"message": "Invalid username or password."}


def test_me_for_deleted_account_is_404(client, store):
    resp = client.get("/api/v1/auth/me", headers=token_headers(808, "gone"))

    assert resp.status_code == 404


def test_me_requires_token(client, store):
    user = store.add_user("mira")

    assert client.get("/api/v1/auth/me").status_code == 401
    assert client.get("/api/v1/auth/me", headers=bearer(user)).status_code == 200


@pytest.mark.parametrize("password", ["p" * 100, "é" * 40])
def test_register_rejects_password_bcrypt_cannot_hash(client, store, password):
    resp = client.post(
        "/api/v1/auth/register",
        json={"username": "mira", "email": "mira@example.org", "password": password},
    )

    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation failed"
    assert store.users == {}


def test_hash_password_refuses_input_past_bcrypt_limit():
    with pytest.raises(security.AuthSecurityError):
        security.hash_password("p" * (security.MAX_PASSWORD_BYTES + 1))

    assert security.verify_password("p" * 100, security.hash_password("p" * 72)) is False
