"""Auth API tests.

Learn: Tests cover:
1. Registration + duplicate prevention
2. Login → access token
3. Token validation endpoint
4. Protected /me endpoint, and the single uniform 401 for every kind
   of bad credential
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import delete

from conftest import bearer
from notekeep.auth.tokens import TokenCodec
from notekeep.config import settings
from notekeep.db.models import User

UNAUTHORIZED = {"detail": "Authentication required"}


async def _register(client, email=None, password="password_123", name="Test User"):
    email = email or f"test-{uuid.uuid4().hex[:8]}@example.com"
    r = await client.post(
        "/api/v1/auth/register",
        json={"email": email, "name": name, "password": password},
    )
    return email, r


async def _login(client, email, password="password_123"):
    return await client.post(
        "/api/v1/auth/login", json={"email": email, "password": password}
    )


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_user(client):
    email, r = await _register(client, name="Test User")
    assert r.status_code == 201
    user = r.json()
    assert user["email"] == email
    assert user["name"] == "Test User"
    assert "id" in user
    assert "password_hash" not in user


@pytest.mark.asyncio
async def test_register_duplicate_email_is_case_insensitive(client):
    email, r1 = await _register(client, email="dup@example.com")
    assert r1.status_code == 201

    _, r2 = await _register(client, email="  DUP@example.com ")
    assert r2.status_code == 409


@pytest.mark.asyncio
async def test_register_short_password(client):
    _, r = await _register(client, password="abc")
    assert r.status_code == 422


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_success(client):
    email, _ = await _register(client, name="Login User")

    r = await _login(client, email)
    assert r.status_code == 200
    body = r.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]
    assert body["expires_at"]
    assert body["user"]["email"] == email
    assert body["user"]["name"] == "Login User"


@pytest.mark.asyncio
async def test_login_wrong_password_and_unknown_user_look_the_same(client):
    email, _ = await _register(client)

    wrong = await _login(client, email, password="wrong_password")
    unknown = await _login(client, "nobody@example.com", password="whatever")

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json()


# ═══════════════════════════════════════════════════════════
# /me and the gate
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_with_token(client):
    email, _ = await _register(client, name="Me User")
    token = (await _login(client, email)).json()["access_token"]

    r = await client.get(
        "/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"}
    )
    assert r.status_code == 200
    assert r.json()["email"] == email
    assert r.json()["name"] == "Me User"


@pytest.mark.asyncio
async def test_me_without_token(client):
    r = await client.get("/api/v1/auth/me")
    assert r.status_code == 401
    assert r.json() == UNAUTHORIZED
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_every_bad_credential_gets_the_same_401(client, make_identity):
    alice = await make_identity()
    expired = TokenCodec.from_settings(settings).issue(
        str(alice.id), now=datetime.now(timezone.utc) - timedelta(days=1)
    ).token
    forged = TokenCodec(secret="attacker-secret-0123456789abcdefghij").issue(
        str(alice.id)
    ).token
    ghost = TokenCodec.from_settings(settings).issue(str(uuid.uuid4())).token

    bad_headers = [
        {},
        {"Authorization": "Basic dXNlcjpwYXNz"},
        {"Authorization": "Bearer not-a-token"},
        {"Authorization": f"Bearer {expired}"},
        {"Authorization": f"Bearer {forged}"},
        {"Authorization": f"Bearer {ghost}"},
    ]
    for headers in bad_headers:
        r = await client.get("/api/v1/auth/me", headers=headers)
        assert r.status_code == 401
        assert r.json() == UNAUTHORIZED


@pytest.mark.asyncio
async def test_token_of_deleted_account_is_rejected(client, db_session, make_identity):
    alice = await make_identity()
    headers = bearer(alice)
    assert (await client.get("/api/v1/auth/me", headers=headers)).status_code == 200

    await db_session.execute(delete(User).where(User.id == alice.id))
    await db_session.commit()

    r = await client.get("/api/v1/auth/me", headers=headers)
    assert r.status_code == 401
    assert r.json() == UNAUTHORIZED


# ═══════════════════════════════════════════════════════════
# Token validation
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_validate_token_valid(client):
    email, _ = await _register(client)
    token = (await _login(client, email)).json()["access_token"]

    r = await client.post("/api/v1/auth/validate-token", json={"token": token})
    assert r.status_code == 200
    assert r.json()["valid"] is True
    assert r.json()["user"]["email"] == email


@pytest.mark.asyncio
async def test_validate_token_invalid(client):
    r = await client.post("/api/v1/auth/validate-token", json={"token": "garbage"})
    assert r.status_code == 200
    assert r.json() == {"valid": False, "user": None}
