"""Tests for the authentication endpoints and the bearer-token dependency.

Runs against the real app with InMemoryUserRepository from conftest, so
passwords are really hashed with bcrypt and tokens really signed.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from src.meetassist.core.security import create_access_token, create_refresh_token


# ── Register ─────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_register_returns_user_and_tokens(client, store):
    """POST /api/auth/register -> 201 with user, auth_token, refresh_token."""
    response = await client.post(
        "/api/auth/register",
        json={"email": "New.User@Example.com", "full_name": "New User", "password": "s3cretpass"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["user"]["email"] == "new.user@example.com"
    assert data["user"]["full_name"] == "New User"
    assert data["auth_token"]
    assert data["refresh_token"]
    assert "password_hash" not in data["user"]

    user_id = uuid.UUID(data["user"]["id"])
    assert store.users.hashes[user_id] != "s3cretpass"
    assert user_id in store.users.preferences


@pytest.mark.asyncio
async def test_register_duplicate_email_conflicts(client, alice):
    """Registering an existing email -> 409 USER_ALREADY_EXISTS."""
    response = await client.post(
        "/api/auth/register",
        json={"email": "ALICE@example.com", "full_name": "Other", "password": "password123"},
    )
    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["error_code"] == "USER_ALREADY_EXISTS"
    assert "timestamp" in body


@pytest.mark.asyncio
async def test_register_short_password_is_validation_error(client):
    """Password under 8 characters -> 400 VALIDATION_ERROR."""
    response = await client.post(
        "/api/auth/register",
        json={"email": "x@example.com", "full_name": "X", "password": "short"},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "VALIDATION_ERROR"
    assert body["details"]


@pytest.mark.asyncio
async def test_register_invalid_email_is_validation_error(client):
    response = await client.post(
        "/api/auth/register",
        json={"email": "not-an-email", "full_name": "X", "password": "password123"},
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"


# ── Login ────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_login_success(client, alice):
    """POST /api/auth/login with correct credentials -> 200 with tokens."""
    response = await client.post(
        "/api/auth/login",
        json={"email": "alice@example.com", "password": alice["password"]},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == alice["user"]["id"]
    assert data["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_login_wrong_password(client, alice):
    """Wrong password -> 401 INVALID_CREDENTIALS."""
    response = await client.post(
        "/api/auth/login",
        json={"email": "alice@example.com", "password": "wrong-password"},
    )
    assert response.status_code == 401
    assert response.json()["error_code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_login_unknown_email_matches_wrong_password(client):
    response = await client.post(
        "/api/auth/login",
        json={"email": "ghost@example.com", "password": "whatever123"},
    )
    assert response.status_code == 401
    assert response.json()["error_code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_login_missing_fields(client):
    """Missing password -> 400 MISSING_REQUIRED_FIELDS."""
    response = await client.post("/api/auth/login", json={"email": "alice@example.com"})
    assert response.status_code == 400
    assert response.json()["error_code"] == "MISSING_REQUIRED_FIELDS"


@pytest.mark.asyncio
async def test_login_inactive_user_rejected(client, store, alice):
    user_id = uuid.UUID(alice["user"]["id"])
    await store.users.update_user(user_id, {"is_active": False})
    response = await client.post(
        "/api/auth/login",
        json={"email": "alice@example.com", "password": alice["password"]},
    )
    assert response.status_code == 401
    assert response.json()["error_code"] == "INVALID_CREDENTIALS"


# ── Refresh ──────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_refresh_issues_new_tokens(client, alice):
    """POST /api/auth/refresh with a refresh token -> 200 new pair."""
    response = await client.post(
        "/api/auth/refresh", json={"refresh_token": alice["refresh_token"]}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == alice["user"]["id"]
    assert data["auth_token"]


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client, alice):
    """An access token is not accepted as a refresh token -> 403."""
    response = await client.post(
        "/api/auth/refresh", json={"refresh_token": alice["auth_token"]}
    )
    assert response.status_code == 403
    assert response.json()["error_code"] == "AUTH_TOKEN_INVALID"


@pytest.mark.asyncio
async def test_refresh_for_deleted_user(client):
    token = create_refresh_token({"sub": str(uuid.uuid4()), "email": "gone@example.com"})
    response = await client.post("/api/auth/refresh", json={"refresh_token": token})
    assert response.status_code == 401
    assert response.json()["error_code"] == "AUTH_TOKEN_INVALID"


# ── Password Reset ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_password_reset_flow(client, store, alice):
    """Request a reset token, use it once, then log in with the new password."""
    response = await client.post(
        "/api/auth/password-reset", json={"email": "alice@example.com"}
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Password reset email sent"

    [token] = list(store.users.reset_tokens)
    reset = store.users.reset_tokens[token]
    assert reset.expires_at > datetime.now(timezone.utc) + timedelta(minutes=55)

    response = await client.post(
        f"/api/auth/password-reset/{token}", json={"new_password": "brand-new-pass"}
    )
    assert response.status_code == 200
    assert token not in store.users.reset_tokens

    # Token is single-use
    response = await client.post(
        f"/api/auth/password-reset/{token}", json={"new_password": "another-pass"}
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_TOKEN"

    response = await client.post(
        "/api/auth/login",
        json={"email": "alice@example.com", "password": "brand-new-pass"},
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_password_reset_unknown_email(client):
    response = await client.post(
        "/api/auth/password-reset", json={"email": "nobody@example.com"}
    )
    assert response.status_code == 404
    assert response.json()["error_code"] == "USER_NOT_FOUND"


@pytest.mark.asyncio
async def test_password_reset_expired_token(client, store, alice):
    user_id = uuid.UUID(alice["user"]["id"])
    await store.users.create_reset_token(
        user_id, "expired-token", datetime.now(timezone.utc) - timedelta(minutes=1)
    )
    response = await client.post(
        "/api/auth/password-reset/expired-token", json={"new_password": "brand-new-pass"}
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_password_reset_short_password(client):
    response = await client.post(
        "/api/auth/password-reset/any-token", json={"new_password": "short"}
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "PASSWORD_TOO_SHORT"


# ── Bearer Dependency ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_protected_route_requires_token(client):
    """No Authorization header -> 401 AUTH_TOKEN_REQUIRED."""
    response = await client.get("/api/users/me")
    assert response.status_code == 401
    assert response.json()["error_code"] == "AUTH_TOKEN_REQUIRED"


@pytest.mark.asyncio
async def test_protected_route_rejects_garbage_token(client):
    """Undecodable token -> 403 AUTH_TOKEN_INVALID."""
    response = await client.get(
        "/api/users/me", headers={"Authorization": "Bearer not.a.jwt"}
    )
    assert response.status_code == 403
    assert response.json()["error_code"] == "AUTH_TOKEN_INVALID"


@pytest.mark.asyncio
async def test_protected_route_rejects_refresh_token(client, alice):
    response = await client.get(
        "/api/users/me",
        headers={"Authorization": f"Bearer {alice['refresh_token']}"},
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_protected_route_rejects_expired_token(client, alice):
    token = create_access_token(
        {"sub": alice["user"]["id"], "email": "alice@example.com"},
        expires_delta=timedelta(seconds=-10),
    )
    response = await client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_protected_route_unknown_user(client):
    """Valid signature for a user that does not exist -> 401."""
    token = create_access_token({"sub": str(uuid.uuid4()), "email": "gone@example.com"})
    response = await client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["error_code"] == "AUTH_TOKEN_INVALID"
