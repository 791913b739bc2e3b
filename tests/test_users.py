"""Tests for /api/users/me profile, preferences, and password endpoints."""

from __future__ import annotations

import pytest


@pytest.mark.asyncio
async def test_get_me(client, alice):
    """GET /api/users/me -> 200 current user."""
    response = await client.get("/api/users/me", headers=alice["headers"])
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "alice@example.com"
    assert data["is_active"] is True
    assert "password_hash" not in data


@pytest.mark.asyncio
async def test_update_me(client, alice):
    """PUT /api/users/me -> 200 with the new name."""
    response = await client.put(
        "/api/users/me",
        json={"full_name": "Alice J.", "profile_picture_url": "https://cdn.example.com/a.png"},
        headers=alice["headers"],
    )
    assert response.status_code == 200
    data = response.json()
    assert data["full_name"] == "Alice J."
    assert data["profile_picture_url"] == "https://cdn.example.com/a.png"


@pytest.mark.asyncio
async def test_update_me_empty_body(client, alice):
    """PUT with nothing to change -> 400 NO_UPDATES."""
    response = await client.put("/api/users/me", json={}, headers=alice["headers"])
    assert response.status_code == 400
    assert response.json()["error_code"] == "NO_UPDATES"


@pytest.mark.asyncio
async def test_update_me_ignores_email(client, alice):
    """Email is not an updatable profile field."""
    response = await client.put(
        "/api/users/me",
        json={"email": "hijack@example.com", "full_name": "Alice"},
        headers=alice["headers"],
    )
    assert response.status_code == 200
    assert response.json()["email"] == "alice@example.com"


@pytest.mark.asyncio
async def test_preferences_default_true(client, alice):
    """Registration creates preferences with every toggle on."""
    response = await client.get("/api/users/me/preferences", headers=alice["headers"])
    assert response.status_code == 200
    data = response.json()
    assert data["email_notifications"] is True
    assert data["push_notifications"] is True
    assert data["follow_up_reminders"] is True


@pytest.mark.asyncio
async def test_update_preferences_partial(client, alice):
    response = await client.put(
        "/api/users/me/preferences",
        json={"push_notifications": False},
        headers=alice["headers"],
    )
    assert response.status_code == 200
    data = response.json()
    assert data["push_notifications"] is False
    assert data["email_notifications"] is True


@pytest.mark.asyncio
async def test_update_preferences_empty_body(client, alice):
    response = await client.put(
        "/api/users/me/preferences", json={}, headers=alice["headers"]
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "NO_UPDATES"


@pytest.mark.asyncio
async def test_preferences_missing(client, store, alice):
    store.users.preferences.clear()
    response = await client.get("/api/users/me/preferences", headers=alice["headers"])
    assert response.status_code == 404
    assert response.json()["error_code"] == "PREFERENCES_NOT_FOUND"


# ── Password Change ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_change_password(client, alice):
    """PUT /api/users/me/password -> 200, old password stops working."""
    response = await client.put(
        "/api/users/me/password",
        json={"current_password": alice["password"], "new_password": "fresh-password"},
        headers=alice["headers"],
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Password updated successfully"

    old = await client.post(
        "/api/auth/login",
        json={"email": "alice@example.com", "password": alice["password"]},
    )
    assert old.status_code == 401
    new = await client.post(
        "/api/auth/login",
        json={"email": "alice@example.com", "password": "fresh-password"},
    )
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_change_password_wrong_current(client, alice):
    response = await client.put(
        "/api/users/me/password",
        json={"current_password": "not-my-password", "new_password": "fresh-password"},
        headers=alice["headers"],
    )
    assert response.status_code == 401
    assert response.json()["error_code"] == "INVALID_CURRENT_PASSWORD"


@pytest.mark.asyncio
async def test_change_password_missing_fields(client, alice):
    response = await client.put(
        "/api/users/me/password",
        json={"new_password": "fresh-password"},
        headers=alice["headers"],
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "MISSING_REQUIRED_FIELDS"


@pytest.mark.asyncio
async def test_change_password_too_short(client, alice):
    response = await client.put(
        "/api/users/me/password",
        json={"current_password": alice["password"], "new_password": "short"},
        headers=alice["headers"],
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "PASSWORD_TOO_SHORT"
