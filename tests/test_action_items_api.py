"""Tests for /api/action-items. Ownership flows through the parent meeting."""

from __future__ import annotations

import uuid

import pytest


@pytest.fixture
def make_item(client):
    async def _make(headers: dict, meeting_id: str, **overrides) -> dict:
        payload = {
            "meeting_id": meeting_id,
            "description": "Send the deck",
            "assignee": "Dana",
            "deadline": "2030-01-12T17:00:00Z",
        }
        payload.update(overrides)
        response = await client.post("/api/action-items", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.mark.asyncio
async def test_create_action_item(client, alice, make_meeting, make_item):
    """POST /api/action-items -> 201 pending item."""
    meeting = await make_meeting(alice["headers"])
    item = await make_item(alice["headers"], meeting["id"])
    assert item["status"] == "pending"
    assert item["meeting_id"] == meeting["id"]


@pytest.mark.asyncio
async def test_create_for_foreign_meeting(client, alice, bob, make_meeting):
    """Creating against another user's meeting -> 404 MEETING_NOT_FOUND."""
    meeting = await make_meeting(alice["headers"])
    response = await client.post(
        "/api/action-items",
        json={
            "meeting_id": meeting["id"],
            "description": "Sneaky",
            "assignee": "Mallory",
            "deadline": "2030-01-12T17:00:00Z",
        },
        headers=bob["headers"],
    )
    assert response.status_code == 404
    assert response.json()["error_code"] == "MEETING_NOT_FOUND"


@pytest.mark.asyncio
async def test_create_missing_deadline(client, alice, make_meeting):
    meeting = await make_meeting(alice["headers"])
    response = await client.post(
        "/api/action-items",
        json={"meeting_id": meeting["id"], "description": "x", "assignee": "Dana"},
        headers=alice["headers"],
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_list_sorted_by_deadline(client, alice, bob, make_meeting, make_item):
    """Default ordering is deadline ascending; other users' items are hidden."""
    meeting = await make_meeting(alice["headers"])
    await make_item(alice["headers"], meeting["id"], description="Late", deadline="2030-03-01T00:00:00Z")
    await make_item(alice["headers"], meeting["id"], description="Early", deadline="2030-01-01T00:00:00Z")
    bob_meeting = await make_meeting(bob["headers"])
    await make_item(bob["headers"], bob_meeting["id"], description="Bob's")

    response = await client.get("/api/action-items", headers=alice["headers"])
    data = response.json()
    assert data["total_count"] == 2
    assert [i["description"] for i in data["action_items"]] == ["Early", "Late"]


@pytest.mark.asyncio
async def test_list_filters(client, alice, make_meeting, make_item):
    first = await make_meeting(alice["headers"])
    second = await make_meeting(alice["headers"])
    await make_item(alice["headers"], first["id"], assignee="Dana")
    await make_item(alice["headers"], first["id"], assignee="Eli", status="completed")
    await make_item(
        alice["headers"], second["id"], assignee="Dana", deadline="2030-06-01T00:00:00Z"
    )

    response = await client.get(
        "/api/action-items", params={"meeting_id": first["id"]}, headers=alice["headers"]
    )
    assert response.json()["total_count"] == 2

    response = await client.get(
        "/api/action-items",
        params={"assignee": "Dana", "status": "pending"},
        headers=alice["headers"],
    )
    assert response.json()["total_count"] == 2

    response = await client.get(
        "/api/action-items",
        params={"deadline_after": "2030-02-01T00:00:00Z"},
        headers=alice["headers"],
    )
    assert response.json()["total_count"] == 1

    response = await client.get(
        "/api/action-items",
        params={"deadline_before": "2030-02-01T00:00:00Z"},
        headers=alice["headers"],
    )
    assert response.json()["total_count"] == 2


@pytest.mark.asyncio
async def test_update_status(client, alice, make_meeting, make_item):
    meeting = await make_meeting(alice["headers"])
    item = await make_item(alice["headers"], meeting["id"])
    response = await client.put(
        f"/api/action-items/{item['id']}",
        json={"status": "completed", "comments": "Sent Friday"},
        headers=alice["headers"],
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert data["comments"] == "Sent Friday"


@pytest.mark.asyncio
async def test_update_empty_body(client, alice, make_meeting, make_item):
    meeting = await make_meeting(alice["headers"])
    item = await make_item(alice["headers"], meeting["id"])
    response = await client.put(
        f"/api/action-items/{item['id']}", json={}, headers=alice["headers"]
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "NO_UPDATES"


@pytest.mark.asyncio
async def test_foreign_item_is_not_found(client, alice, bob, make_meeting, make_item):
    meeting = await make_meeting(alice["headers"])
    item = await make_item(alice["headers"], meeting["id"])
    for method in ("get", "delete"):
        response = await getattr(client, method)(
            f"/api/action-items/{item['id']}", headers=bob["headers"]
        )
        assert response.status_code == 404
        assert response.json()["error_code"] == "ACTION_ITEM_NOT_FOUND"


@pytest.mark.asyncio
async def test_delete_action_item(client, alice, make_meeting, make_item):
    meeting = await make_meeting(alice["headers"])
    item = await make_item(alice["headers"], meeting["id"])
    response = await client.delete(f"/api/action-items/{item['id']}", headers=alice["headers"])
    assert response.status_code == 204

    response = await client.get(f"/api/action-items/{item['id']}", headers=alice["headers"])
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_unknown_item(client, alice):
    response = await client.get(f"/api/action-items/{uuid.uuid4()}", headers=alice["headers"])
    assert response.status_code == 404
