"""API tests for event management (admin CRUD, soft delete, image upload)."""

from __future__ import annotations

import json

EVENT = {
    "title": "Summer Concert",
    "date": "2026-07-04",
    "time": "7:00 PM",
    "place": "Riverside Park",
    "desc": "Open-air concert",
    "actionType": "Buy Tickets",
    "cost": "$30",
    "capacity": 100,
    "highlights": json.dumps(["Live music", "Food trucks"]),
}


def _create(client, headers, **overrides):
    return client.post("/api/events", json={**EVENT, **overrides}, headers=headers)


def test_create_event_derives_ticket_cost(client, admin_headers) -> None:
    response = _create(client, admin_headers)

    assert response.status_code == 200
    event = response.json()
    assert event["ticketCost"] == 30
    assert event["highlights"] == ["Live music", "Food trucks"]
    assert event["actionType"] == "Buy Tickets"
    assert event["isActive"] is True


def test_free_event_has_no_ticket_cost(client, admin_headers) -> None:
    event = _create(client, admin_headers, cost="Free", capacity=None).json()

    assert event["ticketCost"] is None
    assert event["capacity"] is None


def test_create_event_requires_admin(client, store) -> None:
    response = client.post("/api/events", json=EVENT)

    assert response.status_code == 401
    assert store.rows("events") == []


def test_create_event_validation(client, admin_headers) -> None:
    response = client.post(
        "/api/events",
        json={"title": "", "date": "2026-07-04", "capacity": 0},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["errors"] == {
        "title": "Title is required",
        "time": "Time is required",
        "place": "Place is required",
        "desc": "Description is required",
        "actionType": "Action type is required",
        "cost": "Cost is required",
        "capacity": "Capacity must be a positive number",
    }


def test_update_event(client, admin_headers) -> None:
    event_id = _create(client, admin_headers).json()["id"]

    response = client.put(
        f"/api/events/{event_id}", json={**EVENT, "cost": "$45 per person"}, headers=admin_headers
    )
    missing = client.put(
        "/api/events/00000000-0000-0000-0000-000000000000", json=EVENT, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["ticketCost"] == 45
    assert missing.status_code == 404


def test_delete_is_soft(client, admin_headers, store) -> None:
    event_id = _create(client, admin_headers).json()["id"]

    deleted = client.delete(f"/api/events/{event_id}", headers=admin_headers)

    assert deleted.json() == {"message": "Event deleted successfully"}
    assert client.get(f"/api/events/{event_id}").status_code == 404
    assert client.get("/api/events").json() == []
    everything = client.get("/api/events/admin", headers=admin_headers).json()
    assert [(e["id"], e["isActive"]) for e in everything] == [(event_id, False)]
    assert len(store.rows("events")) == 1


def test_public_listing_and_lookup(client, admin_headers) -> None:
    event_id = _create(client, admin_headers).json()["id"]

    listing = client.get("/api/events")
    single = client.get(f"/api/events/{event_id}")

    assert [e["id"] for e in listing.json()] == [event_id]
    assert single.json()["title"] == "Summer Concert"


def test_upload_event_image(client, admin_headers, store) -> None:
    event_id = _create(client, admin_headers).json()["id"]

    response = client.post(
        f"/api/events/{event_id}/image",
        files={"image": ("poster.PNG", b"\x89PNG\r\n", "image/png")},
        headers=admin_headers,
    )

    assert response.status_code == 200
    url = response.json()["imageUrl"]
    assert url.startswith(f"https://storage.test/event-images/{event_id}/")
    assert url.endswith(".png")
    assert list(store.storage.files.values()) == [b"\x89PNG\r\n"]


def test_upload_rejects_non_images(client, admin_headers, store) -> None:
    event_id = _create(client, admin_headers).json()["id"]

    response = client.post(
        f"/api/events/{event_id}/image",
        files={"image": ("notes.txt", b"hello", "text/plain")},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["errors"] == {"image": "Only image files are allowed"}
    assert store.storage.files == {}
