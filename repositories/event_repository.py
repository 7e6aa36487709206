"""
Event repository (persistence).

Provides *only* persistence operations for the Event domain entity.
Deletion is soft: `deactivate_event` flips `is_active` and keeps the row.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID, uuid4

from domain.errors import PersistenceError
from domain.event import Event
from domain.time import utc_now
from repositories.client import execute, get_supabase, rows
from repositories.timestamps import parse_optional_datetime

_EVENTS_TABLE: str = "events"


def _row_to_event(row: Mapping[str, Any]) -> Event:
    """Convert a Supabase row into an Event."""

    ticket_cost = row.get("ticket_cost")
    capacity = row.get("capacity")
    return Event(
        event_id=UUID(str(row["id"])),
        title=str(row["title"]),
        date=str(row["date"]),
        time=str(row["time"]),
        place=str(row["place"]),
        desc=str(row["description"]),
        action_type=str(row["action_type"]),
        cost=str(row.get("cost") or ""),
        ticket_cost=float(ticket_cost) if ticket_cost is not None else None,
        capacity=int(capacity) if capacity is not None else None,
        highlights=list(row.get("highlights") or []),
        special_gift=row.get("special_gift"),
        image_url=row.get("image_url"),
        is_active=bool(row.get("is_active", True)),
        created_at=parse_optional_datetime(row.get("created_at")),
        updated_at=parse_optional_datetime(row.get("updated_at")),
    )


def _event_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Map editable event attributes to column names."""

    return {
        "title": fields["title"],
        "date": fields["date"],
        "time": fields["time"],
        "place": fields["place"],
        "description": fields["desc"],
        "action_type": fields["action_type"],
        "cost": fields["cost"],
        "ticket_cost": fields.get("ticket_cost"),
        "capacity": fields.get("capacity"),
        "highlights": list(fields.get("highlights") or []),
        "special_gift": fields.get("special_gift"),
    }


def create_event(fields: Mapping[str, Any]) -> Event:
    """
    Insert a new event.

    Args:
        fields: title, date, time, place, desc, action_type, cost and the
            optional ticket_cost, capacity, highlights, special_gift
    """

    now = utc_now().isoformat()
    payload = {
        "id": str(uuid4()),
        **_event_fields(fields),
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }
    response = execute(get_supabase().table(_EVENTS_TABLE).insert(payload), "create event")
    return _row_to_event(rows(response)[0] if rows(response) else payload)


def get_event_by_id(event_id: UUID) -> Optional[Event]:
    """Fetch an event regardless of its active flag."""

    response = execute(
        get_supabase().table(_EVENTS_TABLE).select("*").eq("id", str(event_id)).limit(1),
        "get event",
    )
    found = rows(response)
    return _row_to_event(found[0]) if found else None


def list_events(*, include_inactive: bool = False) -> List[Event]:
    """List events, newest first. Public listings exclude soft-deleted events."""

    query = get_supabase().table(_EVENTS_TABLE).select("*")
    if not include_inactive:
        query = query.eq("is_active", True)
    response = execute(query.order("created_at", desc=True), "list events")
    return [_row_to_event(row) for row in rows(response)]


def update_event(event_id: UUID, fields: Mapping[str, Any]) -> Optional[Event]:
    """Replace an event's editable attributes. Returns None if it does not exist."""

    payload = {**_event_fields(fields), "updated_at": utc_now().isoformat()}
    response = execute(
        get_supabase().table(_EVENTS_TABLE).update(payload).eq("id", str(event_id)),
        "update event",
    )
    updated = rows(response)
    return _row_to_event(updated[0]) if updated else None


def set_event_image(event_id: UUID, image_url: str) -> Optional[Event]:
    payload = {"image_url": image_url, "updated_at": utc_now().isoformat()}
    response = execute(
        get_supabase().table(_EVENTS_TABLE).update(payload).eq("id", str(event_id)),
        "update event image",
    )
    updated = rows(response)
    return _row_to_event(updated[0]) if updated else None


def deactivate_event(event_id: UUID) -> bool:
    """Soft-delete an event. Returns False if it does not exist."""

    payload = {"is_active": False, "updated_at": utc_now().isoformat()}
    response = execute(
        get_supabase().table(_EVENTS_TABLE).update(payload).eq("id", str(event_id)),
        "delete event",
    )
    return bool(rows(response))


def upload_event_image(path: str, content: bytes, content_type: str, bucket: str) -> str:
    """Store an image in the event bucket and return its public URL."""

    storage = get_supabase().storage.from_(bucket)
    try:
        storage.upload(path, content, {"content-type": content_type})
    except Exception as e:
        raise PersistenceError(f"Failed to upload event image: {e}") from e
    return storage.get_public_url(path)


__all__ = [
    "create_event",
    "get_event_by_id",
    "list_events",
    "update_event",
    "set_event_image",
    "deactivate_event",
    "upload_event_image",
]
