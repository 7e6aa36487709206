"""
Inquiry repository (persistence).

Contact messages, event registrations and community signups. Admin
deletes here are hard deletes.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional
from uuid import UUID, uuid4

from domain.inquiry import CommunitySignup, ContactMessage, Registration
from domain.time import utc_now
from repositories.client import execute, get_supabase, rows
from repositories.timestamps import parse_optional_datetime

_CONTACT_TABLE: str = "contact_messages"
_REGISTRATIONS_TABLE: str = "registrations"
_SIGNUPS_TABLE: str = "community_signups"


def _row_to_contact(row: Mapping[str, Any]) -> ContactMessage:
    return ContactMessage(
        message_id=UUID(str(row["id"])),
        name=str(row["name"]),
        email=str(row["email"]),
        subject=str(row["subject"]),
        message=str(row["message"]),
        created_at=parse_optional_datetime(row.get("created_at")),
    )


def _row_to_registration(row: Mapping[str, Any]) -> Registration:
    return Registration(
        registration_id=UUID(str(row["id"])),
        event_id=UUID(str(row["event_id"])),
        name=str(row["name"]),
        email=str(row["email"]),
        city=str(row["city"]),
        state=str(row["state"]),
        country=str(row["country"]),
        phone=row.get("phone"),
        location=row.get("location"),
        created_at=parse_optional_datetime(row.get("created_at")),
    )


def _row_to_signup(row: Mapping[str, Any]) -> CommunitySignup:
    return CommunitySignup(
        signup_id=UUID(str(row["id"])),
        name=str(row["name"]),
        email=str(row["email"]),
        created_at=parse_optional_datetime(row.get("created_at")),
    )


def _insert(table: str, fields: Mapping[str, Any], action: str) -> Mapping[str, Any]:
    payload = {"id": str(uuid4()), **fields, "created_at": utc_now().isoformat()}
    response = execute(get_supabase().table(table).insert(payload), action)
    inserted = rows(response)
    return inserted[0] if inserted else payload


def _delete(table: str, record_id: UUID, action: str) -> bool:
    response = execute(get_supabase().table(table).delete().eq("id", str(record_id)), action)
    return bool(rows(response))


# ============================================================================
# Contact messages
# ============================================================================

def create_contact_message(name: str, email: str, subject: str, message: str) -> ContactMessage:
    row = _insert(
        _CONTACT_TABLE,
        {"name": name, "email": email, "subject": subject, "message": message},
        "save contact message",
    )
    return _row_to_contact(row)


def list_contact_messages() -> List[ContactMessage]:
    response = execute(
        get_supabase().table(_CONTACT_TABLE).select("*").order("created_at", desc=True),
        "list contact messages",
    )
    return [_row_to_contact(row) for row in rows(response)]


def delete_contact_message(message_id: UUID) -> bool:
    return _delete(_CONTACT_TABLE, message_id, "delete contact message")


# ============================================================================
# Registrations
# ============================================================================

def create_registration(fields: Mapping[str, Any]) -> Registration:
    """Insert a registration; ``fields`` holds event_id, name, email, city, state, country, phone, location."""

    row = _insert(_REGISTRATIONS_TABLE, {**fields, "event_id": str(fields["event_id"])}, "save registration")
    return _row_to_registration(row)


def list_registrations(event_id: Optional[UUID] = None) -> List[Registration]:
    query = get_supabase().table(_REGISTRATIONS_TABLE).select("*")
    if event_id is not None:
        query = query.eq("event_id", str(event_id))
    response = execute(query.order("created_at", desc=True), "list registrations")
    return [_row_to_registration(row) for row in rows(response)]


def delete_registration(registration_id: UUID) -> bool:
    return _delete(_REGISTRATIONS_TABLE, registration_id, "delete registration")


# ============================================================================
# Community signups
# ============================================================================

def create_community_signup(name: str, email: str) -> CommunitySignup:
    row = _insert(_SIGNUPS_TABLE, {"name": name, "email": email}, "save community signup")
    return _row_to_signup(row)


__all__ = [
    "create_contact_message",
    "list_contact_messages",
    "delete_contact_message",
    "create_registration",
    "list_registrations",
    "delete_registration",
    "create_community_signup",
]
