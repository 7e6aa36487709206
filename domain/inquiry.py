"""
Domain: inbound form submissions that carry no payment.

Contact messages and registrations are hard-deleted by admins; community
signups are append-only.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ContactMessage:
    message_id: UUID
    name: str
    email: str
    subject: str
    message: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class Registration:
    registration_id: UUID
    event_id: UUID
    name: str
    email: str
    city: str
    state: str
    country: str
    phone: Optional[str] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class CommunitySignup:
    signup_id: UUID
    name: str
    email: str
    created_at: Optional[datetime] = None
