"""
Domain: events.

Events are soft-deleted: ``is_active`` flips to False and the row stays,
so bookings and registrations keep their reference.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from .money import parse_ticket_cost, to_minor_units
from .time import require_utc_timestamp


@dataclass(frozen=True, slots=True)
class Event:
    event_id: UUID
    title: str
    date: str
    time: str
    place: str
    desc: str
    action_type: str
    cost: str
    ticket_cost: Optional[float] = None
    capacity: Optional[int] = None
    highlights: List[str] = field(default_factory=list)
    special_gift: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.capacity is not None and self.capacity < 0:
            raise ValueError("capacity cannot be negative")
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)

    @property
    def has_capacity_limit(self) -> bool:
        return bool(self.capacity)

    def unit_price_minor(self) -> Optional[int]:
        """
        Ticket price in minor units.

        Prefers ``ticket_cost``; older events only carry the display ``cost``
        string, which is parsed instead. Returns None for free events.
        """

        price = self.ticket_cost
        if price is None:
            price = parse_ticket_cost(self.cost)
        if price is None:
            return None
        minor = to_minor_units(price)
        return minor if minor > 0 else None
