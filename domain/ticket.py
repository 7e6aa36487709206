"""
Domain: event ticket bookings.

Contract rules implemented here:
- quantity is between 1 and MAX_TICKETS_PER_BOOKING.
- unit_price is in minor units and positive.
- total_amount is always quantity x unit_price. It is derived on every
  read and never carried as separate state, so it cannot go stale.
- A booking without a payment intent id is still ``reserved``/``pending``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional
from uuid import UUID

from .payment_status import TicketPaymentStatus, TicketStatus
from .time import require_utc_timestamp

MAX_TICKETS_PER_BOOKING = 10


@dataclass(frozen=True, slots=True)
class Customer:
    name: str
    email: str
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


@dataclass(frozen=True, slots=True)
class TicketBooking:
    booking_id: UUID
    event_id: UUID
    customer: Customer
    quantity: int
    unit_price: int
    currency: str = "usd"
    status: TicketStatus = TicketStatus.RESERVED
    payment_status: TicketPaymentStatus = TicketPaymentStatus.PENDING
    payment_intent_id: Optional[str] = None
    stripe_customer_id: Optional[str] = None
    payment_method: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not 1 <= self.quantity <= MAX_TICKETS_PER_BOOKING:
            raise ValueError(
                f"quantity must be between 1 and {MAX_TICKETS_PER_BOOKING}, got {self.quantity}"
            )
        if self.unit_price <= 0:
            raise ValueError("unit_price must be greater than 0")
        if self.payment_intent_id is None and (
            self.status not in (TicketStatus.RESERVED, TicketStatus.CANCELLED)
            or self.payment_status != TicketPaymentStatus.PENDING
        ):
            raise ValueError(
                "A booking without a payment intent must be unpaid and reserved or cancelled"
            )
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)

    @property
    def total_amount(self) -> int:
        return self.quantity * self.unit_price

    @property
    def ticket_number(self) -> str:
        """Short human reference printed on confirmations, e.g. ``TKT-3F9A1C``."""

        return f"TKT-{self.booking_id.hex[-6:].upper()}"
