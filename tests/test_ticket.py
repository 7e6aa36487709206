"""
Tests for `domain/ticket.py`.

Covers contract rules:
- quantity is between 1 and 10, unit_price is positive.
- total_amount is always quantity x unit_price.
- A booking without a payment intent is unpaid, and reserved or cancelled.
- ticket_number is TKT- plus the last six hex chars of the id.
- Bookings are immutable (frozen).
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest

from domain.payment_status import TicketPaymentStatus, TicketStatus
from domain.ticket import Customer, TicketBooking

BOOKING_ID = UUID("00000000-0000-0000-0000-00000a1b2c3d")
EVENT_ID = UUID("00000000-0000-0000-0000-000000000001")
CUSTOMER = Customer(name="Ada Lovelace", email="ada@example.org", phone="+15551234567")


def _booking(**overrides) -> TicketBooking:
    fields = dict(
        booking_id=BOOKING_ID,
        event_id=EVENT_ID,
        customer=CUSTOMER,
        quantity=3,
        unit_price=2500,
    )
    fields.update(overrides)
    return TicketBooking(**fields)


@pytest.mark.parametrize("quantity, unit_price", [(1, 100), (3, 2500), (10, 1999)])
def test_total_amount_is_quantity_times_unit_price(quantity, unit_price) -> None:
    """Verify total_amount is derived, never stored."""

    booking = _booking(quantity=quantity, unit_price=unit_price)
    assert booking.total_amount == quantity * unit_price


@pytest.mark.parametrize("quantity", [0, -1, 11])
def test_quantity_out_of_range_is_rejected(quantity) -> None:
    """Verify quantity must be 1..10."""

    with pytest.raises(ValueError):
        _booking(quantity=quantity)


def test_unit_price_must_be_positive() -> None:
    """Verify free tickets cannot be booked."""

    with pytest.raises(ValueError):
        _booking(unit_price=0)


def test_booking_without_intent_stays_unpaid() -> None:
    """Verify status cannot advance before a payment intent exists."""

    with pytest.raises(ValueError):
        _booking(status=TicketStatus.CONFIRMED)
    with pytest.raises(ValueError):
        _booking(payment_status=TicketPaymentStatus.PAID)
    with pytest.raises(ValueError):
        _booking(status=TicketStatus.CANCELLED, payment_status=TicketPaymentStatus.FAILED)

    released = _booking(status=TicketStatus.CANCELLED)
    assert released.payment_status == TicketPaymentStatus.PENDING

    confirmed = _booking(
        payment_intent_id="pi_123",
        status=TicketStatus.CONFIRMED,
        payment_status=TicketPaymentStatus.PAID,
    )
    assert confirmed.status == TicketStatus.CONFIRMED


def test_ticket_number_uses_last_six_hex_chars() -> None:
    """Verify the human-readable ticket reference."""

    assert _booking().ticket_number == "TKT-1B2C3D"


def test_timestamps_must_be_utc() -> None:
    """Verify created_at enforces UTC."""

    with pytest.raises(ValueError):
        _booking(created_at=datetime(2025, 1, 1))
    with pytest.raises(ValueError):
        _booking(created_at=datetime(2025, 1, 1, tzinfo=timezone(timedelta(hours=-5))))


def test_booking_is_immutable() -> None:
    """Verify bookings are frozen."""

    booking = _booking()
    with pytest.raises(FrozenInstanceError):
        booking.quantity = 5  # type: ignore[misc]
