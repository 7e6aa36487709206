"""
Tests for `repositories/ticket_repository.py`.

Covers contract rules:
- Overlapping reservations never sell past an event's capacity.
- The store function takes the event row lock before counting.
- A payment intent links to at most one booking.
- Only a reservation without an intent can be cancelled unlinked.
"""

from __future__ import annotations

import re
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from uuid import uuid4

import pytest

from domain.errors import DuplicateRecordError, InvalidStatusTransitionError, NotFoundError
from domain.ticket import Customer
from repositories import ticket_repository

SCHEMA = Path(__file__).parent.parent / "sql" / "schema.sql"

ADA = Customer(
    name="Ada Lovelace",
    email="ada@example.org",
    phone="+15551234567",
    city="London",
    state="Greater London",
    country="United Kingdom",
)


def _reserve(event, quantity=1):
    return ticket_repository.reserve_tickets(
        event_id=event.event_id, customer=ADA, quantity=quantity, unit_price=2500
    )


def test_overlapping_reservations_never_oversell(store, make_event) -> None:
    event = make_event(capacity=5)
    start = threading.Barrier(10)

    def reserve_together(_):
        start.wait()
        return _reserve(event)

    with ThreadPoolExecutor(max_workers=10) as pool:
        results = list(pool.map(reserve_together, range(10)))

    won = [result for result in results if result.success]
    lost = [result for result in results if not result.success]
    assert len(won) == 5
    assert {result.error_code for result in lost} == {"INSUFFICIENT_CAPACITY"}
    assert {result.available for result in lost} == {0}
    assert sum(row["quantity"] for row in store.rows("ticket_bookings")) == 5


def test_reserve_function_locks_event_before_counting() -> None:
    sql = SCHEMA.read_text(encoding="utf-8").lower()
    body = sql[sql.index("function reserve_event_tickets"):]
    body = body[: body.index("$$;")]

    lock = re.search(r"from events\s+where id = p_event_id\s+for update", body)
    count = body.index("sum(quantity)")
    insert = body.index("insert into ticket_bookings")
    assert lock is not None
    assert lock.start() < count < insert
    assert "status in ('reserved', 'confirmed')" in body


def test_full_event_reports_remaining_tickets(store, make_event) -> None:
    event = make_event(capacity=3)
    _reserve(event, quantity=2)

    result = _reserve(event, quantity=2)

    assert not result.success
    assert result.error_code == "INSUFFICIENT_CAPACITY"
    assert result.available == 1


def test_intent_is_attached_to_a_booking_only_once(store, make_event) -> None:
    booking = _reserve(make_event()).booking
    ticket_repository.attach_payment_intent(booking.booking_id, "pi_1", "secret", None)

    with pytest.raises(DuplicateRecordError):
        ticket_repository.attach_payment_intent(booking.booking_id, "pi_2", "secret", None)


def test_attach_intent_to_missing_booking(store) -> None:
    with pytest.raises(NotFoundError):
        ticket_repository.attach_payment_intent(uuid4(), "pi_1", "secret", None)


def test_cancelled_reservation_cannot_take_an_intent(store, make_event) -> None:
    booking = _reserve(make_event()).booking
    [cancelled] = ticket_repository.cancel_unlinked_reservation(booking.booking_id)

    with pytest.raises(InvalidStatusTransitionError):
        ticket_repository.attach_payment_intent(booking.booking_id, "pi_1", "secret", None)
    assert cancelled.payment_intent_id is None
    assert ticket_repository.cancel_unlinked_reservation(booking.booking_id) == []
