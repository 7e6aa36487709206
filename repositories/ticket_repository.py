"""
Ticket booking repository (persistence).

Reservations go through the `reserve_event_tickets` PostgreSQL function
(see sql/schema.sql), which in a single transaction:
- locks the event row (FOR UPDATE)
- sums quantities of reserved and confirmed bookings for the event
- inserts the booking only if the requested quantity still fits

so concurrent requests cannot oversell an event. `total_amount` is a
generated column (quantity * unit_price) and is never written from here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID, uuid4

from postgrest.exceptions import APIError

from domain.errors import (
    DuplicateRecordError,
    InvalidStatusTransitionError,
    NotFoundError,
    PersistenceError,
)
from domain.payment_status import TicketPaymentStatus, TicketStatus
from domain.ticket import Customer, TicketBooking
from domain.time import utc_now
from repositories.client import execute, get_supabase, rows
from repositories.timestamps import parse_optional_datetime

_BOOKINGS_TABLE: str = "ticket_bookings"
_RESERVE_FUNCTION: str = "reserve_event_tickets"


@dataclass(frozen=True, slots=True)
class ReservationResult:
    """Outcome of the atomic capacity check + insert."""

    success: bool
    booking: Optional[TicketBooking]
    available: Optional[int]
    error_code: Optional[str] = None


def _row_to_booking(row: Mapping[str, Any]) -> TicketBooking:
    """Convert a Supabase row into a TicketBooking."""

    return TicketBooking(
        booking_id=UUID(str(row["id"])),
        event_id=UUID(str(row["event_id"])),
        customer=Customer(
            name=str(row["customer_name"]),
            email=str(row["customer_email"]),
            phone=row.get("customer_phone"),
            city=row.get("customer_city"),
            state=row.get("customer_state"),
            country=row.get("customer_country"),
        ),
        quantity=int(row["quantity"]),
        unit_price=int(row["unit_price"]),
        currency=str(row.get("currency") or "usd"),
        status=TicketStatus(str(row["status"])),
        payment_status=TicketPaymentStatus(str(row.get("payment_status") or "pending")),
        payment_intent_id=row.get("payment_intent_id"),
        stripe_customer_id=row.get("stripe_customer_id"),
        payment_method=row.get("payment_method"),
        metadata=dict(row.get("metadata") or {}),
        created_at=parse_optional_datetime(row.get("created_at")),
        updated_at=parse_optional_datetime(row.get("updated_at")),
    )


def _booking_payload(
    event_id: UUID,
    customer: Customer,
    quantity: int,
    unit_price: int,
    currency: str,
    metadata: Optional[Mapping[str, str]],
) -> Dict[str, Any]:
    now = utc_now().isoformat()
    return {
        "id": str(uuid4()),
        "event_id": str(event_id),
        "customer_name": customer.name,
        "customer_email": customer.email,
        "customer_phone": customer.phone,
        "customer_city": customer.city,
        "customer_state": customer.state,
        "customer_country": customer.country,
        "quantity": quantity,
        "unit_price": unit_price,
        "currency": currency,
        "status": TicketStatus.RESERVED.value,
        "payment_status": TicketPaymentStatus.PENDING.value,
        "metadata": dict(metadata or {}),
        "created_at": now,
        "updated_at": now,
    }


def reserve_tickets(
    event_id: UUID,
    customer: Customer,
    quantity: int,
    unit_price: int,
    currency: str = "usd",
    metadata: Optional[Mapping[str, str]] = None,
) -> ReservationResult:
    """
    Atomically check capacity and insert a reserved booking.

    Returns:
        ReservationResult with the booking on success, or with
        ``available`` set to the remaining ticket count when the event is full.
    """

    payload = _booking_payload(event_id, customer, quantity, unit_price, currency, metadata)
    # Validates quantity/unit_price before the round-trip.
    _row_to_booking(payload)

    try:
        response = get_supabase().rpc(
            _RESERVE_FUNCTION,
            {"p_event_id": str(event_id), "p_booking": payload},
        ).execute()
    except APIError as e:
        raise PersistenceError(f"Failed to reserve tickets: {e}") from e

    error = getattr(response, "error", None)
    if error:
        raise PersistenceError(f"Failed to reserve tickets: {error}")

    result = getattr(response, "data", None) or {}
    if result.get("success"):
        return ReservationResult(
            success=True,
            booking=_row_to_booking(result["booking"]),
            available=result.get("available"),
        )
    return ReservationResult(
        success=False,
        booking=None,
        available=result.get("available"),
        error_code=result.get("error"),
    )


def attach_payment_intent(
    booking_id: UUID,
    payment_intent_id: str,
    client_secret: Optional[str],
    stripe_customer_id: Optional[str],
) -> TicketBooking:
    """
    Link a processor intent to a reserved booking (intent id is unique).

    Raises:
        NotFoundError: no such booking
        InvalidStatusTransitionError: the booking was cancelled before the
            intent arrived
        DuplicateRecordError: the booking already has an intent, or the
            intent belongs to another booking
    """

    payload = {
        "payment_intent_id": payment_intent_id,
        "client_secret": client_secret,
        "stripe_customer_id": stripe_customer_id,
        "updated_at": utc_now().isoformat(),
    }
    response = execute(
        get_supabase()
        .table(_BOOKINGS_TABLE)
        .update(payload)
        .eq("id", str(booking_id))
        .eq("status", TicketStatus.RESERVED.value)
        .is_("payment_intent_id", "null"),
        "attach payment intent",
    )
    updated = rows(response)
    if not updated:
        booking = get_booking_by_id(booking_id)
        if booking is None:
            raise NotFoundError(
                f"Booking {booking_id} does not exist", message="Ticket not found"
            )
        if booking.payment_intent_id is None:
            raise InvalidStatusTransitionError(
                f"Booking {booking_id} is {booking.status.value} and cannot take a payment intent"
            )
        raise DuplicateRecordError(f"Booking {booking_id} is already linked to a payment intent")
    return _row_to_booking(updated[0])


def cancel_unlinked_reservation(booking_id: UUID) -> List[TicketBooking]:
    """
    Cancel a reservation that never received a payment intent.

    Frees its tickets; payment status stays pending. Returns an empty list
    when the booking has meanwhile been linked or is no longer reserved.
    """

    response = execute(
        get_supabase()
        .table(_BOOKINGS_TABLE)
        .update({"status": TicketStatus.CANCELLED.value, "updated_at": utc_now().isoformat()})
        .eq("id", str(booking_id))
        .eq("status", TicketStatus.RESERVED.value)
        .is_("payment_intent_id", "null"),
        "cancel unlinked reservation",
    )
    return [_row_to_booking(row) for row in rows(response)]


def get_booking_by_id(booking_id: UUID) -> Optional[TicketBooking]:
    response = execute(
        get_supabase().table(_BOOKINGS_TABLE).select("*").eq("id", str(booking_id)).limit(1),
        "get booking",
    )
    found = rows(response)
    return _row_to_booking(found[0]) if found else None


def get_booking_by_payment_intent(payment_intent_id: str) -> Optional[TicketBooking]:
    response = execute(
        get_supabase()
        .table(_BOOKINGS_TABLE)
        .select("*")
        .eq("payment_intent_id", payment_intent_id)
        .limit(1),
        "get booking by payment intent",
    )
    found = rows(response)
    return _row_to_booking(found[0]) if found else None


def list_bookings_for_event(event_id: UUID) -> List[TicketBooking]:
    """All bookings for an event, newest first."""

    response = execute(
        get_supabase()
        .table(_BOOKINGS_TABLE)
        .select("*")
        .eq("event_id", str(event_id))
        .order("created_at", desc=True),
        "list bookings",
    )
    return [_row_to_booking(row) for row in rows(response)]


def transition_status(
    target: TicketStatus,
    *,
    booking_id: Optional[UUID] = None,
    payment_intent_id: Optional[str] = None,
    payment_status: Optional[TicketPaymentStatus] = None,
    current_payment_status: Optional[TicketPaymentStatus] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> List[TicketBooking]:
    """
    Move matching bookings to ``target`` if their current status allows it.

    ``current_payment_status`` further restricts the update to bookings whose
    payment is in that state (e.g. a failure only cancels unpaid bookings).

    Returns only the rows that changed; an empty list means the booking is
    missing or its status cannot reach ``target``.
    """

    if (booking_id is None) == (payment_intent_id is None):
        raise ValueError("Provide exactly one of booking_id or payment_intent_id")

    sources = [status.value for status in TicketStatus.allowed_sources(target)]
    if not sources:
        return []

    payload: Dict[str, Any] = {
        **(extra or {}),
        "status": target.value,
        "updated_at": utc_now().isoformat(),
    }
    if payment_status is not None:
        payload["payment_status"] = payment_status.value

    query = get_supabase().table(_BOOKINGS_TABLE).update(payload)
    if booking_id is not None:
        query = query.eq("id", str(booking_id))
    else:
        query = query.eq("payment_intent_id", payment_intent_id)
    query = query.in_("status", sources)
    if current_payment_status is not None:
        query = query.eq("payment_status", current_payment_status.value)

    response = execute(query, f"mark booking {target.value}")
    return [_row_to_booking(row) for row in rows(response)]


def confirm_payment(payment_intent_id: str, payment_method: Optional[str]) -> List[TicketBooking]:
    return transition_status(
        TicketStatus.CONFIRMED,
        payment_intent_id=payment_intent_id,
        payment_status=TicketPaymentStatus.PAID,
        current_payment_status=TicketPaymentStatus.PENDING,
        extra={"payment_method": payment_method},
    )


def cancel_for_payment_failure(payment_intent_id: str, error_message: str) -> List[TicketBooking]:
    """
    Cancel a reserved booking whose payment failed.

    The error text replaces ``metadata.paymentError``; the merge happens on a
    snapshot of the metadata and the update is still status-filtered, so a
    replayed failure event finds nothing to change.
    """

    booking = get_booking_by_payment_intent(payment_intent_id)
    if booking is None or not booking.status.can_transition_to(TicketStatus.CANCELLED):
        return []
    metadata = {**booking.metadata, "paymentError": error_message}
    return transition_status(
        TicketStatus.CANCELLED,
        payment_intent_id=payment_intent_id,
        payment_status=TicketPaymentStatus.FAILED,
        current_payment_status=TicketPaymentStatus.PENDING,
        extra={"metadata": metadata},
    )


def mark_refunded(payment_intent_id: str) -> List[TicketBooking]:
    return transition_status(
        TicketStatus.CANCELLED,
        payment_intent_id=payment_intent_id,
        payment_status=TicketPaymentStatus.REFUNDED,
        current_payment_status=TicketPaymentStatus.PAID,
    )


__all__ = [
    "ReservationResult",
    "reserve_tickets",
    "attach_payment_intent",
    "cancel_unlinked_reservation",
    "get_booking_by_id",
    "get_booking_by_payment_intent",
    "list_bookings_for_event",
    "transition_status",
    "confirm_payment",
    "cancel_for_payment_failure",
    "mark_refunded",
]
