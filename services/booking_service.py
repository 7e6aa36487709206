"""
Event ticket booking service.

Booking flow:
1. Load the event (must exist, be active and carry a ticket price)
2. Reserve tickets through the atomic capacity check in the store
3. Create the processor customer and payment intent
4. Link the intent to the booking and hand the client secret back

Also covers payment confirmation from the browser, admin status
overrides and per-event booking statistics.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID

from domain.errors import (
    AccessDeniedError,
    CapacityExceededError,
    EventUnavailableError,
    InvalidStatusTransitionError,
    NotFoundError,
    PaymentConfirmationError,
)
from domain.event import Event
from domain.payment_status import TicketStatus
from domain.ticket import Customer, TicketBooking
from repositories import event_repository, ticket_repository
from services.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BookingResult:
    booking: TicketBooking
    event: Event
    client_secret: Optional[str]


def _load_bookable_event(event_id: UUID) -> Event:
    event = event_repository.get_event_by_id(event_id)
    if event is None:
        raise NotFoundError("The requested event could not be found.", message="Event not found")
    if not event.is_active:
        raise EventUnavailableError("This event is no longer available for booking.")
    return event


def book_tickets(
    event_id: UUID,
    customer: Customer,
    quantity: int,
    gateway: PaymentGateway,
    metadata: Optional[Mapping[str, str]] = None,
    currency: str = "usd",
) -> BookingResult:
    """
    Reserve tickets for an event and open a payment intent for them.

    Raises:
        NotFoundError: event does not exist
        EventUnavailableError: event is inactive or has no ticket price
        CapacityExceededError: not enough tickets left
        PaymentProcessorError: customer or intent creation failed (the
            reservation is kept without an intent)
    """

    event = _load_bookable_event(event_id)
    unit_price = event.unit_price_minor()
    if unit_price is None:
        raise EventUnavailableError("This event does not sell tickets.")

    reservation = ticket_repository.reserve_tickets(
        event.event_id,
        customer,
        quantity,
        unit_price,
        currency=currency,
        metadata=metadata,
    )
    if not reservation.success or reservation.booking is None:
        if reservation.error_code == "EVENT_NOT_FOUND":
            raise NotFoundError("The requested event could not be found.", message="Event not found")
        if reservation.error_code == "EVENT_INACTIVE":
            raise EventUnavailableError("This event is no longer available for booking.")
        raise CapacityExceededError(reservation.available or 0, quantity)

    booking = reservation.booking
    logger.info(
        "Reserved %s ticket(s) for event %s as booking %s (total=%s)",
        quantity,
        event.event_id,
        booking.booking_id,
        booking.total_amount,
    )

    provenance = {
        "ticketId": str(booking.booking_id),
        "eventId": str(event.event_id),
        "eventTitle": event.title,
        "quantity": str(quantity),
    }
    customer_id = gateway.create_customer(
        email=customer.email,
        name=customer.name,
        phone=customer.phone,
        metadata=provenance,
    )
    intent = gateway.create_payment_intent(
        amount=booking.total_amount,
        currency=booking.currency,
        customer_id=customer_id,
        description=f"{quantity} ticket(s) for {event.title}",
        receipt_email=customer.email,
        shipping={
            "name": customer.name,
            "address": {
                "city": customer.city,
                "state": customer.state,
                "country": customer.country,
            },
        },
        metadata={
            **provenance,
            "customerName": customer.name,
            "customerEmail": customer.email,
            "unitPrice": str(booking.unit_price),
            "totalAmount": str(booking.total_amount),
        },
    )
    booking = ticket_repository.attach_payment_intent(
        booking.booking_id, intent.intent_id, intent.client_secret, customer_id
    )
    logger.info("Linked payment intent %s to booking %s", intent.intent_id, booking.booking_id)
    return BookingResult(booking=booking, event=event, client_secret=intent.client_secret)


def confirm_payment(payment_intent_id: str, booking_id: UUID, gateway: PaymentGateway) -> TicketBooking:
    """
    Confirm a booking after the browser reports a completed payment.

    The intent is re-read from the processor; only a succeeded intent that
    belongs to this booking confirms it.
    """

    booking = get_booking(booking_id)
    if booking.payment_intent_id != payment_intent_id:
        logger.warning(
            "Payment intent %s does not belong to booking %s", payment_intent_id, booking_id
        )
        raise PaymentConfirmationError("Payment intent does not match this ticket")

    intent = gateway.retrieve_payment_intent(payment_intent_id)
    if intent.status != "succeeded":
        raise PaymentConfirmationError(
            f"Payment not succeeded. Status: {intent.status}",
            message=f"Payment not succeeded. Status: {intent.status}",
        )

    confirmed = ticket_repository.confirm_payment(payment_intent_id, intent.payment_method_label)
    if confirmed:
        logger.info("Booking %s confirmed via payment intent %s", booking_id, payment_intent_id)
        return confirmed[0]
    # Already confirmed (webhook first) or no longer confirmable.
    return get_booking(booking_id)


def get_booking(booking_id: UUID) -> TicketBooking:
    booking = ticket_repository.get_booking_by_id(booking_id)
    if booking is None:
        raise NotFoundError("The requested ticket could not be found.", message="Ticket not found")
    return booking


def get_booking_for_viewer(
    booking_id: UUID, *, is_admin: bool, email: Optional[str] = None
) -> TicketBooking:
    """Admins see any booking; others must present the booking's email."""

    booking = get_booking(booking_id)
    if is_admin:
        return booking
    if email and email.strip().lower() == booking.customer.email.lower():
        return booking
    raise AccessDeniedError("You are not authorized to view this ticket.")


def list_event_bookings(event_id: UUID) -> List[TicketBooking]:
    return ticket_repository.list_bookings_for_event(event_id)


def update_booking_status(booking_id: UUID, target: TicketStatus) -> TicketBooking:
    """
    Admin override of a booking's reservation status.

    A booking whose intent creation failed can only be cancelled; that
    releases its tickets while its payment status stays pending.

    Raises:
        NotFoundError: no such booking
        InvalidStatusTransitionError: the transition is not allowed
    """

    booking = get_booking(booking_id)
    if booking.payment_intent_id is None:
        if target != TicketStatus.CANCELLED or booking.status != TicketStatus.RESERVED:
            raise InvalidStatusTransitionError(
                "A booking without a payment intent can only be cancelled"
            )
        updated = ticket_repository.cancel_unlinked_reservation(booking_id)
        if not updated:
            raise InvalidStatusTransitionError(
                f"Ticket {booking_id} can no longer change to {target.value}"
            )
        logger.info("Admin cancelled unlinked reservation %s", booking_id)
        return updated[0]
    if not booking.status.can_transition_to(target):
        raise InvalidStatusTransitionError(
            f"Cannot change ticket status from {booking.status.value} to {target.value}"
        )

    updated = ticket_repository.transition_status(target, booking_id=booking_id)
    if not updated:
        raise InvalidStatusTransitionError(
            f"Ticket {booking_id} can no longer change to {target.value}"
        )
    logger.info("Admin set booking %s to %s", booking_id, target.value)
    return updated[0]


def event_stats(event_id: UUID) -> List[Dict[str, Any]]:
    """Bookings for an event grouped by status, with count and revenue (minor units)."""

    groups: Dict[TicketStatus, Dict[str, Any]] = {}
    for booking in ticket_repository.list_bookings_for_event(event_id):
        group = groups.setdefault(
            booking.status, {"status": booking.status.value, "count": 0, "totalRevenue": 0}
        )
        group["count"] += 1
        group["totalRevenue"] += booking.total_amount
    return [groups[status] for status in TicketStatus if status in groups]


__all__ = [
    "BookingResult",
    "book_tickets",
    "confirm_payment",
    "get_booking",
    "get_booking_for_viewer",
    "list_event_bookings",
    "update_booking_status",
    "event_stats",
]
