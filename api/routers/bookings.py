"""
Event Ticket Booking API Endpoints.

Ticket reservation for paid events, payment confirmation, the processor
webhook, and the admin views over an event's bookings.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header

from api.auth import AdminPrincipal, optional_admin, require_admin
from api.dependencies import get_gateway, get_settings, raw_body
from api.models import BookingRequest, ConfirmPaymentRequest, TicketStatusUpdate
from api.serializers import booking_to_json
from api.settings import Settings
from domain.payment_status import TicketStatus
from domain.ticket import Customer
from repositories.event_repository import get_event_by_id
from services import booking_service, webhook_service
from services.payment_gateway import PaymentGateway

router = APIRouter(prefix="/event-ticket-booking")


@router.post(
    "",
    status_code=201,
    summary="Book Tickets",
    description="Reserve tickets for a paid event and open a payment intent for the total.",
)
def book_tickets(
    request: BookingRequest,
    gateway: PaymentGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    """
    Reserve tickets.

    **Process:**
    1. Validates the form (errors keyed `customerName`, `customerEmail`, ...)
    2. Checks the event exists and is active
    3. Checks capacity and reserves atomically (409 when sold out)
    4. Creates the processor customer and payment intent

    **Capacity failure (409):**
    ```json
    {
      "success": false,
      "message": "Insufficient tickets available",
      "error": "Only 2 tickets available",
      "availableTickets": 2,
      "requestedTickets": 3
    }
    ```
    """
    customer = Customer(
        name=request.customer.name,
        email=request.customer.email,
        phone=request.customer.phone,
        city=request.customer.city,
        state=request.customer.state,
        country=request.customer.country,
    )
    result = booking_service.book_tickets(
        UUID(request.event_id),
        customer,
        request.quantity,
        gateway,
        metadata=request.metadata,
        currency=settings.default_currency,
    )
    booking, event = result.booking, result.event

    message = "Ticket reservation created successfully"
    if not gateway.is_live:
        message += " (Stripe not configured)"

    return {
        "success": True,
        "message": message,
        "data": {
            "clientSecret": result.client_secret,
            "ticketId": str(booking.booking_id),
            "ticketNumber": booking.ticket_number,
            "amount": booking.total_amount,
            "currency": booking.currency,
            "event": {
                "id": str(event.event_id),
                "title": event.title,
                "date": event.date,
                "time": event.time,
            },
            "customer": {"name": customer.name, "email": customer.email},
            "quantity": booking.quantity,
            "totalAmount": booking.total_amount,
        },
    }


@router.post("/confirm-payment", summary="Confirm Payment")
def confirm_payment(
    request: ConfirmPaymentRequest,
    gateway: PaymentGateway = Depends(get_gateway),
):
    booking = booking_service.confirm_payment(
        request.payment_intent_id, UUID(request.ticket_id), gateway
    )
    return {
        "success": True,
        "message": "Payment confirmed successfully",
        "data": booking_to_json(booking),
    }


@router.post("/webhook", summary="Payment Webhook")
def booking_webhook(
    payload: bytes = Depends(raw_body),
    stripe_signature: Optional[str] = Header(None),
    gateway: PaymentGateway = Depends(get_gateway),
):
    webhook_service.process_webhook(payload, stripe_signature, gateway)
    return {"received": True}


@router.get("/event/{event_id}", summary="List Event Bookings")
def list_event_bookings(event_id: UUID, admin: AdminPrincipal = Depends(require_admin)):
    return [booking_to_json(booking) for booking in booking_service.list_event_bookings(event_id)]


@router.get("/event/{event_id}/stats", summary="Event Booking Statistics")
def event_stats(event_id: UUID, admin: AdminPrincipal = Depends(require_admin)):
    """
    Bookings grouped by status.

    ```json
    [{"status": "confirmed", "count": 4, "totalRevenue": 20000}]
    ```
    """
    return booking_service.event_stats(event_id)


@router.get("/{booking_id}", summary="Get Booking")
def get_booking(
    booking_id: UUID,
    email: Optional[str] = None,
    admin: Optional[AdminPrincipal] = Depends(optional_admin),
):
    """Admins may read any booking; anyone else must pass the booking's `email`."""
    booking = booking_service.get_booking_for_viewer(
        booking_id, is_admin=admin is not None, email=email
    )
    return {
        "success": True,
        "message": "Ticket retrieved successfully",
        "data": booking_to_json(booking, get_event_by_id(booking.event_id)),
    }


@router.put("/{booking_id}/status", summary="Update Booking Status")
def update_booking_status(
    booking_id: UUID,
    request: TicketStatusUpdate,
    admin: AdminPrincipal = Depends(require_admin),
):
    booking = booking_service.update_booking_status(booking_id, TicketStatus(request.status))
    return booking_to_json(booking)
