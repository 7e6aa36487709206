"""
Response serialization.

Domain objects are snake_case dataclasses; API responses are camelCase JSON.
Amounts stay in minor units. The client secret is never echoed back in a
record, only in the create responses that need it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from domain.donation import Donation, DonationOption
from domain.event import Event
from domain.inquiry import CommunitySignup, ContactMessage, Registration
from domain.ticket import TicketBooking


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def donation_to_json(donation: Donation) -> Dict[str, Any]:
    return {
        "id": str(donation.donation_id),
        "firstName": donation.first_name,
        "lastName": donation.last_name,
        "org": donation.org,
        "title": donation.title,
        "email": donation.email,
        "emailWork": donation.email_work,
        "phone": donation.phone,
        "address": donation.address,
        "city": donation.city,
        "state": donation.state,
        "zip": donation.zip,
        "country": donation.country,
        "volunteer": donation.volunteer,
        "familyServices": donation.family_services,
        "amount": donation.amount,
        "currency": donation.currency,
        "paymentMethod": donation.payment_method.value,
        "status": donation.status.value,
        "stripePaymentIntentId": donation.stripe_payment_intent_id,
        "stripeCustomerId": donation.stripe_customer_id,
        "stripePaymentMethod": donation.stripe_payment_method,
        "metadata": dict(donation.metadata),
        "error": donation.error,
        "paidAt": _iso(donation.paid_at),
        "createdAt": _iso(donation.created_at),
        "updatedAt": _iso(donation.updated_at),
    }


def booking_to_json(booking: TicketBooking, event: Optional[Event] = None) -> Dict[str, Any]:
    customer = booking.customer
    body: Dict[str, Any] = {
        "id": str(booking.booking_id),
        "ticketNumber": booking.ticket_number,
        "eventId": str(booking.event_id),
        "customer": {
            "name": customer.name,
            "email": customer.email,
            "phone": customer.phone,
            "address": {
                "city": customer.city,
                "state": customer.state,
                "country": customer.country,
            },
        },
        "quantity": booking.quantity,
        "unitPrice": booking.unit_price,
        "totalAmount": booking.total_amount,
        "currency": booking.currency,
        "status": booking.status.value,
        "paymentStatus": booking.payment_status.value,
        "paymentIntentId": booking.payment_intent_id,
        "stripeCustomerId": booking.stripe_customer_id,
        "paymentMethod": booking.payment_method,
        "metadata": dict(booking.metadata),
        "createdAt": _iso(booking.created_at),
        "updatedAt": _iso(booking.updated_at),
    }
    if event is not None:
        body["event"] = {
            "id": str(event.event_id),
            "title": event.title,
            "date": event.date,
            "time": event.time,
            "place": event.place,
        }
    return body


def event_to_json(event: Event) -> Dict[str, Any]:
    return {
        "id": str(event.event_id),
        "title": event.title,
        "date": event.date,
        "time": event.time,
        "place": event.place,
        "desc": event.desc,
        "actionType": event.action_type,
        "cost": event.cost,
        "ticketCost": event.ticket_cost,
        "capacity": event.capacity,
        "highlights": list(event.highlights),
        "specialGift": event.special_gift,
        "imageUrl": event.image_url,
        "isActive": event.is_active,
        "createdAt": _iso(event.created_at),
        "updatedAt": _iso(event.updated_at),
    }


def option_to_json(option: DonationOption) -> Dict[str, Any]:
    amount = option.amount
    return {
        "id": str(option.option_id),
        "group": option.group,
        "label": option.label,
        "amount": int(amount) if amount == amount.to_integral_value() else float(amount),
        "type": option.type.value,
        "active": option.active,
        "order": option.order,
    }


def contact_to_json(message: ContactMessage) -> Dict[str, Any]:
    return {
        "id": str(message.message_id),
        "name": message.name,
        "email": message.email,
        "subject": message.subject,
        "message": message.message,
        "createdAt": _iso(message.created_at),
    }


def registration_to_json(registration: Registration) -> Dict[str, Any]:
    return {
        "id": str(registration.registration_id),
        "eventId": str(registration.event_id),
        "name": registration.name,
        "email": registration.email,
        "phone": registration.phone,
        "location": registration.location,
        "city": registration.city,
        "state": registration.state,
        "country": registration.country,
        "createdAt": _iso(registration.created_at),
    }


def signup_to_json(signup: CommunitySignup) -> Dict[str, Any]:
    return {
        "id": str(signup.signup_id),
        "name": signup.name,
        "email": signup.email,
        "createdAt": _iso(signup.created_at),
    }


__all__ = [
    "donation_to_json",
    "booking_to_json",
    "event_to_json",
    "option_to_json",
    "contact_to_json",
    "registration_to_json",
    "signup_to_json",
]
