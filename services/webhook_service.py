"""
Processor webhook handling.

The raw body is authenticated before anything is parsed or touched. Each
handled event type then moves the donation and/or ticket booking linked to
the payment intent. Every update is filtered by the statuses allowed to
reach the target, so a re-delivered event changes nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from domain.payment_status import DonationStatus, TicketPaymentStatus, TicketStatus
from repositories import donation_repository, ticket_repository
from services.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Payment failed"


@dataclass(frozen=True, slots=True)
class WebhookOutcome:
    """What a single event changed: number of donations and bookings updated."""

    event_type: str
    handled: bool
    donations_updated: int = 0
    bookings_updated: int = 0


def _payment_method_label(intent: Mapping[str, Any]) -> str:
    types = intent.get("payment_method_types") or []
    return types[0] if types else "card"


def _failure_message(intent: Mapping[str, Any]) -> str:
    error = intent.get("last_payment_error") or {}
    return error.get("message") or DEFAULT_FAILURE_MESSAGE


def _on_succeeded(intent: Mapping[str, Any]) -> WebhookOutcome:
    intent_id = intent["id"]
    method = _payment_method_label(intent)
    donations = donation_repository.mark_succeeded(intent_id, method)
    bookings = ticket_repository.confirm_payment(intent_id, method)
    return WebhookOutcome("payment_intent.succeeded", True, len(donations), len(bookings))


def _on_failed(intent: Mapping[str, Any]) -> WebhookOutcome:
    intent_id = intent["id"]
    message = _failure_message(intent)
    donations = donation_repository.mark_failed(intent_id, message)
    bookings = ticket_repository.cancel_for_payment_failure(intent_id, message)
    return WebhookOutcome("payment_intent.payment_failed", True, len(donations), len(bookings))


def _on_processing(intent: Mapping[str, Any]) -> WebhookOutcome:
    donations = donation_repository.transition_status(
        DonationStatus.PROCESSING, payment_intent_id=intent["id"]
    )
    return WebhookOutcome("payment_intent.processing", True, len(donations), 0)


def _on_canceled(intent: Mapping[str, Any]) -> WebhookOutcome:
    intent_id = intent["id"]
    donations = donation_repository.transition_status(
        DonationStatus.CANCELLED, payment_intent_id=intent_id
    )
    bookings = ticket_repository.transition_status(
        TicketStatus.CANCELLED,
        payment_intent_id=intent_id,
        payment_status=TicketPaymentStatus.FAILED,
        current_payment_status=TicketPaymentStatus.PENDING,
    )
    return WebhookOutcome("payment_intent.canceled", True, len(donations), len(bookings))


def _on_refunded(charge: Mapping[str, Any]) -> WebhookOutcome:
    intent_id = charge.get("payment_intent")
    if not intent_id:
        logger.warning("charge.refunded %s carries no payment intent", charge.get("id"))
        return WebhookOutcome("charge.refunded", True)
    donations = donation_repository.transition_status(
        DonationStatus.REFUNDED, payment_intent_id=intent_id
    )
    bookings = ticket_repository.mark_refunded(intent_id)
    return WebhookOutcome("charge.refunded", True, len(donations), len(bookings))


_HANDLERS: Dict[str, Callable[[Mapping[str, Any]], WebhookOutcome]] = {
    "payment_intent.succeeded": _on_succeeded,
    "payment_intent.payment_failed": _on_failed,
    "payment_intent.processing": _on_processing,
    "payment_intent.canceled": _on_canceled,
    "charge.refunded": _on_refunded,
}


def handle_event(event: Mapping[str, Any]) -> WebhookOutcome:
    """Apply an already-verified processor event."""

    event_type = str(event.get("type"))
    handler = _HANDLERS.get(event_type)
    if handler is None:
        logger.info("Unhandled event type %s", event_type)
        return WebhookOutcome(event_type, False)

    data_object: Optional[Mapping[str, Any]] = (event.get("data") or {}).get("object")
    if not data_object:
        logger.warning("Event %s (%s) has no data object", event.get("id"), event_type)
        return WebhookOutcome(event_type, False)

    logger.info("Processing %s for %s", event_type, data_object.get("id"))
    outcome = handler(data_object)
    if not outcome.donations_updated and not outcome.bookings_updated:
        logger.info("%s matched no record in a state that could change", event_type)
    return outcome


def process_webhook(
    payload: bytes, signature: Optional[str], gateway: PaymentGateway
) -> WebhookOutcome:
    """
    Verify and apply a webhook delivery.

    Raises:
        WebhookSignatureError: the delivery could not be authenticated; no
            record is read or written
    """

    event = gateway.verify_event(payload, signature)
    return handle_event(event)


__all__ = ["WebhookOutcome", "handle_event", "process_webhook", "DEFAULT_FAILURE_MESSAGE"]
