"""
Donation service.

Handles:
- Persisting the pending donation before any processor call
- Creating the payment intent for Stripe donations and linking it
- Admin status overrides, checked against the donation state machine

A processor failure leaves the donation pending without an intent; the
error is surfaced to the caller and never retried here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional
from uuid import UUID

from domain.donation import Donation
from domain.errors import InvalidStatusTransitionError, NotFoundError
from domain.money import to_minor_units
from domain.payment_status import DonationStatus, PaymentMethod
from domain.time import utc_now
from repositories import donation_repository
from repositories.timestamps import to_iso_utc
from services.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)

# Request keys that are stored as-is on the donation row.
_DONOR_FIELDS = (
    "first_name",
    "last_name",
    "org",
    "title",
    "email",
    "email_work",
    "phone",
    "address",
    "city",
    "state",
    "zip",
    "country",
    "volunteer",
    "family_services",
)


@dataclass(frozen=True, slots=True)
class DonationResult:
    donation: Donation
    client_secret: Optional[str]


def create_donation(
    request: Mapping[str, Any],
    gateway: PaymentGateway,
    currency: str = "usd",
) -> DonationResult:
    """
    Record a donation and, for card payments, open a payment intent.

    Args:
        request: validated donor fields (snake_case) with ``amount`` in major
            units and ``payment_method`` a PaymentMethod value
        gateway: payment gateway used for Stripe donations
        currency: ISO currency code for the intent

    Raises:
        PaymentProcessorError: the intent could not be created (the pending
            donation is kept)
    """

    fields = {key: request[key] for key in _DONOR_FIELDS if request.get(key) is not None}
    fields["amount"] = to_minor_units(request["amount"])
    fields["currency"] = currency
    fields["payment_method"] = PaymentMethod(request["payment_method"]).value
    if request.get("metadata"):
        fields["metadata"] = dict(request["metadata"])

    donation = donation_repository.create_donation(fields)
    logger.info("Created pending donation %s (amount=%s)", donation.donation_id, donation.amount)

    if donation.payment_method != PaymentMethod.STRIPE:
        return DonationResult(donation=donation, client_secret=None)

    intent = gateway.create_payment_intent(
        amount=donation.amount,
        currency=donation.currency,
        description=donation.description,
        receipt_email=donation.email,
        metadata={
            "donationId": str(donation.donation_id),
            "donorName": donation.full_name,
            "org": donation.org,
            **donation.metadata,
        },
    )
    donation = donation_repository.attach_payment_intent(
        donation.donation_id,
        intent.intent_id,
        intent.client_secret,
        intent.customer_id,
    )
    logger.info("Linked payment intent %s to donation %s", intent.intent_id, donation.donation_id)
    return DonationResult(donation=donation, client_secret=intent.client_secret)


def get_donation(donation_id: UUID) -> Donation:
    donation = donation_repository.get_donation_by_id(donation_id)
    if donation is None:
        raise NotFoundError("The requested donation could not be found.", message="Donation not found")
    return donation


def list_donations(
    status: Optional[DonationStatus] = None, email: Optional[str] = None
) -> List[Donation]:
    return donation_repository.list_donations(status=status, email=email)


def update_donation_status(donation_id: UUID, target: DonationStatus) -> Donation:
    """
    Admin override of a donation's status.

    Raises:
        NotFoundError: no such donation
        InvalidStatusTransitionError: the donation has no payment intent,
            or its current status cannot reach ``target``
    """

    donation = get_donation(donation_id)
    if donation.stripe_payment_intent_id is None:
        raise InvalidStatusTransitionError(
            "A donation without a payment intent stays pending"
        )
    if not donation.status.can_transition_to(target):
        raise InvalidStatusTransitionError(
            f"Cannot change donation status from {donation.status.value} to {target.value}"
        )

    extra = {}
    if target == DonationStatus.SUCCEEDED:
        extra["paid_at"] = to_iso_utc(utc_now(), name="paid_at")

    updated = donation_repository.transition_status(target, donation_id=donation_id, extra=extra)
    if not updated:
        # Status moved underneath us (e.g. a webhook landed first).
        raise InvalidStatusTransitionError(
            f"Donation {donation_id} can no longer change to {target.value}"
        )
    logger.info("Admin set donation %s to %s", donation_id, target.value)
    return updated[0]


__all__ = [
    "DonationResult",
    "create_donation",
    "get_donation",
    "list_donations",
    "update_donation_status",
]
