"""
Domain: donations and the donation-options catalogue.

A Donation is a payment record: it is created ``pending`` before any call to
the payment processor, gains a processor intent id once the intent exists,
and reaches a terminal status through webhooks or an admin override.

This module contains only pure domain entities: no I/O, no frameworks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional
from uuid import UUID

from .payment_status import DonationStatus, PaymentMethod
from .time import require_utc_timestamp


@dataclass(frozen=True, slots=True)
class Donation:
    """
    Immutable snapshot of a donation record.

    ``amount`` is in minor units (cents) and always positive. A donation
    without ``stripe_payment_intent_id`` can only be ``pending``.
    """

    donation_id: UUID
    first_name: str
    last_name: str
    email: str
    amount: int
    payment_method: PaymentMethod
    status: DonationStatus = DonationStatus.PENDING
    currency: str = "usd"

    # Optional donor details
    org: Optional[str] = None
    title: Optional[str] = None
    email_work: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: str = "US"
    volunteer: Optional[bool] = None
    family_services: Optional[bool] = None

    # Processor tracking
    stripe_payment_intent_id: Optional[str] = None
    stripe_customer_id: Optional[str] = None
    stripe_payment_method: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None

    # Timestamps
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError("Donation amount must be greater than 0")
        if self.stripe_payment_intent_id is None and self.status != DonationStatus.PENDING:
            raise ValueError("A donation without a payment intent must be pending")
        for name in ("paid_at", "created_at", "updated_at"):
            value = getattr(self, name)
            if value is not None:
                require_utc_timestamp(name, value)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def description(self) -> str:
        """Statement description sent to the processor."""

        suffix = f" ({self.org})" if self.org else ""
        return f"Donation from {self.full_name}{suffix}"


class DonationOptionType(str, Enum):
    CONTRIBUTION = "contribution"
    MEMBERSHIP = "membership"
    SPONSORSHIP = "sponsorship"


@dataclass(frozen=True, slots=True)
class DonationOption:
    """Preset donation amount shown on the donate page."""

    option_id: UUID
    group: str
    label: str
    amount: Decimal
    type: DonationOptionType
    active: bool = True
    order: int = 0
