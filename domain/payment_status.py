"""
Domain: payment lifecycle state machines.

Donations follow the processor's intent lifecycle:

    pending ─┬─> requires_payment_method ─┐
             ├─> processing ──────────────┼─> succeeded ─> refunded
             └────────────────────────────┴─> failed | cancelled

- Non-terminal statuses (pending, requires_payment_method, processing) may
  move to any other status except back to ``pending``.
- Terminal statuses (succeeded, failed, cancelled, refunded) never reopen.
  The single edge between terminal statuses is ``succeeded -> refunded``.

Ticket bookings have a reservation lifecycle next to a payment status:

    reserved ─> confirmed ─> used
        └──────────┴──────> cancelled

Repositories turn these rules into update filters (``allowed_sources``), so
a re-delivered webhook or a stale admin request becomes a no-op at the
store instead of a read-then-write race.
"""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, List


class DonationStatus(str, Enum):
    PENDING = "pending"
    REQUIRES_PAYMENT_METHOD = "requires_payment_method"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

    @property
    def is_terminal(self) -> bool:
        return self in _DONATION_TERMINAL

    def can_transition_to(self, target: "DonationStatus") -> bool:
        """Whether a donation in this status may move to ``target``."""

        if target == self:
            return False
        if self.is_terminal:
            return self == DonationStatus.SUCCEEDED and target == DonationStatus.REFUNDED
        return target != DonationStatus.PENDING

    @classmethod
    def allowed_sources(cls, target: "DonationStatus") -> List["DonationStatus"]:
        """Statuses from which ``target`` is reachable in one step."""

        return [status for status in cls if status.can_transition_to(target)]


_DONATION_TERMINAL: FrozenSet[DonationStatus] = frozenset(
    {
        DonationStatus.SUCCEEDED,
        DonationStatus.FAILED,
        DonationStatus.CANCELLED,
        DonationStatus.REFUNDED,
    }
)


class TicketStatus(str, Enum):
    RESERVED = "reserved"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    USED = "used"

    @property
    def is_terminal(self) -> bool:
        return self in (TicketStatus.CANCELLED, TicketStatus.USED)

    @property
    def holds_capacity(self) -> bool:
        """Reserved and confirmed tickets count against event capacity."""

        return self in (TicketStatus.RESERVED, TicketStatus.CONFIRMED)

    def can_transition_to(self, target: "TicketStatus") -> bool:
        return target in _TICKET_TRANSITIONS[self]

    @classmethod
    def allowed_sources(cls, target: "TicketStatus") -> List["TicketStatus"]:
        return [status for status in cls if status.can_transition_to(target)]


_TICKET_TRANSITIONS = {
    TicketStatus.RESERVED: frozenset({TicketStatus.CONFIRMED, TicketStatus.CANCELLED}),
    TicketStatus.CONFIRMED: frozenset({TicketStatus.USED, TicketStatus.CANCELLED}),
    TicketStatus.CANCELLED: frozenset(),
    TicketStatus.USED: frozenset(),
}


class TicketPaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    BANK_TRANSFER = "bank_transfer"


__all__ = [
    "DonationStatus",
    "TicketStatus",
    "TicketPaymentStatus",
    "PaymentMethod",
]
