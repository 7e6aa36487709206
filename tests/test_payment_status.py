"""
Tests for `domain/payment_status.py`.

Covers contract rules:
- Non-terminal donation statuses may move anywhere except back to pending.
- Terminal donation statuses never reopen; succeeded -> refunded is the only
  edge between terminal statuses.
- Ticket bookings follow reserved -> confirmed | cancelled, confirmed ->
  used | cancelled; cancelled and used are terminal.
- `allowed_sources` is exactly the set of statuses that can reach a target.
"""

from __future__ import annotations

import pytest

from domain.payment_status import DonationStatus, TicketStatus

NON_TERMINAL = [
    DonationStatus.PENDING,
    DonationStatus.REQUIRES_PAYMENT_METHOD,
    DonationStatus.PROCESSING,
]
TERMINAL = [
    DonationStatus.SUCCEEDED,
    DonationStatus.FAILED,
    DonationStatus.CANCELLED,
    DonationStatus.REFUNDED,
]


def test_donation_terminal_flags() -> None:
    """Verify which donation statuses are terminal."""

    assert all(not status.is_terminal for status in NON_TERMINAL)
    assert all(status.is_terminal for status in TERMINAL)


@pytest.mark.parametrize("source", NON_TERMINAL)
def test_non_terminal_donation_can_move_anywhere_but_pending(source) -> None:
    """Verify non-terminal statuses reach every other status except pending."""

    for target in DonationStatus:
        expected = target not in (source, DonationStatus.PENDING)
        assert source.can_transition_to(target) is expected, (source, target)


def test_terminal_donation_statuses_never_reopen() -> None:
    """Verify only succeeded -> refunded leaves a terminal status."""

    for source in TERMINAL:
        for target in DonationStatus:
            expected = source == DonationStatus.SUCCEEDED and target == DonationStatus.REFUNDED
            assert source.can_transition_to(target) is expected, (source, target)


def test_donation_allowed_sources() -> None:
    """Verify allowed_sources matches the transition rules."""

    assert DonationStatus.allowed_sources(DonationStatus.PENDING) == []
    assert DonationStatus.allowed_sources(DonationStatus.SUCCEEDED) == NON_TERMINAL
    assert DonationStatus.allowed_sources(DonationStatus.REFUNDED) == NON_TERMINAL + [
        DonationStatus.SUCCEEDED
    ]


def test_ticket_transitions() -> None:
    """Verify the reservation lifecycle."""

    assert TicketStatus.RESERVED.can_transition_to(TicketStatus.CONFIRMED)
    assert TicketStatus.RESERVED.can_transition_to(TicketStatus.CANCELLED)
    assert not TicketStatus.RESERVED.can_transition_to(TicketStatus.USED)
    assert TicketStatus.CONFIRMED.can_transition_to(TicketStatus.USED)
    assert TicketStatus.CONFIRMED.can_transition_to(TicketStatus.CANCELLED)
    assert not TicketStatus.CONFIRMED.can_transition_to(TicketStatus.RESERVED)

    for terminal in (TicketStatus.CANCELLED, TicketStatus.USED):
        assert terminal.is_terminal
        assert not any(terminal.can_transition_to(target) for target in TicketStatus)


def test_ticket_capacity_and_sources() -> None:
    """Verify which bookings hold capacity and which can reach each target."""

    assert TicketStatus.RESERVED.holds_capacity
    assert TicketStatus.CONFIRMED.holds_capacity
    assert not TicketStatus.CANCELLED.holds_capacity
    assert not TicketStatus.USED.holds_capacity

    assert TicketStatus.allowed_sources(TicketStatus.CANCELLED) == [
        TicketStatus.RESERVED,
        TicketStatus.CONFIRMED,
    ]
    assert TicketStatus.allowed_sources(TicketStatus.RESERVED) == []
