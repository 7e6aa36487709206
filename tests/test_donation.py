"""
Tests for `domain/donation.py` and `domain/event.py`.

Covers contract rules:
- Donation amount is positive minor units.
- A donation without a payment intent can only be pending.
- The processor description includes the organization when present.
- Event unit price prefers ticket_cost and falls back to parsing cost.
"""

from __future__ import annotations

from uuid import UUID

import pytest

from domain.donation import Donation
from domain.event import Event
from domain.payment_status import DonationStatus, PaymentMethod

DONATION_ID = UUID("00000000-0000-0000-0000-000000000100")
EVENT_ID = UUID("00000000-0000-0000-0000-000000000200")


def _donation(**overrides) -> Donation:
    fields = dict(
        donation_id=DONATION_ID,
        first_name="Grace",
        last_name="Hopper",
        email="grace@example.org",
        amount=5000,
        payment_method=PaymentMethod.STRIPE,
    )
    fields.update(overrides)
    return Donation(**fields)


def _event(**overrides) -> Event:
    fields = dict(
        event_id=EVENT_ID,
        title="Gala",
        date="2026-05-01",
        time="6 PM",
        place="Hall",
        desc="Dinner",
        action_type="Buy Tickets",
        cost="$25",
    )
    fields.update(overrides)
    return Event(**fields)


@pytest.mark.parametrize("amount", [0, -100])
def test_donation_amount_must_be_positive(amount) -> None:
    """Verify zero and negative amounts are rejected."""

    with pytest.raises(ValueError):
        _donation(amount=amount)


def test_donation_without_intent_is_pending_only() -> None:
    """Verify status cannot leave pending before an intent is linked."""

    with pytest.raises(ValueError):
        _donation(status=DonationStatus.SUCCEEDED)

    linked = _donation(stripe_payment_intent_id="pi_1", status=DonationStatus.SUCCEEDED)
    assert linked.status == DonationStatus.SUCCEEDED


def test_donation_description() -> None:
    """Verify the statement description mirrors the donate form."""

    assert _donation().description == "Donation from Grace Hopper"
    assert _donation(org="Navy").description == "Donation from Grace Hopper (Navy)"


def test_event_unit_price_prefers_ticket_cost() -> None:
    """Verify ticket_cost wins over the display cost."""

    assert _event(ticket_cost=30.0).unit_price_minor() == 3000


def test_event_unit_price_falls_back_to_cost_string() -> None:
    """Verify older events without ticket_cost are priced from cost."""

    assert _event(cost="$12.50").unit_price_minor() == 1250


@pytest.mark.parametrize("cost, ticket_cost", [("Free", None), ("Donations welcome", None), ("$0", None), ("$0", 0.0)])
def test_free_events_have_no_unit_price(cost, ticket_cost) -> None:
    """Verify free events are not bookable."""

    assert _event(cost=cost, ticket_cost=ticket_cost).unit_price_minor() is None


def test_event_capacity_limit() -> None:
    """Verify capacity None means unlimited."""

    assert not _event().has_capacity_limit
    assert _event(capacity=20).has_capacity_limit
    with pytest.raises(ValueError):
        _event(capacity=-1)
