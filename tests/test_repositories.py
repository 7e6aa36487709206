"""
Tests for the repository layer against the in-memory store.

Covers contract rules:
- A payment intent id links to at most one record.
- Status updates are conditional on the current status.
- Store failures surface as PersistenceError.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from domain.errors import DuplicateRecordError, NotFoundError, PersistenceError
from domain.payment_status import DonationStatus
from repositories import donation_repository, event_repository

FIELDS = {
    "first_name": "Grace",
    "last_name": "Hopper",
    "email": "grace@example.org",
    "amount": 2500,
    "payment_method": "stripe",
}


def test_intent_id_is_unique_across_donations(store) -> None:
    first = donation_repository.create_donation(FIELDS)
    second = donation_repository.create_donation(FIELDS)
    donation_repository.attach_payment_intent(first.donation_id, "pi_shared", "secret")

    with pytest.raises(DuplicateRecordError):
        donation_repository.attach_payment_intent(second.donation_id, "pi_shared", "secret")


def test_intent_is_attached_only_once(store) -> None:
    donation = donation_repository.create_donation(FIELDS)
    donation_repository.attach_payment_intent(donation.donation_id, "pi_1", "secret")

    with pytest.raises(DuplicateRecordError):
        donation_repository.attach_payment_intent(donation.donation_id, "pi_2", "secret")


def test_attach_intent_to_missing_donation(store) -> None:
    with pytest.raises(NotFoundError):
        donation_repository.attach_payment_intent(uuid4(), "pi_1", "secret")


def test_transition_skips_donations_without_intent(store) -> None:
    donation = donation_repository.create_donation(FIELDS)

    changed = donation_repository.transition_status(
        DonationStatus.SUCCEEDED, donation_id=donation.donation_id
    )

    assert changed == []
    assert store.rows("donations")[0]["status"] == "pending"


def test_transition_needs_exactly_one_selector(store) -> None:
    with pytest.raises(ValueError):
        donation_repository.transition_status(DonationStatus.FAILED)


def test_mark_failed_overwrites_error(store) -> None:
    donation = donation_repository.create_donation(FIELDS)
    donation_repository.attach_payment_intent(donation.donation_id, "pi_1", "secret")
    donation_repository.transition_status(DonationStatus.PROCESSING, payment_intent_id="pi_1")

    [failed] = donation_repository.mark_failed("pi_1", "Insufficient funds")

    assert failed.status == DonationStatus.FAILED
    assert failed.error == "Insufficient funds"
    assert failed.metadata["paymentError"] == "Insufficient funds"
    assert donation_repository.mark_failed("pi_1", "Again") == []
    assert store.rows("donations")[0]["metadata"]["paymentError"] == "Insufficient funds"


def test_store_errors_become_persistence_errors(store) -> None:
    store.failing_tables.add("events")

    with pytest.raises(PersistenceError):
        event_repository.list_events()
