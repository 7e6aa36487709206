"""
Donation repository (persistence).

Persistence operations for the Donation payment record. Status changes are
conditional updates: the filter only matches rows whose current status may
reach the target (see `DonationStatus.allowed_sources`), so a replayed
webhook or a stale admin request updates nothing instead of reopening a
terminal record.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID, uuid4

from domain.donation import Donation
from domain.errors import DuplicateRecordError, NotFoundError
from domain.payment_status import DonationStatus, PaymentMethod
from domain.time import utc_now
from repositories.client import execute, get_supabase, rows
from repositories.timestamps import parse_optional_datetime, to_iso_utc

_DONATIONS_TABLE: str = "donations"


def _row_to_donation(row: Mapping[str, Any]) -> Donation:
    """Convert a Supabase row into a Donation."""

    return Donation(
        donation_id=UUID(str(row["id"])),
        first_name=str(row["first_name"]),
        last_name=str(row["last_name"]),
        email=str(row["email"]),
        amount=int(row["amount"]),
        payment_method=PaymentMethod(str(row["payment_method"])),
        status=DonationStatus(str(row["status"])),
        currency=str(row.get("currency") or "usd"),
        org=row.get("org"),
        title=row.get("title"),
        email_work=row.get("email_work"),
        phone=row.get("phone"),
        address=row.get("address"),
        city=row.get("city"),
        state=row.get("state"),
        zip=row.get("zip"),
        country=str(row.get("country") or "US"),
        volunteer=row.get("volunteer"),
        family_services=row.get("family_services"),
        stripe_payment_intent_id=row.get("stripe_payment_intent_id"),
        stripe_customer_id=row.get("stripe_customer_id"),
        stripe_payment_method=row.get("stripe_payment_method"),
        metadata=dict(row.get("metadata") or {}),
        error=row.get("error"),
        paid_at=parse_optional_datetime(row.get("paid_at")),
        created_at=parse_optional_datetime(row.get("created_at")),
        updated_at=parse_optional_datetime(row.get("updated_at")),
    )


def create_donation(fields: Mapping[str, Any]) -> Donation:
    """
    Insert a new pending donation (before any processor call).

    Args:
        fields: donor attributes keyed by column name, with ``amount`` in
            minor units and ``payment_method`` a PaymentMethod value
    """

    now = utc_now().isoformat()
    payload: Dict[str, Any] = {
        "id": str(uuid4()),
        **fields,
        "status": DonationStatus.PENDING.value,
        "created_at": now,
        "updated_at": now,
    }
    # Validate before writing so an invalid record never reaches the store.
    _row_to_donation(payload)

    response = execute(get_supabase().table(_DONATIONS_TABLE).insert(payload), "create donation")
    inserted = rows(response)
    return _row_to_donation(inserted[0] if inserted else payload)


def attach_payment_intent(
    donation_id: UUID,
    payment_intent_id: str,
    client_secret: Optional[str],
    customer_id: Optional[str] = None,
) -> Donation:
    """
    Store the processor intent on a pending donation.

    The intent id column is unique, so a second donation can never claim an
    intent that is already linked (raises DuplicateRecordError). Relinking a
    donation that already has an intent raises DuplicateRecordError as well.
    """

    payload: Dict[str, Any] = {
        "stripe_payment_intent_id": payment_intent_id,
        "stripe_client_secret": client_secret,
        "updated_at": utc_now().isoformat(),
    }
    if customer_id is not None:
        payload["stripe_customer_id"] = customer_id

    response = execute(
        get_supabase()
        .table(_DONATIONS_TABLE)
        .update(payload)
        .eq("id", str(donation_id))
        .is_("stripe_payment_intent_id", "null"),
        "attach payment intent",
    )
    updated = rows(response)
    if not updated:
        if get_donation_by_id(donation_id) is None:
            raise NotFoundError(
                f"Donation {donation_id} does not exist", message="Donation not found"
            )
        raise DuplicateRecordError(f"Donation {donation_id} is already linked to a payment intent")
    return _row_to_donation(updated[0])


def get_donation_by_id(donation_id: UUID) -> Optional[Donation]:
    response = execute(
        get_supabase().table(_DONATIONS_TABLE).select("*").eq("id", str(donation_id)).limit(1),
        "get donation",
    )
    found = rows(response)
    return _row_to_donation(found[0]) if found else None


def list_donations(
    *, status: Optional[DonationStatus] = None, email: Optional[str] = None, limit: int = 500
) -> List[Donation]:
    """List donations newest first, optionally filtered by status and donor email."""

    query = get_supabase().table(_DONATIONS_TABLE).select("*")
    if status is not None:
        query = query.eq("status", status.value)
    if email:
        query = query.eq("email", email)
    response = execute(query.order("created_at", desc=True).limit(limit), "list donations")
    return [_row_to_donation(row) for row in rows(response)]


def transition_status(
    target: DonationStatus,
    *,
    donation_id: Optional[UUID] = None,
    payment_intent_id: Optional[str] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> List[Donation]:
    """
    Move matching donations to ``target`` if their current status allows it.

    Exactly one of ``donation_id`` / ``payment_intent_id`` selects the row.
    Rows that are already terminal (or already at ``target``) are left
    untouched; the returned list holds only rows that actually changed.
    """

    if (donation_id is None) == (payment_intent_id is None):
        raise ValueError("Provide exactly one of donation_id or payment_intent_id")

    sources = [status.value for status in DonationStatus.allowed_sources(target)]
    if not sources:
        return []

    payload: Dict[str, Any] = {
        **(extra or {}),
        "status": target.value,
        "updated_at": utc_now().isoformat(),
    }
    query = get_supabase().table(_DONATIONS_TABLE).update(payload)
    if donation_id is not None:
        query = query.eq("id", str(donation_id))
    else:
        query = query.eq("stripe_payment_intent_id", payment_intent_id)
    # A donation without an intent can only ever be pending.
    query = query.not_.is_("stripe_payment_intent_id", "null").in_("status", sources)

    response = execute(query, f"mark donation {target.value}")
    return [_row_to_donation(row) for row in rows(response)]


def mark_succeeded(
    payment_intent_id: str, payment_method: Optional[str], paid_at: Optional[datetime] = None
) -> List[Donation]:
    paid_at = paid_at or utc_now()
    return transition_status(
        DonationStatus.SUCCEEDED,
        payment_intent_id=payment_intent_id,
        extra={
            "stripe_payment_method": payment_method,
            "paid_at": to_iso_utc(paid_at, name="paid_at"),
        },
    )


def get_donation_by_payment_intent(payment_intent_id: str) -> Optional[Donation]:
    response = execute(
        get_supabase()
        .table(_DONATIONS_TABLE)
        .select("*")
        .eq("stripe_payment_intent_id", payment_intent_id)
        .limit(1),
        "get donation by payment intent",
    )
    found = rows(response)
    return _row_to_donation(found[0]) if found else None


def mark_failed(payment_intent_id: str, error_message: str) -> List[Donation]:
    """
    Fail a donation and record why.

    The text goes to the ``error`` column and replaces ``metadata.paymentError``;
    neither is appended to, so a replayed failure event cannot pile up entries.
    """

    donation = get_donation_by_payment_intent(payment_intent_id)
    if donation is None or not donation.status.can_transition_to(DonationStatus.FAILED):
        return []
    metadata = {**donation.metadata, "paymentError": error_message}
    return transition_status(
        DonationStatus.FAILED,
        payment_intent_id=payment_intent_id,
        extra={"error": error_message, "metadata": metadata},
    )


__all__ = [
    "create_donation",
    "attach_payment_intent",
    "get_donation_by_id",
    "get_donation_by_payment_intent",
    "list_donations",
    "transition_status",
    "mark_succeeded",
    "mark_failed",
]
