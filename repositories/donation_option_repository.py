"""
Donation option repository (persistence).

Preset amounts grouped for the donate page. The column for the display
group is ``group_name`` and the sort key is ``sort_order`` because ``group``
and ``order`` are SQL keywords.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID, uuid4

from domain.donation import DonationOption, DonationOptionType
from repositories.client import execute, get_supabase, rows

_OPTIONS_TABLE: str = "donation_options"

_COLUMNS = {
    "group": "group_name",
    "label": "label",
    "amount": "amount",
    "type": "type",
    "active": "active",
    "order": "sort_order",
}


def _row_to_option(row: Mapping[str, Any]) -> DonationOption:
    return DonationOption(
        option_id=UUID(str(row["id"])),
        group=str(row["group_name"]),
        label=str(row["label"]),
        amount=Decimal(str(row["amount"])),
        type=DonationOptionType(str(row["type"])),
        active=bool(row.get("active", True)),
        order=int(row.get("sort_order") or 0),
    )


def _to_columns(fields: Mapping[str, Any]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, Decimal):
            value = str(value)
        elif isinstance(value, DonationOptionType):
            value = value.value
        payload[_COLUMNS[key]] = value
    return payload


def list_options(option_type: Optional[DonationOptionType] = None) -> List[DonationOption]:
    """Active options sorted by display order, then amount."""

    query = get_supabase().table(_OPTIONS_TABLE).select("*").eq("active", True)
    if option_type is not None:
        query = query.eq("type", option_type.value)
    response = execute(query.order("sort_order").order("amount"), "list donation options")
    return [_row_to_option(row) for row in rows(response)]


def create_option(fields: Mapping[str, Any]) -> DonationOption:
    payload = {"id": str(uuid4()), "active": True, "sort_order": 0, **_to_columns(fields)}
    response = execute(get_supabase().table(_OPTIONS_TABLE).insert(payload), "create donation option")
    inserted = rows(response)
    return _row_to_option(inserted[0] if inserted else payload)


def update_option(option_id: UUID, fields: Mapping[str, Any]) -> Optional[DonationOption]:
    """Apply a partial update. Returns None if the option does not exist."""

    if not fields:
        response = execute(
            get_supabase().table(_OPTIONS_TABLE).select("*").eq("id", str(option_id)).limit(1),
            "get donation option",
        )
    else:
        response = execute(
            get_supabase().table(_OPTIONS_TABLE).update(_to_columns(fields)).eq("id", str(option_id)),
            "update donation option",
        )
    found = rows(response)
    return _row_to_option(found[0]) if found else None


def delete_option(option_id: UUID) -> bool:
    response = execute(
        get_supabase().table(_OPTIONS_TABLE).delete().eq("id", str(option_id)),
        "delete donation option",
    )
    return bool(rows(response))


__all__ = ["list_options", "create_option", "update_option", "delete_option"]
