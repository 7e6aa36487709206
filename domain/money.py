"""
Domain: money helpers (pure).

Amounts charged through the processor are integer minor units (cents for
USD). Conversions round half-up to the nearest minor unit, so 49.999
becomes 5000 and 0.005 becomes 1.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

Number = Union[int, float, Decimal, str]

_COST_NON_NUMERIC = re.compile(r"[^0-9.]")


def to_minor_units(amount: Number) -> int:
    """
    Convert a major-unit amount (dollars) to integer minor units (cents).

    Floats are converted through ``str`` so that 49.999 is read as written
    instead of as its binary approximation.
    """

    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid amount: {amount!r}") from exc
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    cents = (value * Decimal("100")).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(cents)


def from_minor_units(amount: int) -> Decimal:
    """Convert integer minor units back to a two-place major-unit Decimal."""

    return (Decimal(amount) / Decimal("100")).quantize(Decimal("0.01"))


def parse_ticket_cost(cost: Optional[str]) -> Optional[float]:
    """
    Extract the ticket price from an event's display cost.

    Only costs written as a dollar amount (``"$25"``, ``"$12.50 per person"``)
    are priced; ``"Free"`` and anything else yields None.
    """

    if not cost or cost == "Free" or not cost.startswith("$"):
        return None
    digits = _COST_NON_NUMERIC.sub("", cost)
    try:
        return float(digits)
    except ValueError:
        return None


__all__ = ["to_minor_units", "from_minor_units", "parse_ticket_cost"]
