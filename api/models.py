"""
API Request Models.

One pydantic model per endpoint body. All of them:
- reject unknown fields (``extra="forbid"``)
- use strict scalar types, so ``"5"`` is not accepted where a number is
  expected and ``1`` is not accepted where a string is
- accept camelCase JSON keys (``firstName``) for snake_case attributes

Required fields are declared ``Field(None, validate_default=True)`` so their
validator also runs when the key is missing; a missing field then reports
the same message as the donate/booking forms show
(``"First name is required (min 2 chars)."``) instead of pydantic's generic "Field required".
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel

from domain.donation import DonationOptionType
from domain.money import to_minor_units
from domain.payment_status import DonationStatus, PaymentMethod, TicketStatus
from domain.ticket import MAX_TICKETS_PER_BOOKING

DONATION_EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
BOOKING_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
REGISTRATION_EMAIL_RE = re.compile(r".+@.+\..+")
DONATION_PHONE_RE = re.compile(r"^[\d\-+() ]{7,20}$")
BOOKING_PHONE_RE = re.compile(r"^\+?[1-9]\d{0,15}$")
PHONE_SEPARATORS_RE = re.compile(r"[\s\-()]")
COUNTRY_CODE_RE = re.compile(r"^[A-Z]{2}$")
ZIP_RE = re.compile(r"^\w{3,12}$")


class RequestModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _positive_number(value: Any, message: str) -> float:
    """Numbers only (no strings, no booleans), finite and at least one cent."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(message)
    if not math.isfinite(value) or to_minor_units(value) < 1:
        raise ValueError(message)
    return value


def _parse_uuid(value: Optional[str], required: str, invalid: str) -> str:
    if _blank(value):
        raise ValueError(required)
    try:
        UUID(value.strip())
    except ValueError as e:
        raise ValueError(invalid) from e
    return value.strip()


def _bounded_text(value: Optional[str], required: str, too_short: str, too_long: str) -> str:
    if _blank(value):
        raise ValueError(required)
    value = value.strip()
    if len(value) < 2:
        raise ValueError(too_short)
    if len(value) > 100:
        raise ValueError(too_long)
    return value


# ============================================================================
# Donation Models
# ============================================================================

class DonationRequest(RequestModel):
    """Donate form submission. ``amount`` is in major units (dollars)."""

    first_name: Optional[StrictStr] = Field(None, validate_default=True)
    last_name: Optional[StrictStr] = Field(None, validate_default=True)
    org: Optional[StrictStr] = None
    title: Optional[StrictStr] = None
    email: Optional[StrictStr] = Field(None, validate_default=True)
    email_work: Optional[StrictStr] = None
    phone: Optional[StrictStr] = None
    address: Optional[StrictStr] = None
    city: Optional[StrictStr] = None
    state: Optional[StrictStr] = None
    zip: Optional[StrictStr] = None
    country: Optional[StrictStr] = None
    volunteer: Optional[StrictBool] = None
    family_services: Optional[StrictBool] = None
    amount: Optional[float] = Field(None, validate_default=True)
    payment_method: Optional[StrictStr] = Field(None, validate_default=True)
    metadata: Optional[Dict[StrictStr, StrictStr]] = None

    @field_validator("first_name")
    @classmethod
    def _first_name(cls, value: Optional[str]) -> str:
        if _blank(value) or len(value.strip()) < 2:
            raise ValueError("First name is required (min 2 chars).")
        return value.strip()

    @field_validator("last_name")
    @classmethod
    def _last_name(cls, value: Optional[str]) -> str:
        if _blank(value) or len(value.strip()) < 2:
            raise ValueError("Last name is required (min 2 chars).")
        return value.strip()

    @field_validator("email")
    @classmethod
    def _email(cls, value: Optional[str]) -> str:
        if value is None or not DONATION_EMAIL_RE.match(value):
            raise ValueError("A valid email is required.")
        return value

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value: Any) -> float:
        return _positive_number(value, "Amount must be greater than 0.")

    @field_validator("payment_method")
    @classmethod
    def _payment_method(cls, value: Optional[str]) -> str:
        if _blank(value):
            raise ValueError("Payment method is required.")
        allowed = [method.value for method in PaymentMethod]
        if value not in allowed:
            raise ValueError(f"Payment method must be one of: {', '.join(allowed)}.")
        return value

    @field_validator("phone")
    @classmethod
    def _phone(cls, value: Optional[str]) -> Optional[str]:
        if value and not DONATION_PHONE_RE.match(value):
            raise ValueError("Phone number is invalid.")
        return value or None

    @field_validator("country")
    @classmethod
    def _country(cls, value: Optional[str]) -> Optional[str]:
        if value and not COUNTRY_CODE_RE.match(value):
            raise ValueError("Country must be a 2-letter code.")
        return value or None

    @field_validator("zip")
    @classmethod
    def _zip(cls, value: Optional[str]) -> Optional[str]:
        if value and not ZIP_RE.match(value):
            raise ValueError("Zip/Postal code is invalid.")
        return value or None

    @field_validator("address")
    @classmethod
    def _address(cls, value: Optional[str]) -> Optional[str]:
        if value and len(value) < 3:
            raise ValueError("Address must be at least 3 characters.")
        return value or None

    @field_validator("city")
    @classmethod
    def _city(cls, value: Optional[str]) -> Optional[str]:
        if value and len(value) < 2:
            raise ValueError("City must be at least 2 characters.")
        return value or None

    @field_validator("state")
    @classmethod
    def _state(cls, value: Optional[str]) -> Optional[str]:
        if value and len(value) < 2:
            raise ValueError("State must be at least 2 characters.")
        return value or None

    @field_validator("email_work")
    @classmethod
    def _email_work(cls, value: Optional[str]) -> Optional[str]:
        if value and not DONATION_EMAIL_RE.match(value):
            raise ValueError("Work email is invalid.")
        return value or None


class DonationStatusUpdate(RequestModel):
    status: Optional[StrictStr] = Field(None, validate_default=True)

    @field_validator("status")
    @classmethod
    def _status(cls, value: Optional[str]) -> str:
        if _blank(value):
            raise ValueError("Status is required")
        if value not in {status.value for status in DonationStatus}:
            raise ValueError("Invalid status")
        return value


# ============================================================================
# Ticket Booking Models
# ============================================================================

class CustomerRequest(RequestModel):
    name: Optional[StrictStr] = Field(None, validate_default=True)
    email: Optional[StrictStr] = Field(None, validate_default=True)
    phone: Optional[StrictStr] = Field(None, validate_default=True)
    city: Optional[StrictStr] = Field(None, validate_default=True)
    state: Optional[StrictStr] = Field(None, validate_default=True)
    country: Optional[StrictStr] = Field(None, validate_default=True)

    @field_validator("name")
    @classmethod
    def _name(cls, value: Optional[str]) -> str:
        return _bounded_text(
            value,
            "Full name is required",
            "Name must be at least 2 characters long",
            "Name must be less than 100 characters",
        )

    @field_validator("email")
    @classmethod
    def _email(cls, value: Optional[str]) -> str:
        if _blank(value):
            raise ValueError("Email address is required")
        value = value.strip()
        if not BOOKING_EMAIL_RE.match(value):
            raise ValueError("Please enter a valid email address")
        return value.lower()

    @field_validator("phone")
    @classmethod
    def _phone(cls, value: Optional[str]) -> str:
        if _blank(value):
            raise ValueError("Phone number is required")
        if not BOOKING_PHONE_RE.match(PHONE_SEPARATORS_RE.sub("", value)):
            raise ValueError("Please enter a valid phone number")
        return value.strip()

    @field_validator("city")
    @classmethod
    def _city(cls, value: Optional[str]) -> str:
        return _bounded_text(
            value,
            "City is required",
            "City must be at least 2 characters long",
            "City must be less than 100 characters",
        )

    @field_validator("state")
    @classmethod
    def _state(cls, value: Optional[str]) -> str:
        return _bounded_text(
            value,
            "State/Province is required",
            "State must be at least 2 characters long",
            "State must be less than 100 characters",
        )

    @field_validator("country")
    @classmethod
    def _country(cls, value: Optional[str]) -> str:
        return _bounded_text(
            value,
            "Country is required",
            "Country must be at least 2 characters long",
            "Country must be less than 100 characters",
        )


class BookingRequest(RequestModel):
    event_id: Optional[StrictStr] = Field(None, validate_default=True)
    customer: Optional[CustomerRequest] = Field(None, validate_default=True)
    quantity: Optional[StrictInt] = Field(None, validate_default=True)
    metadata: Optional[Dict[StrictStr, StrictStr]] = None

    @field_validator("event_id")
    @classmethod
    def _event_id(cls, value: Optional[str]) -> str:
        return _parse_uuid(value, "Event ID is required", "Invalid event ID format")

    @field_validator("customer")
    @classmethod
    def _customer(cls, value: Optional[CustomerRequest]) -> CustomerRequest:
        if value is None:
            raise ValueError("Customer information is required")
        return value

    @field_validator("quantity")
    @classmethod
    def _quantity(cls, value: Optional[int]) -> int:
        if value is None:
            raise ValueError("Number of tickets is required")
        if value < 1:
            raise ValueError("Quantity must be at least 1")
        if value > MAX_TICKETS_PER_BOOKING:
            raise ValueError(f"You can book maximum {MAX_TICKETS_PER_BOOKING} tickets at a time")
        return value


class TicketStatusUpdate(RequestModel):
    status: Optional[StrictStr] = Field(None, validate_default=True)

    @field_validator("status")
    @classmethod
    def _status(cls, value: Optional[str]) -> str:
        if _blank(value):
            raise ValueError("Status is required")
        if value not in {status.value for status in TicketStatus}:
            raise ValueError("Invalid status")
        return value


class ConfirmPaymentRequest(RequestModel):
    payment_intent_id: Optional[StrictStr] = Field(None, validate_default=True)
    ticket_id: Optional[StrictStr] = Field(None, validate_default=True)

    @field_validator("payment_intent_id")
    @classmethod
    def _payment_intent_id(cls, value: Optional[str]) -> str:
        if _blank(value):
            raise ValueError("Payment intent ID is required")
        return value.strip()

    @field_validator("ticket_id")
    @classmethod
    def _ticket_id(cls, value: Optional[str]) -> str:
        return _parse_uuid(value, "Ticket ID is required", "Invalid ticket ID format")


# ============================================================================
# Event Models
# ============================================================================

_EVENT_REQUIRED = {
    "date": "Date",
    "title": "Title",
    "time": "Time",
    "place": "Place",
    "desc": "Description",
    "action_type": "Action type",
    "cost": "Cost",
}


class EventRequest(RequestModel):
    """Create/replace an event. ``ticketCost`` is derived from ``cost``."""

    date: Optional[StrictStr] = Field(None, validate_default=True)
    title: Optional[StrictStr] = Field(None, validate_default=True)
    time: Optional[StrictStr] = Field(None, validate_default=True)
    place: Optional[StrictStr] = Field(None, validate_default=True)
    desc: Optional[StrictStr] = Field(None, validate_default=True)
    action_type: Optional[StrictStr] = Field(None, validate_default=True)
    cost: Optional[StrictStr] = Field(None, validate_default=True)
    capacity: Optional[StrictInt] = None
    highlights: Optional[List[StrictStr]] = None
    special_gift: Optional[StrictStr] = None

    @field_validator(*_EVENT_REQUIRED)
    @classmethod
    def _required(cls, value: Optional[str], info: ValidationInfo) -> str:
        if _blank(value):
            raise ValueError(f"{_EVENT_REQUIRED[info.field_name]} is required")
        return value.strip()

    @field_validator("capacity")
    @classmethod
    def _capacity(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 1:
            raise ValueError("Capacity must be a positive number")
        return value

    @field_validator("highlights", mode="before")
    @classmethod
    def _highlights(cls, value: Any) -> Any:
        # Forms post highlights as a JSON-encoded list.
        if isinstance(value, str):
            try:
                decoded = json.loads(value)
            except ValueError:
                return [value]
            return decoded if isinstance(decoded, list) else [value]
        return value


# ============================================================================
# Donation Option Models
# ============================================================================

def _option_type(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in {t.value for t in DonationOptionType}:
        allowed = ", ".join(t.value for t in DonationOptionType)
        raise ValueError(f"Type must be one of: {allowed}")
    return value


class DonationOptionRequest(RequestModel):
    group: Optional[StrictStr] = Field(None, validate_default=True)
    label: Optional[StrictStr] = Field(None, validate_default=True)
    amount: Optional[float] = Field(None, validate_default=True)
    type: Optional[StrictStr] = Field(None, validate_default=True)
    order: Optional[StrictInt] = None
    active: Optional[StrictBool] = None

    @field_validator("group", "label")
    @classmethod
    def _required_text(cls, value: Optional[str], info: ValidationInfo) -> str:
        if _blank(value):
            raise ValueError(f"{info.field_name.capitalize()} is required")
        return value.strip()

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value: Any) -> float:
        return _positive_number(value, "Amount must be greater than 0")

    @field_validator("type")
    @classmethod
    def _type(cls, value: Optional[str]) -> str:
        if _blank(value):
            raise ValueError("Type is required")
        return _option_type(value)


class DonationOptionUpdate(RequestModel):
    """Partial update: only the fields present are changed."""

    group: Optional[StrictStr] = None
    label: Optional[StrictStr] = None
    amount: Optional[float] = None
    type: Optional[StrictStr] = None
    order: Optional[StrictInt] = None
    active: Optional[StrictBool] = None

    @field_validator("group", "label")
    @classmethod
    def _text(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        if value is not None and _blank(value):
            raise ValueError(f"{info.field_name.capitalize()} cannot be empty")
        return value.strip() if value is not None else None

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value: Any) -> Optional[float]:
        if value is None:
            return None
        return _positive_number(value, "Amount must be greater than 0")

    @field_validator("type")
    @classmethod
    def _type(cls, value: Optional[str]) -> Optional[str]:
        return _option_type(value)


# ============================================================================
# Form Models
# ============================================================================

class ContactRequest(RequestModel):
    name: Optional[StrictStr] = Field(None, validate_default=True)
    email: Optional[StrictStr] = Field(None, validate_default=True)
    subject: Optional[StrictStr] = Field(None, validate_default=True)
    message: Optional[StrictStr] = Field(None, validate_default=True)

    @field_validator("name")
    @classmethod
    def _name(cls, value: Optional[str]) -> str:
        if _blank(value) or len(value.strip()) < 2:
            raise ValueError("Full name is required (min 2 chars).")
        return value.strip()

    @field_validator("email")
    @classmethod
    def _email(cls, value: Optional[str]) -> str:
        if value is None or not DONATION_EMAIL_RE.match(value):
            raise ValueError("A valid email is required.")
        return value

    @field_validator("subject")
    @classmethod
    def _subject(cls, value: Optional[str]) -> str:
        if _blank(value) or len(value.strip()) < 2:
            raise ValueError("Subject is required (min 2 chars).")
        return value.strip()

    @field_validator("message")
    @classmethod
    def _message(cls, value: Optional[str]) -> str:
        if _blank(value) or len(value.strip()) < 10:
            raise ValueError("Message must be at least 10 characters.")
        return value.strip()


_REGISTRATION_REQUIRED = {
    "name": "Name is required",
    "city": "City is required",
    "state": "State is required",
    "country": "Country is required",
}


class RegistrationRequest(RequestModel):
    event_id: Optional[StrictStr] = Field(None, validate_default=True)
    name: Optional[StrictStr] = Field(None, validate_default=True)
    email: Optional[StrictStr] = Field(None, validate_default=True)
    phone: Optional[StrictStr] = None
    location: Optional[StrictStr] = None
    city: Optional[StrictStr] = Field(None, validate_default=True)
    state: Optional[StrictStr] = Field(None, validate_default=True)
    country: Optional[StrictStr] = Field(None, validate_default=True)

    @field_validator("event_id")
    @classmethod
    def _event_id(cls, value: Optional[str]) -> str:
        return _parse_uuid(value, "Event ID is required", "Invalid event ID format")

    @field_validator(*_REGISTRATION_REQUIRED)
    @classmethod
    def _required(cls, value: Optional[str], info: ValidationInfo) -> str:
        if _blank(value):
            raise ValueError(_REGISTRATION_REQUIRED[info.field_name])
        return value.strip()

    @field_validator("email")
    @classmethod
    def _email(cls, value: Optional[str]) -> str:
        if _blank(value):
            raise ValueError("Email is required")
        if not REGISTRATION_EMAIL_RE.match(value):
            raise ValueError("Please enter a valid email address")
        return value.strip()


class CommunitySignupRequest(RequestModel):
    name: Optional[StrictStr] = Field(None, validate_default=True)
    email: Optional[StrictStr] = Field(None, validate_default=True)

    @field_validator("name")
    @classmethod
    def _name(cls, value: Optional[str]) -> str:
        if _blank(value):
            raise ValueError("Name is required.")
        return value.strip()

    @field_validator("email")
    @classmethod
    def _email(cls, value: Optional[str]) -> str:
        if _blank(value):
            raise ValueError("Email is required.")
        return value.strip()


# ============================================================================
# Auth Models
# ============================================================================

class LoginRequest(RequestModel):
    email: Optional[StrictStr] = Field(None, validate_default=True)
    password: Optional[StrictStr] = Field(None, validate_default=True)

    @field_validator("email")
    @classmethod
    def _email(cls, value: Optional[str]) -> str:
        if value is None or not DONATION_EMAIL_RE.match(value):
            raise ValueError("Please enter a valid email")
        return value

    @field_validator("password")
    @classmethod
    def _password(cls, value: Optional[str]) -> str:
        if not value:
            raise ValueError("Password is required")
        return value
