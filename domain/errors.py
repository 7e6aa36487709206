"""
Domain error taxonomy.

Each error carries a short ``message`` (the headline shown to API clients)
and an optional ``detail``. The API layer maps each class to an HTTP status;
services and repositories only raise them.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for errors that are surfaced to API clients."""

    message: str = "Request failed"

    def __init__(
        self,
        detail: Optional[str] = None,
        *,
        message: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        if message is not None:
            self.message = message
        self.detail = detail or self.message
        self.extra: Dict[str, Any] = dict(extra or {})
        super().__init__(self.detail)


class NotFoundError(DomainError):
    """A referenced record does not exist (or is soft-deleted)."""

    message = "Not found"


class EventUnavailableError(DomainError):
    """The event exists but cannot be booked."""

    message = "Event is not available"


class CapacityExceededError(DomainError):
    """The requested quantity exceeds the remaining event capacity."""

    message = "Insufficient tickets available"

    def __init__(self, available: int, requested: int) -> None:
        available = max(available, 0)
        plural = "" if available == 1 else "s"
        super().__init__(
            f"Only {available} ticket{plural} available",
            extra={"availableTickets": available, "requestedTickets": requested},
        )
        self.available = available
        self.requested = requested


class DuplicateRecordError(DomainError):
    """A uniqueness constraint was violated (e.g. payment intent id)."""

    message = "Duplicate record"


class InvalidStatusTransitionError(DomainError):
    """A status change would leave a terminal state or skip the machine."""

    message = "Invalid status transition"


class PaymentProcessorError(DomainError):
    """The payment processor rejected or failed a request."""

    message = "Payment processor error"


class PaymentConfirmationError(DomainError):
    """The browser-reported payment does not check out with the processor."""

    message = "Payment confirmation failed"


class WebhookSignatureError(DomainError):
    """A webhook payload could not be authenticated."""

    message = "Webhook Error"


class PersistenceError(DomainError):
    """The data store failed to read or write."""

    message = "Server error"


class AuthenticationError(DomainError):
    """Missing, invalid or foreign admin credentials."""

    message = "Token is not valid"


class AccessDeniedError(DomainError):
    """Caller is authenticated (or anonymous) but not allowed to see this record."""

    message = "Access denied"


__all__ = [
    "DomainError",
    "NotFoundError",
    "EventUnavailableError",
    "CapacityExceededError",
    "DuplicateRecordError",
    "InvalidStatusTransitionError",
    "PaymentProcessorError",
    "PaymentConfirmationError",
    "WebhookSignatureError",
    "PersistenceError",
    "AuthenticationError",
    "AccessDeniedError",
]
