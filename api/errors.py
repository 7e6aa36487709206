"""
API error translation.

Maps the domain error taxonomy to HTTP statuses and renders request
validation failures as a flat field -> message map:

    {"success": false, "message": "Validation failed",
     "errors": {"customerName": "Full name is required"}}

Nested body locations are camel-joined (``customer.name`` -> ``customerName``)
and list indices are dropped. Missing fields are reported under the
attribute name (``last_name``), so snake_case parts are camelized too.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Sequence, Type

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from domain.errors import (
    AccessDeniedError,
    AuthenticationError,
    CapacityExceededError,
    DomainError,
    DuplicateRecordError,
    EventUnavailableError,
    InvalidStatusTransitionError,
    NotFoundError,
    PaymentConfirmationError,
    PaymentProcessorError,
    PersistenceError,
    WebhookSignatureError,
)

logger = logging.getLogger(__name__)

STATUS_CODES: Dict[Type[DomainError], int] = {
    NotFoundError: 404,
    EventUnavailableError: 400,
    CapacityExceededError: 409,
    DuplicateRecordError: 409,
    InvalidStatusTransitionError: 409,
    PaymentConfirmationError: 400,
    PaymentProcessorError: 502,
    WebhookSignatureError: 400,
    PersistenceError: 500,
    AuthenticationError: 401,
    AccessDeniedError: 403,
}

_VALUE_ERROR_PREFIX = "Value error, "
_LOCATION_ROOTS = {"body", "query", "path", "header", "form"}


def status_for(exc: DomainError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


def error_body(exc: DomainError) -> Dict[str, Any]:
    return {"success": False, "message": exc.message, "error": exc.detail, **exc.extra}


def field_key(loc: Sequence[Any]) -> str:
    """Flatten an error location into a camelCase field name."""

    parts = [str(part) for part in loc if not isinstance(part, int)]
    if parts and parts[0] in _LOCATION_ROOTS:
        root, parts = parts[0], parts[1:]
    else:
        root = "body"
    if not parts:
        return root
    words = [word for part in parts for word in part.split("_") if word]
    if not words:
        return root
    head, *tail = words
    return head + "".join(word[:1].upper() + word[1:] for word in tail)


def _message(error: Mapping[str, Any]) -> str:
    if error.get("type") == "extra_forbidden":
        return "Unknown field"
    if error.get("type") == "json_invalid":
        return "Request body is not valid JSON"
    message = str(error.get("msg", "Invalid value"))
    if message.startswith(_VALUE_ERROR_PREFIX):
        message = message[len(_VALUE_ERROR_PREFIX):]
    return message


def flatten_errors(errors: Iterable[Mapping[str, Any]]) -> Dict[str, str]:
    """First message per field, in the order pydantic reported them."""

    flat: Dict[str, str] = {}
    for error in errors:
        loc = error.get("loc") or ()
        if error.get("type") == "json_invalid":
            loc = ("body",)
        flat.setdefault(field_key(loc), _message(error))
    return flat


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=status_code, content=error_body(exc))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = flatten_errors(exc.errors())
    logger.info("Validation failed for %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": errors},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)


__all__ = [
    "STATUS_CODES",
    "status_for",
    "error_body",
    "field_key",
    "flatten_errors",
    "register_error_handlers",
]
