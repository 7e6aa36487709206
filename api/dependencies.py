"""Request-scoped accessors for objects created once in `create_app`."""

from __future__ import annotations

from typing import Any, Sequence

from fastapi import Request
from fastapi.exceptions import RequestValidationError

from api.settings import Settings
from services.payment_gateway import PaymentGateway


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway(request: Request) -> PaymentGateway:
    return request.app.state.gateway


async def raw_body(request: Request) -> bytes:
    """The unparsed request body (webhook signatures are computed over it)."""

    return await request.body()


def invalid_field(loc: Sequence[Any], message: str) -> RequestValidationError:
    """Build a validation error for a check that happens outside a request model."""

    return RequestValidationError([{"loc": tuple(loc), "msg": message, "type": "value_error"}])
