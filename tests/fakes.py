"""
In-memory test doubles.

`FakeSupabase` implements the subset of the supabase-py / PostgREST query
builder the repositories use, the `reserve_event_tickets` stored procedure
and a storage bucket. `RecordingGateway` is a payment gateway that records
calls and never contacts Stripe; webhook signatures are still verified by
the real Stripe SDK (see `sign_payload`).
"""

from __future__ import annotations

import copy
import hashlib
import hmac
import json
import threading
import time
from itertools import count
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from postgrest.exceptions import APIError

from domain.errors import PaymentProcessorError
from services.payment_gateway import PaymentGateway, PaymentIntent

UNIQUE_COLUMNS = {
    "donations": ("stripe_payment_intent_id",),
    "ticket_bookings": ("payment_intent_id",),
}


class FakeResponse:
    def __init__(self, data: Any) -> None:
        self.data = data
        self.error = None


def _sort_key(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return (False, float(value), "")
        except ValueError:
            return (False, float("-inf"), value)
    if value is None:
        return (True, 0.0, "")
    return (False, float(value), "")


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self._db = db
        self._table = table
        self._op = "select"
        self._payload: Any = None
        self._filters: List[Callable[[Dict[str, Any]], bool]] = []
        self._negate_next = False
        self._orders: List[tuple] = []
        self._limit: Optional[int] = None

    # -- operations -------------------------------------------------------

    def select(self, *columns: str, count: Optional[str] = None) -> "FakeQuery":
        self._op = "select"
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self._op, self._payload = "insert", payload
        return self

    def update(self, payload: Dict[str, Any]) -> "FakeQuery":
        self._op, self._payload = "update", payload
        return self

    def delete(self) -> "FakeQuery":
        self._op = "delete"
        return self

    # -- filters ----------------------------------------------------------

    def _add(self, predicate: Callable[[Dict[str, Any]], bool]) -> "FakeQuery":
        if self._negate_next:
            self._negate_next = False
            self._filters.append(lambda row: not predicate(row))
        else:
            self._filters.append(predicate)
        return self

    @property
    def not_(self) -> "FakeQuery":
        self._negate_next = True
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        return self._add(lambda row: row.get(column) == value)

    def neq(self, column: str, value: Any) -> "FakeQuery":
        return self._add(lambda row: row.get(column) != value)

    def in_(self, column: str, values: List[Any]) -> "FakeQuery":
        allowed = list(values)
        return self._add(lambda row: row.get(column) in allowed)

    def is_(self, column: str, value: str) -> "FakeQuery":
        assert value == "null", "only IS NULL is supported"
        return self._add(lambda row: row.get(column) is None)

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self._orders.append((column, desc))
        return self

    def limit(self, size: int) -> "FakeQuery":
        self._limit = size
        return self

    # -- execution --------------------------------------------------------

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(predicate(row) for predicate in self._filters)

    def execute(self) -> FakeResponse:
        self._db.queries.append((self._table, self._op))
        if self._table in self._db.failing_tables:
            raise APIError({"message": "connection refused", "code": "08006", "hint": None, "details": None})

        table = self._db.tables.setdefault(self._table, [])
        if self._op == "insert":
            payloads = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = []
            for payload in payloads:
                row = copy.deepcopy(payload)
                self._db.check_unique(self._table, row, ignore=None)
                table.append(row)
                inserted.append(copy.deepcopy(row))
            return FakeResponse(inserted)

        matched = [row for row in table if self._matches(row)]
        if self._op == "update":
            for row in matched:
                candidate = {**row, **copy.deepcopy(self._payload)}
                self._db.check_unique(self._table, candidate, ignore=row)
            for row in matched:
                row.update(copy.deepcopy(self._payload))
            return FakeResponse([copy.deepcopy(row) for row in matched])
        if self._op == "delete":
            for row in matched:
                table.remove(row)
            return FakeResponse([copy.deepcopy(row) for row in matched])

        for column, desc in reversed(self._orders):
            matched.sort(key=lambda row: _sort_key(row.get(column)), reverse=desc)
        if self._limit is not None:
            matched = matched[: self._limit]
        return FakeResponse([copy.deepcopy(row) for row in matched])


class FakeRpc:
    def __init__(self, call: Callable[[], Any]) -> None:
        self._call = call

    def execute(self) -> FakeResponse:
        return FakeResponse(self._call())


class FakeBucket:
    def __init__(self, name: str, files: Dict[str, bytes]) -> None:
        self._name = name
        self._files = files

    def upload(self, path: str, content: bytes, options: Optional[Dict[str, str]] = None) -> None:
        self._files[f"{self._name}/{path}"] = content

    def get_public_url(self, path: str) -> str:
        return f"https://storage.test/{self._name}/{path}"


class FakeStorage:
    def __init__(self) -> None:
        self.files: Dict[str, bytes] = {}

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(bucket, self.files)


class FakeSupabase:
    """Supabase client double backed by plain lists of row dicts."""

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.queries: List[tuple] = []
        self.failing_tables: set = set()
        self.storage = FakeStorage()
        # Stands in for the event row lock taken by reserve_event_tickets.
        self.event_lock = threading.Lock()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, name: str) -> List[Dict[str, Any]]:
        return self.tables.get(name, [])

    def check_unique(self, table: str, row: Dict[str, Any], ignore: Optional[Dict[str, Any]]) -> None:
        for column in UNIQUE_COLUMNS.get(table, ()):
            value = row.get(column)
            if value is None:
                continue
            for other in self.tables.get(table, []):
                if other is not ignore and other.get(column) == value:
                    raise APIError(
                        {
                            "message": f'duplicate key value violates unique constraint "{table}_{column}_key"',
                            "code": "23505",
                            "hint": None,
                            "details": None,
                        }
                    )

    def rpc(self, name: str, params: Dict[str, Any]) -> FakeRpc:
        assert name == "reserve_event_tickets", f"unknown function {name}"
        return FakeRpc(lambda: self._reserve_event_tickets(params["p_event_id"], params["p_booking"]))

    def _reserve_event_tickets(self, event_id: str, booking: Dict[str, Any]) -> Dict[str, Any]:
        with self.event_lock:
            return self._reserve_locked(event_id, booking)

    def _reserve_locked(self, event_id: str, booking: Dict[str, Any]) -> Dict[str, Any]:
        event = next((row for row in self.rows("events") if row["id"] == event_id), None)
        if event is None:
            return {"success": False, "error": "EVENT_NOT_FOUND"}
        if not event.get("is_active", True):
            return {"success": False, "error": "EVENT_INACTIVE"}

        available = None
        if event.get("capacity") is not None:
            sold = sum(
                row["quantity"]
                for row in self.rows("ticket_bookings")
                if row["event_id"] == event_id and row["status"] in ("reserved", "confirmed")
            )
            available = event["capacity"] - sold
            if booking["quantity"] > available:
                return {
                    "success": False,
                    "error": "INSUFFICIENT_CAPACITY",
                    "available": max(available, 0),
                }

        row = copy.deepcopy(booking)
        row.setdefault("id", str(uuid4()))
        row.setdefault("payment_intent_id", None)
        row.setdefault("client_secret", None)
        row.setdefault("stripe_customer_id", None)
        row.setdefault("payment_method", None)
        row["total_amount"] = row["quantity"] * row["unit_price"]
        self.tables.setdefault("ticket_bookings", []).append(row)
        return {"success": True, "booking": copy.deepcopy(row), "available": available}


class RecordingGateway(PaymentGateway):
    """Payment gateway double: deterministic intents, recorded calls."""

    def __init__(self, webhook_secret: Optional[str] = None) -> None:
        super().__init__(webhook_secret)
        self._ids = count(1)
        self.customers: List[Dict[str, Any]] = []
        self.intents: Dict[str, PaymentIntent] = {}
        self.intent_requests: List[Dict[str, Any]] = []
        self.fail_with: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return True

    def create_customer(self, *, email, name, phone=None, metadata=None):
        if self.fail_with:
            raise PaymentProcessorError(self.fail_with)
        customer_id = f"cus_test_{next(self._ids)}"
        self.customers.append({"id": customer_id, "email": email, "name": name, "metadata": metadata})
        return customer_id

    def create_payment_intent(
        self,
        *,
        amount,
        currency,
        customer_id=None,
        description=None,
        receipt_email=None,
        shipping=None,
        metadata=None,
    ):
        if self.fail_with:
            raise PaymentProcessorError(self.fail_with)
        number = next(self._ids)
        intent = PaymentIntent(
            intent_id=f"pi_test_{number}",
            client_secret=f"pi_test_{number}_secret_abc",
            amount=amount,
            currency=currency,
            status="requires_payment_method",
            payment_method_types=["card"],
            customer_id=customer_id,
        )
        self.intents[intent.intent_id] = intent
        self.intent_requests.append(
            {
                "amount": amount,
                "currency": currency,
                "customer_id": customer_id,
                "description": description,
                "receipt_email": receipt_email,
                "metadata": dict(metadata or {}),
            }
        )
        return intent

    def set_status(self, intent_id: str, status: str) -> None:
        intent = self.intents[intent_id]
        self.intents[intent_id] = PaymentIntent(
            intent_id=intent.intent_id,
            client_secret=intent.client_secret,
            amount=intent.amount,
            currency=intent.currency,
            status=status,
            payment_method_types=intent.payment_method_types,
            customer_id=intent.customer_id,
        )

    def retrieve_payment_intent(self, intent_id):
        if intent_id not in self.intents:
            raise PaymentProcessorError(f"No such payment_intent: '{intent_id}'")
        return self.intents[intent_id]


def sign_payload(payload: str, secret: str, timestamp: Optional[int] = None) -> str:
    """Build a valid ``Stripe-Signature`` header for ``payload``."""

    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def stripe_event(event_type: str, data_object: Dict[str, Any]) -> str:
    """Serialize a minimal Stripe event body."""

    return json.dumps(
        {
            "id": f"evt_{uuid4().hex[:12]}",
            "object": "event",
            "type": event_type,
            "data": {"object": data_object},
        }
    )
