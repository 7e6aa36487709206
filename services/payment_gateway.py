"""
Payment gateway adapter.

Wraps the Stripe SDK behind a small interface used by the donation,
booking and webhook services:
- create_customer / create_payment_intent / retrieve_payment_intent
- verify_event: authenticate a webhook body against its signature header

`MockPaymentGateway` is used when no Stripe secret key is configured. It
synthesizes ``pi_mock_*`` intents so the booking flow can run in
development and tests without contacting Stripe.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4

import stripe

from domain.errors import PaymentProcessorError, WebhookSignatureError

logger = logging.getLogger(__name__)

MOCK_INTENT_PREFIX = "pi_mock_"


@dataclass(frozen=True, slots=True)
class PaymentIntent:
    """Processor-side payment attempt, reduced to the fields we store."""

    intent_id: str
    client_secret: Optional[str]
    amount: int
    currency: str
    status: str
    payment_method_types: List[str]
    customer_id: Optional[str] = None

    @property
    def payment_method_label(self) -> str:
        return self.payment_method_types[0] if self.payment_method_types else "card"


def _clean_metadata(metadata: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Stripe metadata values must be strings; drop empty ones."""

    return {
        key: str(value)
        for key, value in (metadata or {}).items()
        if value is not None and value != ""
    }


def _intent_from_stripe(intent: Any) -> PaymentIntent:
    return PaymentIntent(
        intent_id=intent.id,
        client_secret=getattr(intent, "client_secret", None),
        amount=int(intent.amount),
        currency=str(intent.currency),
        status=str(intent.status),
        payment_method_types=list(getattr(intent, "payment_method_types", None) or []),
        customer_id=getattr(intent, "customer", None),
    )


class PaymentGateway:
    """Base gateway: webhook verification only needs the signing secret."""

    def __init__(self, webhook_secret: Optional[str] = None) -> None:
        self._webhook_secret = webhook_secret

    @property
    def is_live(self) -> bool:
        return False

    def create_customer(
        self,
        *,
        email: str,
        name: str,
        phone: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Optional[str]:
        raise NotImplementedError

    def create_payment_intent(
        self,
        *,
        amount: int,
        currency: str,
        customer_id: Optional[str] = None,
        description: Optional[str] = None,
        receipt_email: Optional[str] = None,
        shipping: Optional[Mapping[str, Any]] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> PaymentIntent:
        raise NotImplementedError

    def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent:
        raise NotImplementedError

    def verify_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """
        Authenticate a webhook body and return the decoded event.

        Raises:
            WebhookSignatureError: no signing secret, no signature header,
                a signature mismatch or a stale timestamp (older than five
                minutes), or a body that is not a JSON event
        """

        if not self._webhook_secret:
            raise WebhookSignatureError("Webhook signing secret is not configured")
        if not signature:
            raise WebhookSignatureError("Missing Stripe-Signature header")

        try:
            stripe.Webhook.construct_event(payload, signature, self._webhook_secret)
        except ValueError as e:
            # Bodies that are not UTF-8 or not JSON.
            raise WebhookSignatureError(f"Invalid payload: {e}") from e
        except stripe.SignatureVerificationError as e:
            raise WebhookSignatureError(str(e)) from e

        event = json.loads(payload)
        if not isinstance(event, dict) or "type" not in event:
            raise WebhookSignatureError("Invalid payload: not a Stripe event")
        return event


class StripePaymentGateway(PaymentGateway):
    """Gateway backed by the Stripe API (per-request api_key, no global state)."""

    def __init__(self, secret_key: str, webhook_secret: Optional[str] = None) -> None:
        super().__init__(webhook_secret)
        self._secret_key = secret_key

    @property
    def is_live(self) -> bool:
        return True

    def create_customer(self, *, email, name, phone=None, metadata=None):
        try:
            customer = stripe.Customer.create(
                api_key=self._secret_key,
                email=email,
                name=name,
                phone=phone,
                metadata=_clean_metadata(metadata),
            )
        except stripe.StripeError as e:
            logger.exception("Stripe customer creation failed for %s", email)
            raise PaymentProcessorError(e.user_message or str(e)) from e
        return customer.id

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
        params: Dict[str, Any] = {
            "amount": amount,
            "currency": currency,
            "metadata": _clean_metadata(metadata),
        }
        if customer_id:
            params["customer"] = customer_id
        if description:
            params["description"] = description
        if receipt_email:
            params["receipt_email"] = receipt_email
        if shipping:
            params["shipping"] = shipping

        try:
            intent = stripe.PaymentIntent.create(api_key=self._secret_key, **params)
        except stripe.StripeError as e:
            logger.exception("Stripe payment intent creation failed (amount=%s)", amount)
            raise PaymentProcessorError(e.user_message or str(e)) from e
        return _intent_from_stripe(intent)

    def retrieve_payment_intent(self, intent_id):
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id, api_key=self._secret_key)
        except stripe.StripeError as e:
            logger.exception("Stripe payment intent lookup failed for %s", intent_id)
            raise PaymentProcessorError(e.user_message or str(e)) from e
        return _intent_from_stripe(intent)


class MockPaymentGateway(PaymentGateway):
    """Degraded-mode gateway: fabricates intents and never calls Stripe."""

    def create_customer(self, *, email, name, phone=None, metadata=None):
        return None

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
        stamp = f"{int(time.time() * 1000)}_{uuid4().hex[:8]}"
        logger.info("Stripe not configured, creating mock payment intent for amount=%s", amount)
        return PaymentIntent(
            intent_id=f"{MOCK_INTENT_PREFIX}{stamp}",
            client_secret=f"{MOCK_INTENT_PREFIX}secret_{stamp}",
            amount=amount,
            currency=currency,
            status="requires_payment_method",
            payment_method_types=["card"],
            customer_id=customer_id,
        )

    def retrieve_payment_intent(self, intent_id):
        raise PaymentProcessorError(
            "Payment processing is not configured",
            message="Payment confirmation unavailable",
        )


def build_gateway(secret_key: Optional[str], webhook_secret: Optional[str]) -> PaymentGateway:
    """Pick the Stripe gateway when a secret key is configured, the mock otherwise."""

    if secret_key:
        return StripePaymentGateway(secret_key, webhook_secret)
    logger.warning("STRIPE_SECRET_KEY not found. Payment processing will be disabled.")
    return MockPaymentGateway(webhook_secret)


__all__ = [
    "PaymentIntent",
    "PaymentGateway",
    "StripePaymentGateway",
    "MockPaymentGateway",
    "build_gateway",
    "MOCK_INTENT_PREFIX",
]
