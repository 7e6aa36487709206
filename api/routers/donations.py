"""
Donations API Endpoints.

Public donate form submission and processor webhook, plus the admin
listing and status override.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header

from api.auth import AdminPrincipal, require_admin
from api.dependencies import get_gateway, get_settings, invalid_field, raw_body
from api.models import DonationRequest, DonationStatusUpdate
from api.serializers import donation_to_json
from api.settings import Settings
from domain.payment_status import DonationStatus
from services import donation_service, webhook_service
from services.payment_gateway import PaymentGateway

router = APIRouter()


@router.post(
    "/donations",
    summary="Create Donation",
    description="Record a pending donation and, for card payments, open a payment intent.",
)
def create_donation(
    request: DonationRequest,
    gateway: PaymentGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    """
    Record a donation.

    **Process:**
    1. Validates the form (field errors come back as `{"errors": {...}}`)
    2. Stores a `pending` donation with the amount in cents
    3. For `paymentMethod == "stripe"`, creates a payment intent and links it

    **Success response:**
    ```json
    {
      "donation": {"id": "…", "amount": 5000, "status": "pending", "stripePaymentIntentId": "pi_…"},
      "stripeClientSecret": "pi_…_secret_…"
    }
    ```
    """
    result = donation_service.create_donation(
        request.model_dump(exclude_none=True),
        gateway,
        currency=settings.default_currency,
    )
    return {
        "donation": donation_to_json(result.donation),
        "stripeClientSecret": result.client_secret,
    }


@router.post("/donations/webhook", summary="Payment Webhook")
def donation_webhook(
    payload: bytes = Depends(raw_body),
    stripe_signature: Optional[str] = Header(None),
    gateway: PaymentGateway = Depends(get_gateway),
):
    webhook_service.process_webhook(payload, stripe_signature, gateway)
    return {"received": True}


@router.get("/donations", summary="List Donations")
def list_donations(
    status: Optional[str] = None,
    email: Optional[str] = None,
    admin: AdminPrincipal = Depends(require_admin),
):
    status_filter = None
    if status:
        try:
            status_filter = DonationStatus(status)
        except ValueError:
            raise invalid_field(("query", "status"), "Invalid status")
    donations = donation_service.list_donations(status=status_filter, email=email)
    return [donation_to_json(donation) for donation in donations]


@router.get("/donations/{donation_id}", summary="Get Donation")
def get_donation(donation_id: UUID, admin: AdminPrincipal = Depends(require_admin)):
    return donation_to_json(donation_service.get_donation(donation_id))


@router.put("/donations/{donation_id}/status", summary="Update Donation Status")
def update_donation_status(
    donation_id: UUID,
    request: DonationStatusUpdate,
    admin: AdminPrincipal = Depends(require_admin),
):
    donation = donation_service.update_donation_status(donation_id, DonationStatus(request.status))
    return donation_to_json(donation)
