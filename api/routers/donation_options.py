"""
Donation Options API Endpoints.

Preset amounts for the donate page. Reading is public; changes are admin-only.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from api.auth import AdminPrincipal, require_admin
from api.dependencies import invalid_field
from api.models import DonationOptionRequest, DonationOptionUpdate
from api.serializers import option_to_json
from domain.donation import DonationOptionType
from domain.errors import NotFoundError
from repositories import donation_option_repository

router = APIRouter()


def _not_found() -> NotFoundError:
    return NotFoundError("The requested donation option could not be found.", message="Option not found")


def _option_fields(fields: dict) -> dict:
    if "amount" in fields:
        fields["amount"] = Decimal(str(fields["amount"]))
    if "type" in fields:
        fields["type"] = DonationOptionType(fields["type"])
    return fields


@router.get("/donation-options", summary="List Donation Options")
def list_options(type: Optional[str] = None):
    """Active options sorted by `order`, then amount; `?type=` filters by option type."""
    option_type = None
    if type:
        try:
            option_type = DonationOptionType(type)
        except ValueError:
            raise invalid_field(("query", "type"), "Invalid donation option type")
    return [option_to_json(option) for option in donation_option_repository.list_options(option_type)]


@router.post("/donation-options", status_code=201, summary="Create Donation Option")
def create_option(request: DonationOptionRequest, admin: AdminPrincipal = Depends(require_admin)):
    option = donation_option_repository.create_option(
        _option_fields(request.model_dump(exclude_none=True))
    )
    return option_to_json(option)


@router.put("/donation-options/{option_id}", summary="Update Donation Option")
def update_option(
    option_id: UUID,
    request: DonationOptionUpdate,
    admin: AdminPrincipal = Depends(require_admin),
):
    option = donation_option_repository.update_option(
        option_id, _option_fields(request.model_dump(exclude_unset=True, exclude_none=True))
    )
    if option is None:
        raise _not_found()
    return option_to_json(option)


@router.delete("/donation-options/{option_id}", summary="Delete Donation Option")
def delete_option(option_id: UUID, admin: AdminPrincipal = Depends(require_admin)):
    if not donation_option_repository.delete_option(option_id):
        raise _not_found()
    return {"message": "Deleted"}
