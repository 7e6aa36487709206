"""
Registration API Endpoints.

Free sign-up for an event (no payment). Admins list and delete registrations.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from api.auth import AdminPrincipal, require_admin
from api.models import RegistrationRequest
from api.serializers import registration_to_json
from domain.errors import NotFoundError
from repositories import event_repository, inquiry_repository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/registration", status_code=201, summary="Register For Event")
def register(request: RegistrationRequest):
    event_id = UUID(request.event_id)
    if event_repository.get_event_by_id(event_id) is None:
        raise NotFoundError("The requested event could not be found.", message="Event not found")

    registration = inquiry_repository.create_registration(
        {**request.model_dump(exclude_none=True), "event_id": event_id}
    )
    logger.info("Registered %s for event %s", registration.registration_id, event_id)
    return {"message": "Registration successful", "data": registration_to_json(registration)}


@router.get("/registration", summary="List Registrations")
def list_registrations(
    event_id: Optional[UUID] = Query(None, alias="eventId"),
    admin: AdminPrincipal = Depends(require_admin),
):
    return [
        registration_to_json(registration)
        for registration in inquiry_repository.list_registrations(event_id)
    ]


@router.delete("/registration/{registration_id}", summary="Delete Registration")
def delete_registration(registration_id: UUID, admin: AdminPrincipal = Depends(require_admin)):
    if not inquiry_repository.delete_registration(registration_id):
        raise NotFoundError(
            "The requested registration could not be found.", message="Registration not found"
        )
    return {"message": "Registration deleted successfully"}
