"""
Events API Endpoints.

Public listing of active events and admin management. Deleting an event
only deactivates it.
"""

import logging
from pathlib import PurePath
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, File, UploadFile

from api.auth import AdminPrincipal, require_admin
from api.dependencies import get_settings, invalid_field
from api.models import EventRequest
from api.serializers import event_to_json
from api.settings import Settings
from domain.errors import NotFoundError
from domain.money import parse_ticket_cost
from repositories import event_repository

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found() -> NotFoundError:
    return NotFoundError("The requested event could not be found.", message="Event not found")


def _event_fields(request: EventRequest) -> dict:
    fields = request.model_dump()
    fields["ticket_cost"] = parse_ticket_cost(request.cost)
    return fields


@router.get("/events", summary="List Events")
def list_events():
    """Active events, newest first."""
    return [event_to_json(event) for event in event_repository.list_events()]


@router.get("/events/admin", summary="List All Events")
def list_all_events(admin: AdminPrincipal = Depends(require_admin)):
    """All events including deactivated ones, newest first."""
    return [
        event_to_json(event) for event in event_repository.list_events(include_inactive=True)
    ]


@router.get("/events/{event_id}", summary="Get Event")
def get_event(event_id: UUID):
    event = event_repository.get_event_by_id(event_id)
    if event is None or not event.is_active:
        raise _not_found()
    return event_to_json(event)


@router.post("/events", summary="Create Event")
def create_event(request: EventRequest, admin: AdminPrincipal = Depends(require_admin)):
    """
    Create an event.

    `cost` is a display string; when it is a dollar amount (`"$25"`) the
    ticket price is derived from it and the event becomes bookable.
    """
    event = event_repository.create_event(_event_fields(request))
    logger.info("Created event %s (%s)", event.event_id, event.title)
    return event_to_json(event)


@router.put("/events/{event_id}", summary="Update Event")
def update_event(
    event_id: UUID, request: EventRequest, admin: AdminPrincipal = Depends(require_admin)
):
    event = event_repository.update_event(event_id, _event_fields(request))
    if event is None:
        raise _not_found()
    return event_to_json(event)


@router.delete("/events/{event_id}", summary="Delete Event")
def delete_event(event_id: UUID, admin: AdminPrincipal = Depends(require_admin)):
    if not event_repository.deactivate_event(event_id):
        raise _not_found()
    logger.info("Deactivated event %s", event_id)
    return {"message": "Event deleted successfully"}


@router.post("/events/{event_id}/image", summary="Upload Event Image")
def upload_event_image(
    event_id: UUID,
    image: UploadFile = File(...),
    admin: AdminPrincipal = Depends(require_admin),
    settings: Settings = Depends(get_settings),
):
    if not (image.content_type or "").startswith("image/"):
        raise invalid_field(("body", "image"), "Only image files are allowed")
    if event_repository.get_event_by_id(event_id) is None:
        raise _not_found()

    suffix = PurePath(image.filename or "").suffix.lower()
    path = f"{event_id}/{uuid4().hex}{suffix}"
    url = event_repository.upload_event_image(
        path, image.file.read(), image.content_type, settings.event_image_bucket
    )
    event = event_repository.set_event_image(event_id, url)
    if event is None:
        raise _not_found()
    return event_to_json(event)
