"""
Contact API Endpoints.

Public contact form; admins read and delete the messages.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from api.auth import AdminPrincipal, require_admin
from api.models import ContactRequest
from api.serializers import contact_to_json
from domain.errors import NotFoundError
from repositories import inquiry_repository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/contact", summary="Send Contact Message")
def send_message(request: ContactRequest):
    message = inquiry_repository.create_contact_message(
        request.name, request.email, request.subject, request.message
    )
    logger.info("Saved contact message %s", message.message_id)
    return {"success": True}


@router.get("/contact", summary="List Contact Messages")
def list_messages(admin: AdminPrincipal = Depends(require_admin)):
    return [contact_to_json(message) for message in inquiry_repository.list_contact_messages()]


@router.delete("/contact/{message_id}", summary="Delete Contact Message")
def delete_message(message_id: UUID, admin: AdminPrincipal = Depends(require_admin)):
    if not inquiry_repository.delete_contact_message(message_id):
        raise NotFoundError("The requested message could not be found.", message="Message not found")
    return {"message": "Message deleted successfully"}
