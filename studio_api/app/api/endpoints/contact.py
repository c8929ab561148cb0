"""
Contact message endpoints.

``public_router`` receives the marketing site's contact form and needs
no session.  ``admin_router`` lets admins read, update and remove the
messages.
"""

from fastapi import APIRouter, Depends, HTTPException, Path, status

from studio_api.app.core.exceptions import NotFoundError, ValidationError
from studio_api.app.core.security import require_permission
from studio_api.app.schemas.contact import (
    ContactCreate,
    ContactEnvelope,
    ContactList,
    ContactPatch,
    ContactUpdate,
)
from studio_api.app.services.contact_service import ContactService

public_router = APIRouter()
admin_router = APIRouter()


@public_router.post("", response_model=ContactEnvelope, status_code=status.HTTP_201_CREATED)
async def send_message(
    message: ContactCreate,
    current_user=Depends(require_permission("contact", "create")),
) -> ContactEnvelope:
    return ContactEnvelope(message=await ContactService.create_message(message))


@admin_router.get("", response_model=ContactList)
async def list_messages(current_user: dict = Depends(require_permission("contact", "read"))) -> ContactList:
    return ContactList(messages=await ContactService.list_messages())


@admin_router.patch("", response_model=ContactEnvelope)
async def patch_message(
    body: ContactPatch,
    current_user: dict = Depends(require_permission("contact", "update")),
) -> ContactEnvelope:
    """Update a message given ``{"id": ..., "updates": {...}}``."""
    try:
        return ContactEnvelope(message=await ContactService.update_message(body.id, body.updates))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@admin_router.patch("/{message_id}", response_model=ContactEnvelope)
async def update_message(
    updates: ContactUpdate,
    message_id: str = Path(..., description="ID of the message"),
    current_user: dict = Depends(require_permission("contact", "update")),
) -> ContactEnvelope:
    try:
        return ContactEnvelope(message=await ContactService.update_message(message_id, updates))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@admin_router.delete("")
async def delete_all_messages(current_user: dict = Depends(require_permission("contact", "delete"))) -> dict:
    removed = await ContactService.delete_all_messages()
    return {"message": "All contact messages deleted.", "deleted": removed}


@admin_router.delete("/{message_id}")
async def delete_message(
    message_id: str = Path(..., description="ID of the message"),
    current_user: dict = Depends(require_permission("contact", "delete")),
) -> dict:
    try:
        await ContactService.delete_message(message_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return {"success": True, "message": "Contact message deleted."}
