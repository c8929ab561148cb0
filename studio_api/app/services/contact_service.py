"""
Business logic for contact messages.

Visitors leave messages through the public contact form; admins read
them, mark them as read and clean them up.
"""

import logging
from typing import List

import pydantic

from studio_api.app.core.exceptions import NotFoundError, ValidationError
from studio_api.app.core.store import CollectionStore, new_id, utc_now
from studio_api.app.schemas.contact import ContactCreate, ContactRead, ContactUpdate

logger = logging.getLogger(__name__)

COLLECTION = "contact"


class ContactService:
    """Service for contact form messages."""

    @classmethod
    async def list_messages(cls) -> List[ContactRead]:
        return [ContactRead.model_validate(data) for data in CollectionStore.get_collection(COLLECTION)]

    @classmethod
    async def create_message(cls, data: ContactCreate) -> ContactRead:
        message = ContactRead(id=new_id(), read=False, created_at=utc_now(), **data.model_dump())
        CollectionStore.insert(COLLECTION, message.to_document())
        logger.info("New contact message %s", message.id)
        return message

    @classmethod
    async def update_message(cls, message_id: str, updates: ContactUpdate) -> ContactRead:
        changes = updates.model_dump(exclude_unset=True, exclude_none=True, by_alias=True)

        def apply(data: dict) -> dict:
            data.update(changes)
            try:
                ContactRead.model_validate(data)
            except pydantic.ValidationError as e:
                raise ValidationError(f"Invalid contact message: {e.errors()[0]['msg']}") from e
            return data

        try:
            doc = CollectionStore.modify(COLLECTION, message_id, apply)
        except NotFoundError:
            raise NotFoundError("Contact message not found.") from None
        return ContactRead.model_validate(doc.data)

    @classmethod
    async def delete_message(cls, message_id: str) -> None:
        if not CollectionStore.delete(COLLECTION, message_id):
            raise NotFoundError("Contact message not found.")
        logger.info("Deleted contact message %s", message_id)

    @classmethod
    async def delete_all_messages(cls) -> int:
        removed = CollectionStore.clear(COLLECTION)
        logger.info("Deleted all %d contact messages", removed)
        return removed
