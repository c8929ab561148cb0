"""
Business logic for the portfolio gallery.

Gallery items are photos or videos shown on the public gallery page.
They have no lifecycle beyond being added and removed by admins.
"""

import logging
from typing import List, Optional

from studio_api.app.core.exceptions import NotFoundError
from studio_api.app.core.store import CollectionStore, new_id, utc_now
from studio_api.app.schemas.gallery import GalleryCreate, GalleryRead

logger = logging.getLogger(__name__)

COLLECTION = "gallery"


class GalleryService:
    """Service for gallery items."""

    @classmethod
    async def list_items(cls, media_type: Optional[str] = None, category: Optional[str] = None) -> List[GalleryRead]:
        items = [GalleryRead.model_validate(data) for data in CollectionStore.get_collection(COLLECTION)]
        if media_type:
            items = [i for i in items if i.type == media_type]
        if category:
            items = [i for i in items if i.category.lower() == category.lower()]
        return items

    @classmethod
    async def create_item(cls, data: GalleryCreate) -> GalleryRead:
        item = GalleryRead(id=new_id(), created_at=utc_now(), **data.model_dump())
        CollectionStore.insert(COLLECTION, item.to_document())
        logger.info("Added %s %s to the gallery", item.type, item.id)
        return item

    @classmethod
    async def delete_item(cls, item_id: str) -> None:
        if not CollectionStore.delete(COLLECTION, item_id):
            raise NotFoundError("Gallery item not found")
        logger.info("Removed gallery item %s", item_id)
