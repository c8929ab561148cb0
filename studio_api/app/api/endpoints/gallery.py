"""
Gallery endpoints.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from studio_api.app.core.exceptions import NotFoundError
from studio_api.app.core.security import require_permission
from studio_api.app.schemas.gallery import GalleryCreate, GalleryEnvelope, GalleryList
from studio_api.app.services.gallery_service import GalleryService

router = APIRouter()


@router.get("", response_model=GalleryList)
async def list_gallery(
    media_type: Optional[Literal["photo", "video"]] = Query(None, alias="type"),
    category: Optional[str] = Query(None),
    current_user: dict = Depends(require_permission("gallery", "read")),
) -> GalleryList:
    return GalleryList(galleries=await GalleryService.list_items(media_type=media_type, category=category))


@router.post("", response_model=GalleryEnvelope, status_code=status.HTTP_201_CREATED)
async def create_gallery_item(
    item: GalleryCreate,
    current_user: dict = Depends(require_permission("gallery", "create")),
) -> GalleryEnvelope:
    return GalleryEnvelope(gallery=await GalleryService.create_item(item))


@router.delete("/{item_id}")
async def delete_gallery_item(
    item_id: str = Path(..., description="ID of the gallery item"),
    current_user: dict = Depends(require_permission("gallery", "delete")),
) -> dict:
    try:
        await GalleryService.delete_item(item_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return {"success": True, "message": "Gallery item deleted successfully"}
