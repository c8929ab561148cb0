"""Pydantic models for portfolio gallery items."""

from typing import List, Literal, Optional

from pydantic import Field

from .base import CamelModel


class GalleryCreate(CamelModel):
    type: Literal["photo", "video"] = "photo"
    url: str = Field(..., min_length=1)
    thumbnail: Optional[str] = None
    title: str = ""
    category: str = ""
    event_type: str = ""


class GalleryRead(GalleryCreate):
    id: str
    created_at: Optional[str] = None


class GalleryEnvelope(CamelModel):
    gallery: GalleryRead


class GalleryList(CamelModel):
    galleries: List[GalleryRead]
