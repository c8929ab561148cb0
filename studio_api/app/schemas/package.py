"""
Pydantic models for photography/videography packages.

A package is what customers pick when booking: a price, a duration
("2 days", "1 week") and the list of deliverables (albums, edited
films, drone footage...).
"""

from typing import List, Optional

from pydantic import Field

from .base import CamelModel


class PackageCreate(CamelModel):
    name: str = Field(..., min_length=1, examples=["Gold Wedding"])
    price: float = Field(..., ge=0, examples=[150000])
    description: str = ""
    deliverables: List[str] = Field(default_factory=list)
    preview: str = ""
    duration: str = Field(default="", examples=["2 days"])
    popular: bool = False


class PackageUpdate(CamelModel):
    """Partial update; fields left out keep their stored value."""

    name: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    deliverables: Optional[List[str]] = None
    preview: Optional[str] = None
    duration: Optional[str] = None
    popular: Optional[bool] = None


class PackageRead(PackageCreate):
    id: str
    created_at: str
    updated_at: str


class PackageEnvelope(CamelModel):
    package: PackageRead


class PackageList(CamelModel):
    packages: List[PackageRead]


class PackageStats(CamelModel):
    count: int
    average_price: float
    total_price: float
    popular: int
