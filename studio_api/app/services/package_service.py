"""
Business logic for packages.

Packages are stored in the ``packages`` collection.  Listing supports
the filters and orderings the dashboards offer (text search, price
range, popular only, by deliverable, sort by price or duration).
Deleting a package does not touch bookings that reference it.
"""

import logging
import re
from typing import List, Optional

from studio_api.app.core.exceptions import NotFoundError
from studio_api.app.core.store import CollectionStore, new_id, utc_now
from studio_api.app.schemas.package import PackageCreate, PackageRead, PackageStats, PackageUpdate

logger = logging.getLogger(__name__)

COLLECTION = "packages"

_DURATION_RE = re.compile(r"(\d+)\s*(day|week|month|year)s?", re.IGNORECASE)
_DAYS_PER_UNIT = {"day": 1, "week": 7, "month": 30, "year": 365}


def duration_to_days(duration: Optional[str]) -> int:
    """Convert a duration such as ``"2 weeks"`` to days; 0 if unparseable."""
    match = _DURATION_RE.search(duration or "")
    if not match:
        return 0
    return int(match.group(1)) * _DAYS_PER_UNIT[match.group(2).lower()]


class PackageService:
    """Service for studio packages."""

    @classmethod
    async def list_packages(
        cls,
        search: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        popular: Optional[bool] = None,
        deliverable: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> List[PackageRead]:
        """Return packages matching every filter that is set.

        ``sort`` is one of ``price``, ``-price``, ``duration`` or
        ``-duration`` (leading ``-`` for descending).  Without it
        packages keep their creation order.
        """
        packages = [PackageRead.model_validate(data) for data in CollectionStore.get_collection(COLLECTION)]
        if search:
            needle = search.lower()
            packages = [
                p for p in packages if needle in p.name.lower() or needle in p.description.lower()
            ]
        if min_price is not None:
            packages = [p for p in packages if p.price >= min_price]
        if max_price is not None:
            packages = [p for p in packages if p.price <= max_price]
        if popular is not None:
            packages = [p for p in packages if p.popular == popular]
        if deliverable:
            packages = [p for p in packages if deliverable in p.deliverables]
        if sort:
            field = sort.lstrip("-")
            descending = sort.startswith("-")
            if field == "price":
                packages.sort(key=lambda p: p.price, reverse=descending)
            elif field == "duration":
                packages.sort(key=lambda p: duration_to_days(p.duration), reverse=descending)
        return packages

    @classmethod
    async def get_package(cls, package_id: str) -> PackageRead:
        doc = CollectionStore.get(COLLECTION, package_id)
        if doc is None:
            raise NotFoundError("Package not found")
        return PackageRead.model_validate(doc.data)

    @classmethod
    async def find_package(cls, package_id: str) -> Optional[PackageRead]:
        doc = CollectionStore.get(COLLECTION, package_id)
        return PackageRead.model_validate(doc.data) if doc else None

    @classmethod
    async def create_package(cls, data: PackageCreate) -> PackageRead:
        now = utc_now()
        package = PackageRead(id=new_id(), created_at=now, updated_at=now, **data.model_dump())
        CollectionStore.insert(COLLECTION, package.to_document())
        logger.info("Created package %s (%s)", package.id, package.name)
        return package

    @classmethod
    async def update_package(cls, package_id: str, updates: PackageUpdate) -> PackageRead:
        changes = updates.model_dump(exclude_unset=True, exclude_none=True, by_alias=True)

        def apply(data: dict) -> dict:
            data.update(changes)
            data["updatedAt"] = utc_now()
            return data

        try:
            doc = CollectionStore.modify(COLLECTION, package_id, apply)
        except NotFoundError:
            raise NotFoundError("Package not found") from None
        logger.info("Updated package %s: %s", package_id, sorted(changes))
        return PackageRead.model_validate(doc.data)

    @classmethod
    async def delete_package(cls, package_id: str) -> None:
        if not CollectionStore.delete(COLLECTION, package_id):
            raise NotFoundError("Package not found")
        logger.info("Deleted package %s", package_id)

    @classmethod
    async def stats(cls) -> PackageStats:
        packages = await cls.list_packages()
        total = sum(p.price for p in packages)
        return PackageStats(
            count=len(packages),
            average_price=total / len(packages) if packages else 0,
            total_price=total,
            popular=sum(1 for p in packages if p.popular),
        )
