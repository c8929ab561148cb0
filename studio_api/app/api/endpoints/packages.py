"""
Package endpoints.

Any signed-in user can browse packages; only admins create, edit and
delete them.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from studio_api.app.core.exceptions import NotFoundError
from studio_api.app.core.security import require_permission
from studio_api.app.schemas.package import (
    PackageCreate,
    PackageEnvelope,
    PackageList,
    PackageStats,
    PackageUpdate,
)
from studio_api.app.services.package_service import PackageService

router = APIRouter()


@router.get("", response_model=PackageList)
async def list_packages(
    search: Optional[str] = Query(None, description="Match name or description"),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    popular: Optional[bool] = Query(None),
    deliverable: Optional[str] = Query(None, description="Only packages including this deliverable"),
    sort: Optional[Literal["price", "-price", "duration", "-duration"]] = Query(None),
    current_user: dict = Depends(require_permission("package", "read")),
) -> PackageList:
    packages = await PackageService.list_packages(
        search=search,
        min_price=min_price,
        max_price=max_price,
        popular=popular,
        deliverable=deliverable,
        sort=sort,
    )
    return PackageList(packages=packages)


@router.post("", response_model=PackageEnvelope, status_code=status.HTTP_201_CREATED)
async def create_package(
    package: PackageCreate,
    current_user: dict = Depends(require_permission("package", "create")),
) -> PackageEnvelope:
    return PackageEnvelope(package=await PackageService.create_package(package))


@router.get("/stats", response_model=PackageStats)
async def package_stats(
    current_user: dict = Depends(require_permission("package", "stats")),
) -> PackageStats:
    return await PackageService.stats()


@router.get("/{package_id}", response_model=PackageEnvelope)
async def get_package(
    package_id: str = Path(..., description="ID of the package"),
    current_user: dict = Depends(require_permission("package", "read")),
) -> PackageEnvelope:
    try:
        return PackageEnvelope(package=await PackageService.get_package(package_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.patch("/{package_id}", response_model=PackageEnvelope)
async def update_package(
    updates: PackageUpdate,
    package_id: str = Path(..., description="ID of the package"),
    current_user: dict = Depends(require_permission("package", "update")),
) -> PackageEnvelope:
    """Change some fields of a package and refresh its ``updatedAt``."""
    try:
        return PackageEnvelope(package=await PackageService.update_package(package_id, updates))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete("/{package_id}")
async def delete_package(
    package_id: str = Path(..., description="ID of the package"),
    current_user: dict = Depends(require_permission("package", "delete")),
) -> dict:
    """Delete a package.  Bookings that reference it are left as they are."""
    try:
        await PackageService.delete_package(package_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return {"success": True, "message": "Package deleted successfully"}
