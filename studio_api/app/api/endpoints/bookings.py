"""
Booking endpoints.

Every signed-in role can list bookings, but each sees a different
slice: admins all of them, customers their own, team members those
they are assigned to.  Customers and admins create bookings; admins
and assigned team members patch them; only admins delete.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from studio_api.app.core.exceptions import ConflictError, NotFoundError, ValidationError
from studio_api.app.core.security import require_permission
from studio_api.app.schemas.booking import (
    BookingCreate,
    BookingEnvelope,
    BookingList,
    BookingStats,
    BookingStatus,
    BookingUpdate,
)
from studio_api.app.services.booking_service import BookingService

router = APIRouter()


@router.get("", response_model=BookingList)
async def list_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status", description="Only bookings in this status"),
    search: Optional[str] = Query(None, description="Match event name or venue"),
    current_user: dict = Depends(require_permission("booking", "read")),
) -> BookingList:
    """List the bookings visible to the caller."""
    bookings = await BookingService.list_bookings(current_user, status=status_filter, search=search)
    return BookingList(bookings=bookings)


@router.post("", response_model=BookingEnvelope, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking: BookingCreate,
    current_user: dict = Depends(require_permission("booking", "create")),
) -> BookingEnvelope:
    """Create a booking for the signed-in user.

    The new booking is always ``pending`` with no team assigned, and
    belongs to the caller whatever ``userId`` the body carries.
    """
    try:
        created = await BookingService.create_booking(current_user, booking)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return BookingEnvelope(booking=created)


@router.get("/stats", response_model=BookingStats)
async def booking_stats(
    current_user: dict = Depends(require_permission("booking", "stats")),
) -> BookingStats:
    """Counts per status and amounts for the admin dashboard."""
    return await BookingService.stats()


@router.get("/{booking_id}", response_model=BookingEnvelope)
async def get_booking(
    booking_id: str = Path(..., description="ID of the booking"),
    current_user: dict = Depends(require_permission("booking", "read")),
) -> BookingEnvelope:
    try:
        booking = await BookingService.get_booking(current_user, booking_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return BookingEnvelope(booking=booking)


@router.patch("/{booking_id}", response_model=BookingEnvelope)
async def update_booking(
    update: BookingUpdate,
    booking_id: str = Path(..., description="ID of the booking"),
    current_user: dict = Depends(require_permission("booking", "update")),
) -> BookingEnvelope:
    """Change a booking's status, team, amounts or event details.

    Team members may only send ``status``, only for bookings they are
    assigned to, and only along the booking lifecycle (409 otherwise).
    Admins may set any status.
    """
    try:
        booking = await BookingService.update_booking(current_user, booking_id, update)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return BookingEnvelope(booking=booking)


@router.delete("/{booking_id}")
async def delete_booking(
    booking_id: str = Path(..., description="ID of the booking"),
    current_user: dict = Depends(require_permission("booking", "delete")),
) -> dict:
    try:
        await BookingService.delete_booking(booking_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return {"success": True, "message": "Booking deleted successfully"}
