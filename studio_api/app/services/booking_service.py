"""
Business logic for bookings.

The ``BookingService`` creates bookings, lists them according to who is
asking and applies updates under the booking lifecycle::

    pending -> approved -> in-progress -> completed

with ``rejected`` reachable from any of the first three.  ``completed``
and ``rejected`` are final.  Team members are held to this table:
re-sending the current status is accepted as a no-op and anything else
off the table raises ``InvalidTransitionError``.  Admins may set any
known status.

Visibility and write access depend on the caller:

* admins see and edit every booking;
* customers see the bookings they created and cannot edit them;
* team members see the bookings they are assigned to and may only
  change the status of those.

Reading a booking outside the caller's scope reports it as not found;
patching one is refused.  Writes go through ``CollectionStore.modify``
so two admins editing the same booking cannot silently overwrite each
other.
"""

import logging
from typing import Any, Dict, FrozenSet, List, Optional

from studio_api.app.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from studio_api.app.core.policy import ADMIN, CUSTOMER, TEAM
from studio_api.app.core.store import CollectionStore, new_id, utc_now
from studio_api.app.schemas.booking import (
    BookingCreate,
    BookingRead,
    BookingStats,
    BookingUpdate,
)
from studio_api.app.services.package_service import PackageService
from studio_api.app.services.user_service import UserService

logger = logging.getLogger(__name__)

COLLECTION = "bookings"

STATUSES = ("pending", "approved", "in-progress", "completed", "rejected")

TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"approved", "rejected"}),
    "approved": frozenset({"in-progress", "rejected"}),
    "in-progress": frozenset({"completed", "rejected"}),
    "completed": frozenset(),
    "rejected": frozenset(),
}

REQUIRED_FIELDS = ("package_id", "event_type", "event_name", "date", "venue")

# Fields a team member may send in a patch.
TEAM_WRITABLE = frozenset({"status"})


def can_transition(current: str, requested: str) -> bool:
    return requested == current or requested in TRANSITIONS.get(current, frozenset())


def _visible_to(user: Dict[str, Any], data: Dict[str, Any]) -> bool:
    role = user.get("role")
    if role == ADMIN:
        return True
    if role == CUSTOMER:
        return data.get("userId") == user["id"]
    if role == TEAM:
        return user["id"] in (data.get("assignedTeam") or [])
    return False


def _dedupe(ids: List[str]) -> List[str]:
    seen = set()
    result = []
    for item in ids:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


class BookingService:
    """Service for the booking lifecycle."""

    @classmethod
    async def create_booking(cls, user: Dict[str, Any], booking: BookingCreate) -> BookingRead:
        """Create a ``pending`` booking owned by ``user``.

        ``totalAmount`` falls back to the package price when the client
        does not send one and the package exists.
        """
        missing = [f for f in REQUIRED_FIELDS if not (getattr(booking, f) or "").strip()]
        if missing:
            raise ValidationError("Missing required fields")

        total_amount = booking.total_amount
        if total_amount is None:
            package = await PackageService.find_package(booking.package_id)
            total_amount = package.price if package else 0
        paid_amount = booking.paid_amount or 0
        if paid_amount > total_amount:
            raise ValidationError("paidAmount cannot exceed totalAmount")

        now = utc_now()
        created = BookingRead(
            id=new_id(),
            user_id=user["id"],
            package_id=booking.package_id,
            event_type=booking.event_type,
            event_name=booking.event_name,
            date=booking.date,
            venue=booking.venue,
            status="pending",
            total_amount=total_amount,
            paid_amount=paid_amount,
            notes=booking.notes or "",
            assigned_team=[],
            created_at=now,
            updated_at=now,
        )
        CollectionStore.insert(COLLECTION, created.to_document())
        logger.info("Booking %s created by %s %s", created.id, user.get("role"), user["id"])
        return created

    @classmethod
    async def list_bookings(
        cls,
        user: Dict[str, Any],
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[BookingRead]:
        """Return the bookings ``user`` may see, optionally filtered.

        ``search`` matches event name and venue, case-insensitively.
        """
        bookings = [
            BookingRead.model_validate(data)
            for data in CollectionStore.get_collection(COLLECTION)
            if _visible_to(user, data)
        ]
        if status:
            bookings = [b for b in bookings if b.status == status]
        if search:
            needle = search.lower()
            bookings = [
                b for b in bookings if needle in b.event_name.lower() or needle in b.venue.lower()
            ]
        return bookings

    @classmethod
    async def get_booking(cls, user: Dict[str, Any], booking_id: str) -> BookingRead:
        doc = CollectionStore.get(COLLECTION, booking_id)
        if doc is None or not _visible_to(user, doc.data):
            raise NotFoundError("Booking not found")
        return BookingRead.model_validate(doc.data)

    @classmethod
    async def update_booking(cls, user: Dict[str, Any], booking_id: str, update: BookingUpdate) -> BookingRead:
        """Apply a patch from an admin or an assigned team member.

        Raises
        ------
        NotFoundError
            The booking does not exist.
        PermissionError
            A team member sent fields other than ``status`` or is not
            assigned to the booking.
        InvalidTransitionError
            A team member asked for a status change the lifecycle does
            not allow.
        ValidationError
            Unknown team members or ``paidAmount`` above ``totalAmount``.
        """
        fields = update.model_fields_set
        role = user.get("role")
        if role == TEAM and fields - TEAM_WRITABLE:
            raise PermissionError("Team members can only change the booking status")
        if role not in (ADMIN, TEAM):
            raise PermissionError("Insufficient permissions")

        changes = update.model_dump(include=fields, by_alias=True)
        for key in ("packageId", "eventType", "eventName", "date", "venue"):
            if key in changes and not (changes[key] or "").strip():
                raise ValidationError(f"{key} cannot be empty")
        if changes.get("status") is None:
            changes.pop("status", None)
        for key in ("totalAmount", "paidAmount"):
            if key in changes and changes[key] is None:
                raise ValidationError(f"{key} cannot be null")
        if "assignedTeam" in changes:
            team = _dedupe(changes["assignedTeam"] or [])
            known = await UserService.team_member_ids()
            unknown = [member for member in team if member not in known]
            if unknown:
                raise ValidationError(f"Unknown team member(s): {', '.join(unknown)}")
            changes["assignedTeam"] = team

        def apply(data: dict) -> dict:
            if not _visible_to(user, data):
                raise PermissionError("You are not assigned to this booking")
            requested = changes.get("status")
            if requested is not None and role != ADMIN and not can_transition(data["status"], requested):
                logger.warning(
                    "Rejected status change of booking %s from %s to %s by %s",
                    booking_id,
                    data["status"],
                    requested,
                    user["id"],
                )
                raise InvalidTransitionError(data["status"], requested)
            data.update(changes)
            if data.get("paidAmount", 0) > data.get("totalAmount", 0):
                raise ValidationError("paidAmount cannot exceed totalAmount")
            data["updatedAt"] = utc_now()
            return data

        try:
            doc = CollectionStore.modify(COLLECTION, booking_id, apply)
        except NotFoundError:
            raise NotFoundError("Booking not found") from None
        logger.info("Booking %s updated by %s %s: %s", booking_id, role, user["id"], sorted(changes))
        return BookingRead.model_validate(doc.data)

    @classmethod
    async def delete_booking(cls, booking_id: str) -> None:
        if not CollectionStore.delete(COLLECTION, booking_id):
            raise NotFoundError("Booking not found")
        logger.info("Deleted booking %s", booking_id)

    @classmethod
    async def stats(cls) -> BookingStats:
        bookings = [BookingRead.model_validate(data) for data in CollectionStore.get_collection(COLLECTION)]
        by_status = {status: 0 for status in STATUSES}
        for booking in bookings:
            by_status[booking.status] += 1
        total_amount = sum(b.total_amount for b in bookings if b.status != "rejected")
        paid_amount = sum(b.paid_amount for b in bookings if b.status != "rejected")
        return BookingStats(
            total=len(bookings),
            by_status=by_status,
            total_amount=total_amount,
            paid_amount=paid_amount,
            outstanding_amount=total_amount - paid_amount,
        )
