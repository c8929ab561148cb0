"""
Pydantic models for studio bookings.

A booking ties a customer to a package for one event (a wedding, a
pre-wedding shoot, ...).  It moves through the statuses in
``BookingStatus``; which moves are legal is decided by
``services.booking_service``.
"""

from typing import Dict, List, Literal, Optional

from pydantic import Field

from .base import CamelModel

BookingStatus = Literal["pending", "approved", "in-progress", "completed", "rejected"]


class BookingCreate(CamelModel):
    """Schema for creating a booking.

    The event fields are optional here so that a missing one can be
    reported as a single "Missing required fields" error by the
    service.  ``userId``, ``status`` and ``assignedTeam`` sent by a
    client are ignored: the owner comes from the session, new bookings
    always start ``pending`` and team assignment is an admin action.
    """

    package_id: Optional[str] = Field(default=None, examples=["pkg-1"])
    event_type: Optional[str] = Field(default=None, examples=["Wedding"])
    event_name: Optional[str] = Field(default=None, examples=["A & B"])
    date: Optional[str] = Field(default=None, examples=["2025-01-01"])
    venue: Optional[str] = Field(default=None, examples=["Hall"])
    total_amount: Optional[float] = Field(default=None, ge=0)
    paid_amount: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class BookingUpdate(CamelModel):
    """Schema for patching a booking.

    Only the fields present in the request body are applied.  Team
    members may send ``status`` alone; every other field is reserved
    for admins.
    """

    status: Optional[BookingStatus] = None
    assigned_team: Optional[List[str]] = None
    total_amount: Optional[float] = Field(default=None, ge=0)
    paid_amount: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
    package_id: Optional[str] = None
    event_type: Optional[str] = None
    event_name: Optional[str] = None
    date: Optional[str] = None
    venue: Optional[str] = None


class BookingRead(CamelModel):
    id: str
    user_id: str
    package_id: str
    event_type: str
    event_name: str
    date: str
    venue: str
    status: BookingStatus
    total_amount: float = 0
    paid_amount: float = 0
    notes: Optional[str] = None
    assigned_team: List[str] = Field(default_factory=list)
    created_at: str
    updated_at: Optional[str] = None


class BookingEnvelope(CamelModel):
    booking: BookingRead


class BookingList(CamelModel):
    bookings: List[BookingRead]


class BookingStats(CamelModel):
    total: int
    by_status: Dict[str, int]
    total_amount: float
    paid_amount: float
    outstanding_amount: float
