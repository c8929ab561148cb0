"""
Pydantic models for user data.

Users are created on first sign-in with the ``customer`` role.  Team
members carry a ``teamProfile`` shown on the public "our team" page
and used to track their assignments; customers may carry a
``customerProfile``.
"""

from typing import List, Literal, Optional

from pydantic import Field

from .base import CamelModel

UserRole = Literal["admin", "customer", "team"]


class TeamProfile(CamelModel):
    specialization: Optional[str] = None
    experience: Optional[str] = None
    bio: Optional[str] = None
    instagram: Optional[str] = None
    assignment: List[str] = Field(default_factory=list)
    progress: str = "0%"
    attendance: str = "100%"


class CustomerProfile(CamelModel):
    preferences: List[str] = Field(default_factory=list)
    booking_history: List[str] = Field(default_factory=list)


class UserRead(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    image: Optional[str] = None
    role: UserRole
    team_profile: Optional[TeamProfile] = None
    customer_profile: Optional[CustomerProfile] = None
    created_at: str
    updated_at: str


class UserUpdate(CamelModel):
    """Profile edit sent by the team management page.

    ``photo`` is the uploaded picture URL and is stored as ``image``.
    The team fields, including the assignment, progress and attendance
    tracking, are only applied when the user is (or becomes) a team
    member.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    photo: Optional[str] = None
    image: Optional[str] = None
    specialization: Optional[str] = None
    experience: Optional[str] = None
    bio: Optional[str] = None
    instagram: Optional[str] = None
    assignment: Optional[List[str]] = None
    progress: Optional[str] = Field(default=None, pattern=r"^\d{1,3}%$")
    attendance: Optional[str] = Field(default=None, pattern=r"^\d{1,3}%$")


class RoleUpdate(CamelModel):
    # Plain string so that a disallowed role is answered with 400 by the
    # service rather than a schema error.
    role: Optional[str] = None


class UserEnvelope(CamelModel):
    user: UserRead


class UserUpdated(CamelModel):
    success: bool = True
    user: UserRead


class UserList(CamelModel):
    users: List[UserRead]


class UserStats(CamelModel):
    total: int
    admins: int
    team: int
    customers: int
    team_assignments: int
    active_team_members: int
