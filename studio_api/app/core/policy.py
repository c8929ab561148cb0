"""
Access policy for the studio API.

All role checks go through one table mapping ``(resource, action)`` to
the roles allowed to perform it.  Endpoints declare what they do with
``require_permission(resource, action)`` (see ``core.security``)
instead of listing roles inline, so the rules can be read and reviewed
in one place.

Row-level rules (a customer only sees their own bookings, a team member
only touches bookings they are assigned to) depend on the record and
are applied by the booking service, not here.
"""

from typing import Dict, FrozenSet, Optional, Tuple

ADMIN = "admin"
CUSTOMER = "customer"
TEAM = "team"

ROLES: Tuple[str, ...] = (ADMIN, CUSTOMER, TEAM)

# Pseudo-role for requests without a session.
PUBLIC = "public"

READ = "read"
CREATE = "create"
UPDATE = "update"
DELETE = "delete"
STATS = "stats"

_SIGNED_IN = frozenset(ROLES)

POLICY: Dict[Tuple[str, str], FrozenSet[str]] = {
    ("booking", READ): _SIGNED_IN,
    ("booking", CREATE): frozenset({ADMIN, CUSTOMER}),
    ("booking", UPDATE): frozenset({ADMIN, TEAM}),
    ("booking", DELETE): frozenset({ADMIN}),
    ("booking", STATS): frozenset({ADMIN}),
    ("package", READ): _SIGNED_IN,
    ("package", CREATE): frozenset({ADMIN}),
    ("package", UPDATE): frozenset({ADMIN}),
    ("package", DELETE): frozenset({ADMIN}),
    ("package", STATS): frozenset({ADMIN}),
    ("gallery", READ): _SIGNED_IN,
    ("gallery", CREATE): frozenset({ADMIN}),
    ("gallery", UPDATE): frozenset({ADMIN}),
    ("gallery", DELETE): frozenset({ADMIN}),
    ("user", READ): frozenset({ADMIN}),
    ("user", UPDATE): frozenset({ADMIN}),
    ("user", DELETE): frozenset({ADMIN}),
    ("user", STATS): frozenset({ADMIN}),
    ("contact", READ): frozenset({ADMIN}),
    ("contact", CREATE): frozenset({PUBLIC, *ROLES}),
    ("contact", UPDATE): frozenset({ADMIN}),
    ("contact", DELETE): frozenset({ADMIN}),
}


def is_allowed(role: Optional[str], resource: str, action: str) -> bool:
    """Return whether ``role`` may perform ``action`` on ``resource``.

    Unknown resources or actions are denied.  ``None`` is treated as the
    public pseudo-role.
    """
    allowed = POLICY.get((resource, action))
    if allowed is None:
        return False
    return (role or PUBLIC) in allowed


def dashboard_path(role: Optional[str]) -> str:
    """Landing page for a role, ``/signin`` when there is no session."""
    if role == ADMIN:
        return "/admin/dashboard"
    if role == CUSTOMER:
        return "/customer/dashboard"
    if role == TEAM:
        return "/team/dashboard"
    return "/signin"
