"""
Business logic for users and team members.

Users are created the first time someone signs in through the identity
provider and start as customers.  Admins manage everyone else from the
team page: they edit profiles, promote customers to the team and
remove accounts.  Admin accounts are protected:

* an admin cannot change their own role or delete their own account;
* no admin can modify, demote or delete another admin;
* the only role an admin can hand out is ``team``.

Violations raise ``ValidationError`` (answered with 400).  New admins
are created with the ``set_role.py`` operator script.
"""

import logging
from typing import Any, Dict, List, Optional

from studio_api.app.core.exceptions import NotFoundError, ValidationError
from studio_api.app.core.policy import ADMIN, CUSTOMER, ROLES, TEAM
from studio_api.app.core.store import CollectionStore, new_id, utc_now
from studio_api.app.schemas.user import (
    CustomerProfile,
    TeamProfile,
    UserRead,
    UserStats,
    UserUpdate,
)

logger = logging.getLogger(__name__)

COLLECTION = "users"

_TEAM_PROFILE_FIELDS = ("specialization", "experience", "bio", "instagram")

# Assignment tracking kept on the team profile; null leaves the stored value.
_TEAM_TRACKING_FIELDS = ("assignment", "progress", "attendance")


def _with_role(data: Dict[str, Any], role: str) -> Dict[str, Any]:
    """Set ``role`` and make sure the matching profile exists."""
    data["role"] = role
    if role == TEAM and not data.get("teamProfile"):
        data["teamProfile"] = TeamProfile().to_document()
    elif role == CUSTOMER and not data.get("customerProfile"):
        data["customerProfile"] = CustomerProfile().to_document()
    data["updatedAt"] = utc_now()
    return data


def _check_role_change(actor: Dict[str, Any], user_id: str, role: Optional[str]) -> None:
    if actor["id"] == user_id:
        raise ValidationError("You cannot change your own role")
    if role != TEAM:
        raise ValidationError("Admins can only assign team role")


class UserService:
    """Service for user accounts and team membership."""

    @classmethod
    async def list_users(cls, role: Optional[str] = TEAM, search: Optional[str] = None) -> List[UserRead]:
        """Return users with ``role`` (all users when ``role`` is ``None``).

        ``search`` matches name, email and the team specialization and bio,
        case-insensitively.
        """
        users = [UserRead.model_validate(data) for data in CollectionStore.get_collection(COLLECTION)]
        if role is not None:
            users = [u for u in users if u.role == role]
        if search:
            needle = search.lower()

            def matches(user: UserRead) -> bool:
                fields = [user.name, user.email]
                if user.team_profile:
                    fields += [user.team_profile.specialization, user.team_profile.bio]
                return any(needle in f.lower() for f in fields if f)

            users = [u for u in users if matches(u)]
        return users

    @classmethod
    async def get_user(cls, user_id: str) -> UserRead:
        doc = CollectionStore.get(COLLECTION, user_id)
        if doc is None:
            raise NotFoundError("User not found")
        return UserRead.model_validate(doc.data)

    @classmethod
    async def get_user_by_email(cls, email: str) -> Optional[UserRead]:
        wanted = email.strip().lower()
        for data in CollectionStore.get_collection(COLLECTION):
            if data.get("email", "").lower() == wanted:
                return UserRead.model_validate(data)
        return None

    @classmethod
    async def create_user(
        cls,
        email: str,
        name: Optional[str] = None,
        image: Optional[str] = None,
        role: str = CUSTOMER,
    ) -> UserRead:
        """Create a user, or return the existing one with the same email."""
        existing = await cls.get_user_by_email(email)
        if existing:
            return existing
        if role not in ROLES:
            raise ValidationError(f"Unknown role {role}")
        now = utc_now()
        data = _with_role(
            {
                "id": new_id(),
                "email": email.strip(),
                "name": name,
                "image": image,
                "createdAt": now,
                "updatedAt": now,
            },
            role,
        )
        CollectionStore.insert(COLLECTION, data)
        logger.info("Created %s account %s", role, data["id"])
        return UserRead.model_validate(data)

    @classmethod
    async def sign_in(cls, email: str, name: Optional[str] = None, image: Optional[str] = None) -> UserRead:
        """Find the user for an identity-provider profile, creating a customer if new.

        Name and picture are filled from the provider only when the
        stored user has none, so edits made by admins are kept.
        """
        user = await cls.get_user_by_email(email)
        if user is None:
            return await cls.create_user(email=email, name=name, image=image, role=CUSTOMER)
        if (name and not user.name) or (image and not user.image):
            def fill(data: dict) -> dict:
                data["name"] = data.get("name") or name
                data["image"] = data.get("image") or image
                data["updatedAt"] = utc_now()
                return data

            user = UserRead.model_validate(CollectionStore.modify(COLLECTION, user.id, fill).data)
        return user

    @classmethod
    async def set_role(cls, user_id: str, role: str) -> UserRead:
        """Change a role without any of the admin protections.

        Only for operator tooling; HTTP handlers use ``change_role``.
        """
        if role not in ROLES:
            raise ValidationError(f"Unknown role {role}")
        try:
            doc = CollectionStore.modify(COLLECTION, user_id, lambda data: _with_role(data, role))
        except NotFoundError:
            raise NotFoundError("User not found") from None
        logger.info("Role of user %s set to %s", user_id, role)
        return UserRead.model_validate(doc.data)

    @classmethod
    async def change_role(cls, actor: Dict[str, Any], user_id: str, role: Optional[str]) -> UserRead:
        """Apply a role change requested by an admin."""
        _check_role_change(actor, user_id, role)
        target = await cls.get_user(user_id)
        if target.role == ADMIN:
            raise ValidationError("You cannot change another admin's role")
        return await cls.set_role(user_id, TEAM)

    @classmethod
    async def update_profile(cls, actor: Dict[str, Any], user_id: str, updates: UserUpdate) -> UserRead:
        """Edit a user's profile from the team page.

        A ``role`` in the payload is ignored unless it is ``team``; a
        promotion follows the same rules as ``change_role``.  Team
        fields are written when the resulting role is ``team``.  Every
        check runs before the single write, so a refused edit changes
        nothing.
        """
        target = await cls.get_user(user_id)
        if target.role == ADMIN and target.id != actor["id"]:
            raise ValidationError("Cannot modify another admin")

        fields = updates.model_fields_set
        new_role = target.role
        if "role" in fields and updates.role == TEAM and target.role != TEAM:
            _check_role_change(actor, user_id, TEAM)
            new_role = TEAM

        if "email" in fields and updates.email:
            other = await cls.get_user_by_email(updates.email)
            if other and other.id != user_id:
                raise ValidationError("Email is already used by another account")

        def apply(data: dict) -> dict:
            if new_role != data.get("role"):
                _with_role(data, new_role)
            for key in ("name", "email"):
                if key in fields and getattr(updates, key) is not None:
                    data[key] = getattr(updates, key)
            image = updates.photo if "photo" in fields else updates.image
            if image is not None:
                data["image"] = image
            if new_role == TEAM:
                profile = dict(data.get("teamProfile") or TeamProfile().to_document())
                for key in _TEAM_PROFILE_FIELDS:
                    if key in fields:
                        profile[key] = getattr(updates, key)
                for key in _TEAM_TRACKING_FIELDS:
                    if key in fields and getattr(updates, key) is not None:
                        profile[key] = getattr(updates, key)
                data["teamProfile"] = profile
            data["updatedAt"] = utc_now()
            return data

        doc = CollectionStore.modify(COLLECTION, user_id, apply)
        if new_role != target.role:
            logger.info("Role of user %s set to %s", user_id, new_role)
        logger.info("Updated profile of user %s: %s", user_id, sorted(fields))
        return UserRead.model_validate(doc.data)

    @classmethod
    async def delete_user(cls, actor: Dict[str, Any], user_id: str) -> None:
        if actor["id"] == user_id:
            raise ValidationError("You cannot delete your own account")
        target = await cls.get_user(user_id)
        if target.role == ADMIN:
            raise ValidationError("You cannot delete another admin account")
        if not CollectionStore.delete(COLLECTION, user_id):
            raise NotFoundError("User not found")
        logger.info("Deleted user %s", user_id)

    @classmethod
    async def team_member_ids(cls) -> set:
        return {u.id for u in await cls.list_users(role=TEAM)}

    @classmethod
    async def stats(cls) -> UserStats:
        users = await cls.list_users(role=None)
        team = [u for u in users if u.role == TEAM]
        assignments = [len(u.team_profile.assignment) if u.team_profile else 0 for u in team]
        return UserStats(
            total=len(users),
            admins=sum(1 for u in users if u.role == ADMIN),
            team=len(team),
            customers=sum(1 for u in users if u.role == CUSTOMER),
            team_assignments=sum(assignments),
            active_team_members=sum(1 for n in assignments if n > 0),
        )
