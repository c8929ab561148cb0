"""
User and team management endpoints.

Admin only.  The self-protection rules (no changing your own role, no
touching other admins, only ``team`` can be granted) are enforced by
``UserService`` and answered with 400.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from studio_api.app.core.exceptions import ConflictError, NotFoundError, ValidationError
from studio_api.app.core.policy import ROLES
from studio_api.app.core.security import require_permission
from studio_api.app.schemas.user import (
    RoleUpdate,
    UserEnvelope,
    UserList,
    UserStats,
    UserUpdate,
    UserUpdated,
)
from studio_api.app.services.user_service import UserService

router = APIRouter()


def _service_error(e: Exception) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=UserList)
async def list_users(
    role: str = Query("team", description="Role to list, or 'all'"),
    search: Optional[str] = Query(None, description="Match name, email, specialization or bio"),
    current_user: dict = Depends(require_permission("user", "read")),
) -> UserList:
    """List team members (default) or users of another role."""
    if role != "all" and role not in ROLES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown role {role}")
    users = await UserService.list_users(role=None if role == "all" else role, search=search)
    return UserList(users=users)


@router.get("/stats", response_model=UserStats)
async def user_stats(current_user: dict = Depends(require_permission("user", "stats"))) -> UserStats:
    return await UserService.stats()


@router.get("/{user_id}", response_model=UserEnvelope)
async def get_user(
    user_id: str = Path(..., description="ID of the user"),
    current_user: dict = Depends(require_permission("user", "read")),
) -> UserEnvelope:
    try:
        return UserEnvelope(user=await UserService.get_user(user_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.patch("/{user_id}", response_model=UserUpdated)
async def update_user(
    updates: UserUpdate,
    user_id: str = Path(..., description="ID of the user"),
    current_user: dict = Depends(require_permission("user", "update")),
) -> UserUpdated:
    """Edit a profile from the team page."""
    try:
        user = await UserService.update_profile(current_user, user_id, updates)
    except ValueError as e:
        raise _service_error(e)
    return UserUpdated(user=user)


@router.patch("/{user_id}/role", response_model=UserUpdated)
async def update_user_role(
    body: RoleUpdate,
    user_id: str = Path(..., description="ID of the user"),
    current_user: dict = Depends(require_permission("user", "update")),
) -> UserUpdated:
    """Promote a user to the team.

    ``team`` is the only role that can be granted here, never to
    yourself and never to an admin.
    """
    try:
        user = await UserService.change_role(current_user, user_id, body.role)
    except ValueError as e:
        raise _service_error(e)
    return UserUpdated(user=user)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str = Path(..., description="ID of the user"),
    current_user: dict = Depends(require_permission("user", "delete")),
) -> dict:
    """Delete an account.  Admin accounts, including your own, cannot be deleted."""
    try:
        await UserService.delete_user(current_user, user_id)
    except ValueError as e:
        raise _service_error(e)
    return {"success": True, "message": "User deleted successfully"}
