"""
Sign-in endpoints.

Sign-in uses the OAuth 2.0 authorization-code flow:

1. ``/api/auth/signin`` stores a random ``state`` in a short-lived
   signed cookie and redirects to the identity provider;
2. the provider sends the browser back to ``/api/auth/callback`` with a
   ``code``; the state is checked, the code exchanged and the profile
   fetched;
3. the user is looked up by email (created as a customer the first
   time), the session cookie is set and the browser is sent to the
   dashboard of its role.

``/dashboard`` performs the same role-based redirect for a browser
that is already signed in.
"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, Query, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, RedirectResponse

from studio_api.app.core import oauth
from studio_api.app.core.config import settings
from studio_api.app.core.policy import dashboard_path
from studio_api.app.core.security import (
    create_session_token,
    decode_session_token,
    get_current_user,
    get_lenient_user,
    session_for,
)
from studio_api.app.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()

STATE_COOKIE = "oauth_state"
STATE_TTL_SECONDS = 600


def _set_cookie(response: RedirectResponse, name: str, value: str, max_age: int) -> None:
    response.set_cookie(
        name,
        value,
        max_age=max_age,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


@router.get("/api/auth/signin")
async def signin() -> RedirectResponse:
    """Redirect the browser to the identity provider."""
    if not settings.oauth_client_id:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Sign-in is not configured")
    state = oauth.new_state()
    response = RedirectResponse(oauth.authorize_url(state), status_code=status.HTTP_302_FOUND)
    _set_cookie(
        response,
        STATE_COOKIE,
        create_session_token({"state": state}, expires_delta=STATE_TTL_SECONDS),
        STATE_TTL_SECONDS,
    )
    return response


@router.get("/api/auth/callback")
async def callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    state_cookie: Optional[str] = Cookie(default=None, alias=STATE_COOKIE),
) -> RedirectResponse:
    """Finish sign-in and open a session."""
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Sign-in was cancelled: {error}")
    if not code or not state:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing code or state")
    expected = decode_session_token(state_cookie) if state_cookie else None
    if not expected or not hmac.compare_digest(str(expected.get("state", "")), state):
        logger.warning("OAuth callback with missing or mismatched state")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid sign-in state")

    try:
        tokens = await run_in_threadpool(oauth.exchange_code, code)
        profile = await run_in_threadpool(oauth.fetch_userinfo, tokens["access_token"])
    except oauth.OAuthError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    user = await UserService.sign_in(
        email=profile["email"],
        name=profile.get("name"),
        image=profile.get("picture"),
    )
    logger.info("User %s signed in as %s", user.id, user.role)
    response = RedirectResponse(dashboard_path(user.role), status_code=status.HTTP_303_SEE_OTHER)
    _set_cookie(
        response,
        settings.session_cookie_name,
        session_for({"id": user.id, "role": user.role}),
        settings.session_expire_minutes * 60,
    )
    response.delete_cookie(STATE_COOKIE)
    return response


@router.get("/api/auth/session")
async def current_session(current_user: dict = Depends(get_current_user)) -> dict:
    """Return the signed-in user as seen by the dashboards."""
    return {"user": current_user}


@router.post("/api/auth/signout")
async def signout() -> JSONResponse:
    response = JSONResponse({"success": True})
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get("/dashboard")
async def dashboard(current_user: Optional[dict] = Depends(get_lenient_user)) -> RedirectResponse:
    """Send the browser to the dashboard matching its role."""
    role = current_user["role"] if current_user else None
    return RedirectResponse(dashboard_path(role), status_code=status.HTTP_307_TEMPORARY_REDIRECT)
