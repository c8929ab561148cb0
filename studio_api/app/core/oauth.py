"""
OAuth 2.0 authorization-code client for the identity provider.

Only the three calls needed for sign-in are implemented: building the
authorize URL, exchanging the returned code for an access token and
fetching the user's profile.  The HTTP calls use ``httpx`` with the
timeout from settings.  Any transport error or non-2xx answer is raised
as ``OAuthError`` so the callback endpoint can turn it into a single
error response.
"""

import logging
import secrets
from typing import Any, Dict
from urllib.parse import urlencode

import httpx

from .config import settings

logger = logging.getLogger(__name__)


class OAuthError(Exception):
    """Sign-in with the identity provider failed."""


def new_state() -> str:
    """Random value tying the callback to the browser that started sign-in."""
    return secrets.token_urlsafe(24)


def authorize_url(state: str) -> str:
    params = {
        "client_id": settings.oauth_client_id,
        "redirect_uri": settings.oauth_redirect_uri,
        "response_type": "code",
        "scope": settings.oauth_scope,
        "state": state,
        "prompt": "select_account",
    }
    return f"{settings.oauth_authorize_url}?{urlencode(params)}"


def _checked_json(response: httpx.Response, what: str) -> Dict[str, Any]:
    if not response.is_success:
        logger.warning("OAuth %s failed: %s %s", what, response.status_code, response.text[:200])
        raise OAuthError(f"Identity provider rejected the {what} request")
    try:
        return response.json()
    except ValueError as e:
        raise OAuthError(f"Identity provider returned an invalid {what} response") from e


def exchange_code(code: str) -> Dict[str, Any]:
    """Trade an authorization code for the provider's token response."""
    try:
        response = httpx.post(
            settings.oauth_token_url,
            data={
                "code": code,
                "client_id": settings.oauth_client_id,
                "client_secret": settings.oauth_client_secret,
                "redirect_uri": settings.oauth_redirect_uri,
                "grant_type": "authorization_code",
            },
            headers={"Accept": "application/json"},
            timeout=settings.oauth_timeout,
        )
    except httpx.HTTPError as e:
        raise OAuthError("Could not reach the identity provider") from e
    tokens = _checked_json(response, "token")
    if not tokens.get("access_token"):
        raise OAuthError("Identity provider did not return an access token")
    return tokens


def fetch_userinfo(access_token: str) -> Dict[str, Any]:
    """Return the provider profile (``email``, ``name``, ``picture``)."""
    try:
        response = httpx.get(
            settings.oauth_userinfo_url,
            headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
            timeout=settings.oauth_timeout,
        )
    except httpx.HTTPError as e:
        raise OAuthError("Could not reach the identity provider") from e
    profile = _checked_json(response, "userinfo")
    if not profile.get("email"):
        raise OAuthError("Identity provider did not share an email address")
    return profile
