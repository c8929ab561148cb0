"""
Session tokens and authentication dependencies.

Sessions are JSON Web Tokens signed with HMAC‑SHA256 and base64url
encoded.  A session token carries the user id in ``sub``, the role the
user had at sign-in in ``role`` and an expiration timestamp in
``exp``.  Browsers send it in the session cookie set by the OAuth
callback; scripts and tests may send it as ``Authorization: Bearer``.

The role inside the token is informational only.  ``get_current_user``
reloads the user document on every request, so a role change made by
an admin applies to the next request without waiting for the session
to expire.
"""

import base64
import hashlib
import hmac
import json
import logging
import time
from typing import Any, Callable, Dict, Optional

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .policy import is_allowed
from .store import CollectionStore

logger = logging.getLogger(__name__)


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64‑url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_session_token(data: Dict[str, Any], expires_delta: Optional[int] = None) -> str:
    """Create a signed token with the given claims.

    Parameters
    ----------
    data : dict
        Claims to embed, e.g. ``{"sub": user_id, "role": "customer"}``.
    expires_delta : Optional[int]
        Lifetime in seconds.  Defaults to
        ``settings.session_expire_minutes * 60``.

    Returns
    -------
    str
        A token of the form ``header.payload.signature``.
    """
    to_encode = data.copy()
    exp_seconds = expires_delta or settings.session_expire_minutes * 60
    to_encode["exp"] = int(time.time()) + exp_seconds
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, settings.secret_key))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def decode_session_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify a token and return its claims, or ``None`` if invalid or expired."""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    try:
        actual_sig = _b64_url_decode(signature_b64)
        if not hmac.compare_digest(_sign(signing_input, settings.secret_key), actual_sig):
            return None
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict):
        return None
    exp = data.get("exp")
    if not isinstance(exp, int) or exp < int(time.time()):
        return None
    return data


def session_for(user: Dict[str, Any]) -> str:
    """Issue a session token for a stored user document."""
    return create_session_token({"sub": user["id"], "role": user["role"]})


bearer = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _resolve_session(
    credentials: Optional[HTTPAuthorizationCredentials],
    session_cookie: Optional[str],
) -> Optional[Dict[str, Any]]:
    """Return the session user for the request, ``None`` when signed out.

    The session cookie is tried first, then the Bearer token, so a stale
    cookie left in a browser does not hide a valid ``Authorization``
    header.  Raises 401 when tokens are presented but none of them is
    valid or points at a user that still exists.
    """
    tokens = [t for t in (session_cookie, credentials.credentials if credentials else None) if t]
    if not tokens:
        return None
    error = None
    for token in tokens:
        payload = decode_session_token(token)
        if not payload or not payload.get("sub"):
            error = _unauthorized("Invalid or expired session")
            continue
        doc = CollectionStore.get("users", str(payload["sub"]))
        if doc is None:
            error = _unauthorized("User no longer exists")
            continue
        user = doc.data
        return {
            "id": user["id"],
            "email": user.get("email"),
            "name": user.get("name"),
            "image": user.get("image"),
            "role": user.get("role"),
        }
    logger.warning("Rejected session: %s", error.detail)
    raise error


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    session_cookie: Optional[str] = Cookie(default=None, alias=settings.session_cookie_name),
) -> Optional[Dict[str, Any]]:
    """Dependency returning the session user or ``None`` for anonymous requests."""
    return _resolve_session(credentials, session_cookie)


def get_lenient_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    session_cookie: Optional[str] = Cookie(default=None, alias=settings.session_cookie_name),
) -> Optional[Dict[str, Any]]:
    """Like ``get_optional_user`` but an unusable session counts as anonymous.

    Used on routes the public may call, where a stale cookie must not
    turn the request into a 401.
    """
    try:
        return _resolve_session(credentials, session_cookie)
    except HTTPException as e:
        logger.info("Treating request as anonymous: %s", e.detail)
        return None


def get_current_user(
    user: Optional[Dict[str, Any]] = Depends(get_optional_user),
) -> Dict[str, Any]:
    """Dependency that requires a signed-in user.

    Answers 401 when the request carries no session at all.
    """
    if user is None:
        raise _unauthorized("Unauthorized")
    return user


def require_permission(resource: str, action: str) -> Callable[..., Optional[Dict[str, Any]]]:
    """Dependency factory enforcing the access policy.

    Use it in an endpoint as
    ``Depends(require_permission("booking", "update"))``.  Anonymous
    requests get 401 unless the policy lets the public perform the
    action, in which case the dependency yields ``None`` and an invalid
    session is ignored rather than refused.  Signed-in users whose role
    is not allowed get 403.
    """
    user_dependency = get_lenient_user if is_allowed(None, resource, action) else get_optional_user

    def _permission_dependency(
        user: Optional[Dict[str, Any]] = Depends(user_dependency),
    ) -> Optional[Dict[str, Any]]:
        role = user["role"] if user else None
        if is_allowed(role, resource, action):
            return user
        if user is None:
            raise _unauthorized("Unauthorized")
        logger.warning("Denied %s %s to user %s (%s)", action, resource, user["id"], role)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )

    return _permission_dependency
