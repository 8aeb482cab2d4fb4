"""
Authentication dependencies for FastAPI.

The identity provider issues signed access tokens; this service only checks
the signature and trusts the ``sub`` claim as the caller's user id.

Supports two transports:
1. Cookie-based session (mobile web builds): httpOnly cookie with the token
2. Bearer token: Authorization header
"""

import logging
import uuid
from typing import Any

from fastapi import Cookie, Depends, Header, HTTPException
from pydantic import BaseModel

from matchline import repo
from matchline.auth.security import decode_access_token
from matchline.config import DEV_MODE

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "matchline_session"


class AuthErrorDetail(BaseModel):
    message: str = "unauthorized"
    reason: str
    trace_id: str


class AuthError(Exception):
    """Raised when authentication fails with detailed reason."""

    def __init__(self, reason: str, detail: str = "unauthorized"):
        self.reason = reason
        self.detail = detail
        self.trace_id = str(uuid.uuid4())
        super().__init__(detail)


def _log_auth_failure(reason: str, trace_id: str, auth_source: str | None = None, user_id: str | None = None) -> None:
    logger.warning(f"[AUTH_FAILURE] trace_id={trace_id} reason={reason} auth_source={auth_source} user_id={user_id}")


def _unauthorized(reason: str, trace_id: str, message: str = "unauthorized", status_code: int = 401) -> HTTPException:
    if DEV_MODE:
        detail: Any = AuthErrorDetail(message=message, reason=reason, trace_id=trace_id).model_dump()
    else:
        detail = {"message": message, "trace_id": trace_id}
    return HTTPException(status_code=status_code, detail=detail)


def _extract_bearer(authorization: str | None) -> str:
    if not authorization:
        raise AuthError(reason="missing_token", detail="Missing Authorization header")
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise AuthError(reason="malformed_token", detail="Invalid Authorization header")
    return parts[1].strip()


def _user_id_from_token(token: str, trace_id: str, auth_source: str) -> str:
    try:
        payload = decode_access_token(token)
    except HTTPException as e:
        if e.status_code >= 500:
            logger.error(f"[AUTH_CONFIG] trace_id={trace_id} detail={e.detail}")
            raise
        reason = "token_expired" if "expired" in str(e.detail).lower() else "signature_invalid"
        _log_auth_failure(reason, trace_id, auth_source)
        raise _unauthorized(reason, trace_id)

    user_id = str(payload.get("sub", "")).strip()
    if not user_id:
        _log_auth_failure("token_missing_subject", trace_id, auth_source)
        raise _unauthorized("token_missing_subject", trace_id)
    return user_id


def get_current_identity(
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> str:
    """
    Resolve the caller's user id without requiring a profile.

    Cookie session takes priority over the bearer header.
    """
    trace_id = str(uuid.uuid4())

    if session_token:
        return _user_id_from_token(session_token, trace_id, "cookie")

    if authorization:
        try:
            token = _extract_bearer(authorization)
        except AuthError as e:
            _log_auth_failure(e.reason, e.trace_id, auth_source="bearer")
            raise _unauthorized(e.reason, e.trace_id, message=e.detail)
        return _user_id_from_token(token, trace_id, "bearer")

    _log_auth_failure("missing_token", trace_id, auth_source="none")
    raise _unauthorized("missing_token", trace_id, message="Authentication required")


def get_current_user(user_id: str = Depends(get_current_identity)) -> dict[str, Any]:
    """Caller identity plus their profile row. 404 until the profile exists."""
    profile = repo.get_profile(user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    logger.debug(f"[auth] resolved user_id={user_id} status={profile.get('verification_status')}")
    return profile
