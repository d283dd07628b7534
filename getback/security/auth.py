"""Request authentication at the API edge.

Tokens and sessions are issued upstream. This module only checks the shared
bearer token (unless explicitly disabled) and takes the caller's identity
from the header the upstream auth layer sets.
"""

from __future__ import annotations

import hmac

from fastapi import Header, HTTPException, status

from getback.config.settings import GetBackSettings, resolve_settings

IDENTITY_HEADER = "X-User-Email"


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def check_bearer(authorization: str | None, expected: str | None) -> None:
    """401 when no token is presented, 403 when it does not match."""
    if not expected:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="auth not configured")
    token = _bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="missing bearer token")
    if not hmac.compare_digest(token, expected):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="invalid bearer token")


def require_api_auth(authorization: str | None, settings: GetBackSettings) -> None:
    if settings.allow_unauthenticated_api:
        return
    check_bearer(authorization, settings.api_bearer_token)


def current_user_email(
    authorization: str | None = Header(default=None),
    x_user_email: str | None = Header(default=None, alias=IDENTITY_HEADER),
) -> str:
    """FastAPI dependency returning the authenticated caller's email."""
    require_api_auth(authorization, resolve_settings())
    email = (x_user_email or "").strip().lower()
    if not email:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="missing user identity")
    return email


__all__ = ["IDENTITY_HEADER", "check_bearer", "current_user_email", "require_api_auth"]
