"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
import structlog
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from desperado.auth.jwt import SessionUser, decode_session_token, session_user_from_claims
from desperado.config import Settings
from desperado.dependencies import get_app_settings, get_platform_store
from desperado.stores.platform import MembershipContext, PlatformStore

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    settings: Settings = Depends(get_app_settings),
) -> SessionUser:
    """
    Verify the session JWT and return the caller, binding ``user_id`` to the log context.

    Raises 401 when the header is missing or the token does not verify.
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        claims = decode_session_token(credentials.credentials, settings)
        user = session_user_from_claims(claims)
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail="Unauthorized") from e
    structlog.contextvars.bind_contextvars(user_id=str(user.id))
    return user


async def get_household_admin(
    user: SessionUser = Depends(get_current_user),
    store: PlatformStore = Depends(get_platform_store),
) -> MembershipContext:
    """Resolve the caller's household membership and require the admin role (403 otherwise)."""
    ctx = await store.get_membership(user.id)
    if ctx is None or ctx.role != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return ctx
