"""
Session token verification.

Sessions are issued by Supabase Auth as HS256 JWTs signed with the project's
JWT secret. The ``sub`` claim carries the user's UUID.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

import jwt

from desperado.config import Settings


@dataclass(frozen=True)
class SessionUser:
    """The authenticated caller, as asserted by a verified session token."""

    id: uuid.UUID
    email: str | None = None
    role: str | None = None


def decode_session_token(token: str, settings: Settings) -> dict[str, Any]:
    """
    Decode and verify a session JWT.

    Raises:
        jwt.InvalidTokenError: If the signature, expiry or audience is invalid,
            or if no verification secret is configured.
    """
    if not settings.supabase_jwt_secret:
        raise jwt.InvalidTokenError("Session verification secret is not configured")
    return jwt.decode(
        token,
        settings.supabase_jwt_secret,
        algorithms=["HS256"],
        audience=settings.supabase_jwt_audience,
        options={"require": ["exp", "sub"]},
    )


def session_user_from_claims(claims: dict[str, Any]) -> SessionUser:
    """Build a SessionUser from verified claims. Raises InvalidTokenError on a malformed subject."""
    try:
        user_id = uuid.UUID(str(claims["sub"]))
    except (KeyError, ValueError) as e:
        raise jwt.InvalidTokenError("Token subject is not a user id") from e
    return SessionUser(id=user_id, email=claims.get("email"), role=claims.get("role"))
