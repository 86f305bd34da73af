"""Invite code generation and normalization for households.

Codes are 6 characters from an alphabet without I, O, 0 or 1, generated
server-side with a cryptographic random source.
"""

from __future__ import annotations

import secrets
from typing import Any

from desperado.exceptions import BadRequestError
from desperado.stores.platform import PlatformStore

INVITE_CHARSET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITE_LENGTH = 6
MAX_CODE_LENGTH = 20
GENERATION_RETRIES = 5


def generate_invite_code() -> str:
    """Generate a cryptographically random 6-character invite code."""
    return "".join(secrets.choice(INVITE_CHARSET) for _ in range(INVITE_LENGTH))


def normalize_invite_code(value: Any) -> str:
    """Validate a user-entered code and return it trimmed and upper-cased.

    Raises:
        BadRequestError: If the value is missing, not a string, blank, or too long.
    """
    if value is None:
        raise BadRequestError("invite_code is required")
    if not isinstance(value, str):
        raise BadRequestError("invite_code must be a string")
    code = value.strip()
    if not code:
        raise BadRequestError("invite_code cannot be empty")
    if len(code) > MAX_CODE_LENGTH:
        raise BadRequestError(f"invite_code must be {MAX_CODE_LENGTH} characters or fewer")
    return code.upper()


async def generate_unique_invite_code(store: PlatformStore) -> str:
    """Generate an invite code that doesn't already exist in the database."""
    for _ in range(GENERATION_RETRIES):
        code = generate_invite_code()
        if not await store.invite_code_exists(code):
            return code
    raise RuntimeError(f"Failed to generate unique invite code after {GENERATION_RETRIES} attempts")
