"""Pydantic schemas for household endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel


# --- Invites ---


class CreateInviteRequest(BaseModel):
    # Loosely typed: out-of-range or unparseable values fall back to defaults.
    role: Any = None
    max_uses: Any = None
    expires_in_days: Any = None


class RedeemInviteRequest(BaseModel):
    # Validated by the service after the membership check.
    invite_code: Any = None
    display_name: Any = None


class InviteResponse(BaseModel):
    id: uuid.UUID
    household_id: uuid.UUID
    invite_code: str
    created_by: uuid.UUID
    role: str
    max_uses: int
    times_used: int
    expires_at: datetime | None = None
    is_active: bool
    created_at: datetime | None = None


class CreateInviteResponse(BaseModel):
    invite: InviteResponse
    message: str


class InviteListResponse(BaseModel):
    invites: list[InviteResponse]


class RedeemInviteResponse(BaseModel):
    success: bool = True
    household_id: uuid.UUID
    message: str
