"""Household invite service: creation, listing, and redemption."""

from __future__ import annotations

import enum
import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from desperado.config import Settings
from desperado.exceptions import ConflictError, GoneError, NotFoundError
from desperado.household.invite_codes import generate_unique_invite_code, normalize_invite_code
from desperado.stores.platform import InviteRecord, MembershipContext, PlatformStore

logger = logging.getLogger(__name__)

INVITE_ROLES = ("member", "admin")


class InviteState(enum.Enum):
    ACTIVE_AVAILABLE = "active-available"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"
    INACTIVE = "inactive"


def invite_state(invite: InviteRecord, now: datetime) -> InviteState:
    """Classify an invite snapshot. Inactive wins over expired, expired over exhausted."""
    if not invite.is_active:
        return InviteState.INACTIVE
    if invite.expires_at is not None and invite.expires_at < now:
        return InviteState.EXPIRED
    if invite.times_used >= invite.max_uses:
        return InviteState.EXHAUSTED
    return InviteState.ACTIVE_AVAILABLE


@dataclass(frozen=True)
class RedeemResult:
    household_id: uuid.UUID
    message: str


def _optional_display_name(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


async def redeem_invite(
    store: PlatformStore,
    user_id: uuid.UUID,
    raw_code: Any,
    display_name: Any = None,
    now: datetime | None = None,
) -> RedeemResult:
    """
    Join a household with an invite code.

    The caller's existing membership is checked before the code is even
    parsed. The invite row is read under ``FOR UPDATE`` and every check runs
    against that one snapshot; the membership insert and the usage-count
    update commit together or not at all.

    Raises:
        ConflictError: The user already belongs to a household.
        BadRequestError: The code is missing or malformed.
        NotFoundError: No active invite has this code.
        GoneError: The invite expired, is used up, or was used up concurrently.
    """
    if await store.get_membership(user_id) is not None:
        raise ConflictError("You already belong to a household")

    code = normalize_invite_code(raw_code)
    now = now or datetime.now(timezone.utc)

    invite = await store.lock_active_invite(code)
    if invite is None:
        raise NotFoundError("Invalid or expired invite code")

    state = invite_state(invite, now)
    if state is InviteState.INACTIVE:
        raise NotFoundError("Invalid or expired invite code")
    if state is InviteState.EXPIRED:
        await store.deactivate_invite(invite.id)
        await store.commit()
        raise GoneError("This invite code has expired")
    if state is InviteState.EXHAUSTED:
        await store.deactivate_invite(invite.id)
        await store.commit()
        raise GoneError("This invite code has reached its usage limit")

    try:
        await store.add_member(invite.household_id, user_id, invite.role, _optional_display_name(display_name))
    except ConflictError:
        await store.rollback()
        raise

    if not await store.record_invite_use(invite.id, invite.times_used, invite.max_uses):
        await store.rollback()
        logger.warning("Invite %s usage count moved during redemption by user %s", invite.id, user_id)
        raise GoneError("This invite code has reached its usage limit")

    household_name = await store.get_household_name(invite.household_id)
    await store.commit()

    logger.info("User %s joined household %s via invite %s", user_id, invite.household_id, invite.id)
    return RedeemResult(
        household_id=invite.household_id,
        message=f"Welcome to {household_name or 'the household'}!",
    )


def _coerce_int(value: Any, default: int) -> int:
    """Lenient integer parse; zero, junk, non-finite and missing values become ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            return default
        parsed = int(value)
    elif isinstance(value, str):
        try:
            parsed = int(value.strip())
        except ValueError:
            return default
    else:
        return default
    return parsed or default


def _clamp(value: int, low: int, high: int) -> int:
    return min(max(low, value), high)


async def create_invite(
    store: PlatformStore,
    ctx: MembershipContext,
    settings: Settings,
    role: Any = None,
    max_uses: Any = None,
    expires_in_days: Any = None,
) -> tuple[dict[str, Any], str]:
    """Create an invite for the admin's household. Returns the row and a share message."""
    granted_role = role if role in INVITE_ROLES else "member"
    uses = _clamp(_coerce_int(max_uses, 1), 1, settings.invite_max_uses_limit)
    days = _clamp(
        _coerce_int(expires_in_days, settings.invite_default_expiry_days),
        1,
        settings.invite_max_expiry_days,
    )

    code = await generate_unique_invite_code(store)
    invite = await store.create_invite(
        household_id=ctx.household_id,
        code=code,
        created_by=ctx.user_id,
        role=granted_role,
        max_uses=uses,
        expires_at=datetime.now(timezone.utc) + timedelta(days=days),
    )
    logger.info("Invite %s created for household %s by %s", invite["id"], ctx.household_id, ctx.user_id)
    message = f"Invite code: {code}. Share this with your partner. Expires in {days} days."
    return invite, message


async def list_invites(store: PlatformStore, ctx: MembershipContext) -> list[dict[str, Any]]:
    return await store.list_active_invites(ctx.household_id)
