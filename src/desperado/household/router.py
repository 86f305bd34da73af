"""Household invite endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from desperado.auth.dependencies import get_current_user, get_household_admin
from desperado.auth.jwt import SessionUser
from desperado.config import Settings
from desperado.dependencies import get_app_settings, get_platform_store
from desperado.exceptions import DomainError
from desperado.household.schemas import (
    CreateInviteRequest,
    CreateInviteResponse,
    InviteListResponse,
    InviteResponse,
    RedeemInviteRequest,
    RedeemInviteResponse,
)
from desperado.household.service import create_invite, list_invites, redeem_invite
from desperado.stores.platform import MembershipContext, PlatformStore

router = APIRouter(prefix="/api/household", tags=["Household"])


@router.get("/invite", response_model=InviteListResponse)
async def list_invites_endpoint(
    ctx: MembershipContext = Depends(get_household_admin),  # noqa: B008
    store: PlatformStore = Depends(get_platform_store),  # noqa: B008
) -> InviteListResponse:
    """List the household's active invite codes, newest first (admin only)."""
    invites = await list_invites(store, ctx)
    return InviteListResponse(invites=[InviteResponse(**i) for i in invites])


@router.post("/invite", response_model=CreateInviteResponse, status_code=201)
async def create_invite_endpoint(
    body: CreateInviteRequest | None = None,
    ctx: MembershipContext = Depends(get_household_admin),  # noqa: B008
    store: PlatformStore = Depends(get_platform_store),  # noqa: B008
    settings: Settings = Depends(get_app_settings),  # noqa: B008
) -> CreateInviteResponse:
    """Generate a new invite code for the household (admin only)."""
    body = body or CreateInviteRequest()
    invite, message = await create_invite(
        store,
        ctx,
        settings,
        role=body.role,
        max_uses=body.max_uses,
        expires_in_days=body.expires_in_days,
    )
    return CreateInviteResponse(invite=InviteResponse(**invite), message=message)


@router.post("/invite/redeem", response_model=RedeemInviteResponse, status_code=201)
async def redeem_invite_endpoint(
    body: RedeemInviteRequest,
    user: SessionUser = Depends(get_current_user),  # noqa: B008
    store: PlatformStore = Depends(get_platform_store),  # noqa: B008
) -> RedeemInviteResponse:
    """Join a household using an invite code."""
    try:
        result = await redeem_invite(store, user.id, body.invite_code, body.display_name)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e
    return RedeemInviteResponse(household_id=result.household_id, message=result.message)
