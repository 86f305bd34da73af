"""Gamification API endpoints: party goals."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query

from desperado.auth.dependencies import get_current_user
from desperado.dependencies import get_platform_store
from desperado.exceptions import DomainError
from desperado.gamification.party_goals import list_party_goals, mark_party_goal, unmark_party_goal
from desperado.gamification.schemas import (
    MarkPartyGoalRequest,
    PartyGoalEntry,
    PartyGoalListResponse,
    PartyGoalResponse,
    PartyGoalRow,
)
from desperado.stores.platform import PlatformStore

router = APIRouter(prefix="/api/gamification", tags=["Gamification"], dependencies=[Depends(get_current_user)])


@router.get("/party-goals", response_model=PartyGoalListResponse)
async def get_party_goals(
    store: PlatformStore = Depends(get_platform_store),  # noqa: B008
) -> PartyGoalListResponse:
    rows = await list_party_goals(store)
    return PartyGoalListResponse(party_goals=[PartyGoalEntry(**r) for r in rows])


@router.post("/party-goals", response_model=PartyGoalResponse, status_code=201)
async def post_party_goal(
    body: MarkPartyGoalRequest,
    store: PlatformStore = Depends(get_platform_store),  # noqa: B008
) -> PartyGoalResponse:
    try:
        row = await mark_party_goal(store, body.goal_id, body.party_xp_bonus)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e
    return PartyGoalResponse(party_goal=PartyGoalRow(**row))


@router.delete("/party-goals")
async def delete_party_goal(
    goal_id: str | None = Query(None),
    store: PlatformStore = Depends(get_platform_store),  # noqa: B008
) -> dict[str, bool]:
    if not goal_id:
        raise HTTPException(status_code=400, detail="goal_id required")
    try:
        parsed = uuid.UUID(goal_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail="goal_id must be a valid UUID") from e
    await unmark_party_goal(store, parsed)
    return {"success": True}
