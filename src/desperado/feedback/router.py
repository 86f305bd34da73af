"""Feedback voting endpoint."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response

from desperado.auth.dependencies import get_current_user
from desperado.auth.jwt import SessionUser
from desperado.dependencies import get_platform_store
from desperado.exceptions import DomainError
from desperado.feedback.service import toggle_feedback_vote
from desperado.stores.platform import PlatformStore

router = APIRouter(prefix="/api/feedback", tags=["Feedback"])


@router.post("/{feedback_id}/vote")
async def vote(
    feedback_id: str,
    response: Response,
    user: SessionUser = Depends(get_current_user),  # noqa: B008
    store: PlatformStore = Depends(get_platform_store),  # noqa: B008
) -> dict[str, bool]:
    """Toggle the caller's vote. 201 when a vote is added, 200 when removed."""
    try:
        parsed_id = uuid.UUID(feedback_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail="Invalid ID") from e

    try:
        voted = await toggle_feedback_vote(store, parsed_id, user.id)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e

    response.status_code = 201 if voted else 200
    return {"voted": voted}
