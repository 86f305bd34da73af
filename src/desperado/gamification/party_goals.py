"""Party goals: goals flagged as shared, carrying an XP bonus."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from desperado.exceptions import NotFoundError
from desperado.stores.platform import PlatformStore

logger = logging.getLogger(__name__)

DEFAULT_PARTY_XP_BONUS = 100


async def list_party_goals(store: PlatformStore) -> list[dict[str, Any]]:
    return await store.list_party_goals()


async def mark_party_goal(
    store: PlatformStore, goal_id: uuid.UUID, party_xp_bonus: int | None = None
) -> dict[str, Any]:
    """Flag a goal as a party goal. Repeating the call updates the same row."""
    if not await store.goal_exists(goal_id):
        raise NotFoundError("Goal not found")
    row = await store.upsert_party_goal(goal_id, party_xp_bonus or DEFAULT_PARTY_XP_BONUS)
    logger.info("Goal %s marked as party goal (bonus=%d)", goal_id, row["party_xp_bonus"])
    return row


async def unmark_party_goal(store: PlatformStore, goal_id: uuid.UUID) -> None:
    await store.delete_party_goal(goal_id)
    logger.info("Goal %s is no longer a party goal", goal_id)
