"""Feedback vote service."""

from __future__ import annotations

import logging
import uuid

from desperado.exceptions import NotFoundError
from desperado.stores.platform import PlatformStore

logger = logging.getLogger(__name__)


async def toggle_feedback_vote(store: PlatformStore, feedback_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    """Add the user's vote if absent, remove it if present. Returns True when the user now has a vote."""
    if await store.get_feedback(feedback_id) is None:
        raise NotFoundError("Feedback not found")
    voted = await store.toggle_vote(feedback_id, user_id)
    logger.info("User %s %s feedback %s", user_id, "voted on" if voted else "withdrew vote from", feedback_id)
    return voted
