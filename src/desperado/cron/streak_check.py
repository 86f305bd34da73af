"""Daily streak check: find daily habits whose streak is at risk."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any

import httpx

from desperado.notify.discord import SYSTEM_COLOR, DiscordNotifier, NotifierError
from desperado.stores.config import ConfigStore
from desperado.stores.platform import PlatformStore

logger = logging.getLogger(__name__)

MAX_LISTED_HABITS = 10


class ChannelNotConfiguredError(Exception):
    """Raised when alerts are due but no pipeline channel is configured."""


def yesterday_window(now: datetime) -> date:
    """The previous UTC calendar day."""
    return (now.astimezone(timezone.utc) - timedelta(days=1)).date()


def find_missed_habits(candidates: list[dict[str, Any]], checked_in: set[uuid.UUID]) -> list[dict[str, Any]]:
    """Candidates with no check-in in the window, in their original order."""
    return [h for h in candidates if h["id"] not in checked_in]


def build_streak_embed(missed: list[dict[str, Any]], now: datetime) -> dict[str, Any]:
    lines = [f"- **{h['name']}** ({h['current_streak']}-day streak at risk)" for h in missed[:MAX_LISTED_HABITS]]
    if len(missed) > MAX_LISTED_HABITS:
        lines.append(f"...and {len(missed) - MAX_LISTED_HABITS} more")
    plural = "" if len(missed) == 1 else "s"
    return {
        "title": "Streaks at Risk",
        "description": f"{len(missed)} habit{plural} missed check-in yesterday. Check in today or lose the streak.",
        "color": SYSTEM_COLOR,
        "fields": [{"name": "Habits", "value": "\n".join(lines)}],
        "footer": {"text": "The System is watching."},
        "timestamp": now.isoformat(),
    }


async def run_streak_check(
    platform: PlatformStore,
    config: ConfigStore,
    notifier: DiscordNotifier,
    channel_id: str,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Alert the pipeline channel about daily habits that missed yesterday.

    Candidates are unarchived daily habits with a positive streak; a habit is
    at risk when it has no check-in dated the previous UTC day. A failed
    delivery is logged and the summary is still returned.

    Raises:
        ChannelNotConfiguredError: Habits are at risk but ``channel_id`` is empty.
    """
    now = now or datetime.now(timezone.utc)
    daily_ids = await config.daily_frequency_ids()
    candidates = await platform.list_streak_candidates(daily_ids)
    if not candidates:
        return {"message": "No streaks at risk", "count": 0}

    day = yesterday_window(now)
    checked_in = await platform.habit_ids_checked_in_on([h["id"] for h in candidates], day)
    missed = find_missed_habits(candidates, checked_in)
    if not missed:
        return {"message": "All streaks maintained", "count": 0}

    if not channel_id:
        raise ChannelNotConfiguredError("No PIPELINE_CHANNEL_ID")

    try:
        await notifier.send_embed(channel_id, build_streak_embed(missed, now))
    except (NotifierError, httpx.HTTPError):
        logger.exception("Streak alert for %d habits could not be delivered", len(missed))
    else:
        logger.info("Streak alerts sent for %d habits missed on %s", len(missed), day)
    return {
        "message": "Streak alerts sent",
        "count": len(missed),
        "habits": [
            {"id": str(h["id"]), "name": h["name"], "current_streak": h["current_streak"]}
            for h in missed
        ],
    }
