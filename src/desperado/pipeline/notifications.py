"""Channel announcements for pipeline progress."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from desperado.notify.discord import DiscordNotifier, NotifierError

logger = structlog.get_logger()

PREVIEW_COLOR = 0xD4A857
PREVIEW_LENGTH = 100
LOG_EXCERPT_LENGTH = 500


async def announce_pipeline_status(
    notifier: DiscordNotifier,
    channel_id: str,
    feedback: dict[str, Any],
    worker_log: str | None = None,
) -> None:
    """Post a message for ``working``, ``preview_ready`` or ``failed``. Failures are logged only."""
    status = feedback["pipeline_status"]
    preview = (feedback.get("body") or "")[:PREVIEW_LENGTH]
    try:
        if status == "working":
            await notifier.send_message(channel_id, f"**Working on:** {preview}...")
        elif status == "preview_ready":
            pr_number = feedback.get("pr_number")
            await notifier.send_embed(
                channel_id,
                {
                    "title": "Preview Ready",
                    "description": preview,
                    "color": PREVIEW_COLOR,
                    "fields": [
                        {"name": "Preview", "value": feedback.get("preview_url") or "Pending...", "inline": True},
                        {"name": "PR", "value": f"#{pr_number}" if pr_number else "-", "inline": True},
                        {"name": "Branch", "value": feedback.get("branch_name") or "-", "inline": True},
                    ],
                },
            )
        elif status == "failed":
            excerpt = (worker_log or "")[:LOG_EXCERPT_LENGTH] or "Unknown error"
            await notifier.send_message(channel_id, f"**Failed:** {preview}\n```{excerpt}```")
    except (NotifierError, httpx.HTTPError):
        logger.exception("pipeline_notification_failed", feedback_id=str(feedback["id"]), pipeline_status=status)
