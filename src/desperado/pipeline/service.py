"""Feedback pipeline service: worker queue, status reports, and admin approval."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from desperado.exceptions import ConflictError, ForbiddenError, NotFoundError
from desperado.stores.platform import MembershipContext, PlatformStore

logger = logging.getLogger(__name__)

# Optional report fields copied onto the feedback row only when the worker sends them.
REPORT_FIELDS = ("branch_name", "preview_url", "pr_number", "worker_log")


async def list_queued_jobs(store: PlatformStore, page_size: int) -> list[dict[str, Any]]:
    return await store.list_queued_feedback(page_size)


def build_status_update(report: dict[str, Any], now: datetime) -> dict[str, Any]:
    """Translate a worker report into column updates.

    ``working`` stamps the start time and moves the item to ``in_progress``;
    ``preview_ready`` and ``failed`` stamp the completion time.
    """
    status = report["pipeline_status"]
    fields: dict[str, Any] = {"pipeline_status": status}
    for name in REPORT_FIELDS:
        if name in report:
            fields[name] = report[name]
    if status == "working":
        fields["worker_started_at"] = now
        fields["status"] = "in_progress"
    if status in ("preview_ready", "failed"):
        fields["worker_completed_at"] = now
    return fields


async def apply_status_report(store: PlatformStore, report: dict[str, Any]) -> dict[str, Any]:
    """Apply a worker's status report. Raises NotFoundError for an unknown feedback id."""
    feedback_id: uuid.UUID = report["feedback_id"]
    fields = build_status_update(report, datetime.now(timezone.utc))
    feedback = await store.update_feedback(feedback_id, fields)
    if feedback is None:
        raise NotFoundError("Feedback not found")
    logger.info("Feedback %s pipeline status -> %s", feedback_id, fields["pipeline_status"])
    return feedback


async def approve_feedback(
    store: PlatformStore,
    ctx: MembershipContext,
    feedback_id: uuid.UUID,
) -> dict[str, Any]:
    """Queue a feedback item for the worker on behalf of a household admin."""
    feedback = await store.get_feedback(feedback_id)
    if feedback is None:
        raise NotFoundError("Feedback not found")
    if feedback["household_id"] is not None and feedback["household_id"] != ctx.household_id:
        raise ForbiddenError("Not authorized")
    if feedback["pipeline_status"] == "working":
        raise ConflictError("Already being worked on")

    updated = await store.update_feedback(feedback_id, {"status": "planned", "pipeline_status": "queued"})
    if updated is None:
        raise NotFoundError("Feedback not found")
    logger.info("Feedback %s queued for pipeline by %s", feedback_id, ctx.user_id)
    return updated
