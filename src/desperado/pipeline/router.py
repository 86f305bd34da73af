"""Feedback pipeline endpoints.

The queue and status routes are called by the pipeline worker with the
shared ``PIPELINE_SECRET``; approval is a household-admin action.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from desperado.auth.dependencies import get_household_admin
from desperado.auth.shared_secret import require_pipeline_secret
from desperado.config import Settings
from desperado.dependencies import get_app_settings, get_notifier, get_platform_store
from desperado.exceptions import DomainError
from desperado.notify.discord import DiscordNotifier
from desperado.pipeline.notifications import announce_pipeline_status
from desperado.pipeline.schemas import (
    ApproveRequest,
    ApproveResponse,
    PipelineFeedback,
    PipelineStatusRequest,
    PipelineStatusResponse,
    QueuedJob,
    QueueResponse,
)
from desperado.pipeline.service import apply_status_report, approve_feedback, list_queued_jobs
from desperado.stores.platform import MembershipContext, PlatformStore

router = APIRouter(prefix="/api/pipeline", tags=["Pipeline"])


@router.get("/queue", response_model=QueueResponse, dependencies=[Depends(require_pipeline_secret)])
async def queue(
    store: PlatformStore = Depends(get_platform_store),  # noqa: B008
    settings: Settings = Depends(get_app_settings),  # noqa: B008
) -> QueueResponse:
    """Next jobs for the worker: planned and queued, by priority (nulls last) then age."""
    jobs = await list_queued_jobs(store, settings.pipeline_queue_page_size)
    return QueueResponse(jobs=[QueuedJob(**j) for j in jobs])


@router.post("/status", response_model=PipelineStatusResponse, dependencies=[Depends(require_pipeline_secret)])
async def report_status(
    body: PipelineStatusRequest,
    background_tasks: BackgroundTasks,
    store: PlatformStore = Depends(get_platform_store),  # noqa: B008
    settings: Settings = Depends(get_app_settings),  # noqa: B008
    notifier: DiscordNotifier = Depends(get_notifier),  # noqa: B008
) -> PipelineStatusResponse:
    """Record worker progress and announce it to the pipeline channel."""
    try:
        feedback = await apply_status_report(store, body.model_dump(exclude_unset=True))
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e

    if settings.pipeline_channel_id:
        background_tasks.add_task(
            announce_pipeline_status,
            notifier,
            settings.pipeline_channel_id,
            feedback,
            body.worker_log,
        )
    return PipelineStatusResponse(feedback=PipelineFeedback(**feedback))


@router.post("/approve", response_model=ApproveResponse)
async def approve(
    body: ApproveRequest,
    ctx: MembershipContext = Depends(get_household_admin),  # noqa: B008
    store: PlatformStore = Depends(get_platform_store),  # noqa: B008
) -> ApproveResponse:
    """Queue a feedback item for the worker (household admin only)."""
    try:
        feedback = await approve_feedback(store, ctx, body.feedback_id)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e
    return ApproveResponse(
        feedback=PipelineFeedback(**feedback),
        message="Queued for pipeline. Worker will pick it up.",
    )
