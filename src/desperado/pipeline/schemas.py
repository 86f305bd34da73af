"""Pydantic schemas for pipeline endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel

PipelineStatus = Literal["queued", "working", "preview_ready", "approved", "rejected", "failed"]


class QueuedJob(BaseModel):
    id: uuid.UUID
    type: str
    body: str
    priority: int | None = None
    tags: list[str] | None = None
    ai_classified_severity: str | None = None
    ai_extracted_feature: str | None = None
    created_at: datetime


class QueueResponse(BaseModel):
    jobs: list[QueuedJob]


class PipelineStatusRequest(BaseModel):
    feedback_id: uuid.UUID
    pipeline_status: PipelineStatus
    branch_name: str | None = None
    preview_url: str | None = None
    pr_number: int | None = None
    worker_log: str | None = None


class PipelineFeedback(BaseModel):
    id: uuid.UUID
    type: str
    body: str
    status: str | None = None
    pipeline_status: str | None = None
    branch_name: str | None = None
    preview_url: str | None = None
    pr_number: int | None = None


class PipelineStatusResponse(BaseModel):
    feedback: PipelineFeedback


class ApproveRequest(BaseModel):
    feedback_id: uuid.UUID


class ApproveResponse(BaseModel):
    feedback: PipelineFeedback
    message: str
