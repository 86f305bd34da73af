"""Pydantic schemas for gamification endpoints."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field


class PartyGoalGoal(BaseModel):
    id: uuid.UUID
    title: str
    description: str | None = None
    status: str
    progress_value: int
    target_date: date | None = None
    created_at: datetime | None = None


class PartyGoalEntry(BaseModel):
    id: uuid.UUID
    goal_id: uuid.UUID
    party_xp_bonus: int
    created_at: datetime | None = None
    goal: PartyGoalGoal


class PartyGoalListResponse(BaseModel):
    party_goals: list[PartyGoalEntry]


class MarkPartyGoalRequest(BaseModel):
    goal_id: uuid.UUID
    party_xp_bonus: int | None = Field(None, gt=0)


class PartyGoalRow(BaseModel):
    id: uuid.UUID
    goal_id: uuid.UUID
    is_party_goal: bool
    party_xp_bonus: int
    created_at: datetime | None = None


class PartyGoalResponse(BaseModel):
    party_goal: PartyGoalRow
