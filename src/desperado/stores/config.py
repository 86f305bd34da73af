"""Repository for the ``config`` schema (admin-curated reference tables)."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from desperado.db.models import (
    ExpenseCategory,
    GoalCategory,
    GoalTimeframe,
    HabitFrequency,
    HabitTimePreference,
)


class ConfigStore:
    """Read-only access to reference tables.

    Every read opens its own short-lived session, so several reads can be
    awaited concurrently (an ``AsyncSession`` allows one statement at a time).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def _active_rows(self, model: Any) -> list[dict[str, Any]]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(model.__table__).where(model.active.is_(True)).order_by(model.sort_order.asc())
            )
            return [dict(row) for row in result.mappings()]

    async def list_goal_categories(self) -> list[dict[str, Any]]:
        return await self._active_rows(GoalCategory)

    async def list_goal_timeframes(self) -> list[dict[str, Any]]:
        return await self._active_rows(GoalTimeframe)

    async def list_habit_frequencies(self) -> list[dict[str, Any]]:
        return await self._active_rows(HabitFrequency)

    async def list_habit_time_preferences(self) -> list[dict[str, Any]]:
        return await self._active_rows(HabitTimePreference)

    async def list_expense_categories(self) -> list[dict[str, Any]]:
        return await self._active_rows(ExpenseCategory)

    async def daily_frequency_ids(self) -> list[uuid.UUID]:
        """Ids of active frequencies whose target type is ``daily``."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(HabitFrequency.id).where(
                    HabitFrequency.target_type == "daily",
                    HabitFrequency.active.is_(True),
                )
            )
            return list(result.scalars())
