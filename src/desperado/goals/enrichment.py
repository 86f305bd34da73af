"""Cross-schema enrichment for goals and habits.

Reference tables live in the ``config`` schema and users in ``platform``;
records carry only foreign-key ids. The loader fetches every lookup table
concurrently into id-keyed dicts, and the enrichers attach the resolved rows
in memory.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from typing import Any

from desperado.stores.config import ConfigStore
from desperado.stores.platform import PlatformStore

Row = dict[str, Any]


@dataclass(frozen=True)
class GoalHabitLookups:
    categories: dict[uuid.UUID, Row] = field(default_factory=dict)
    timeframes: dict[uuid.UUID, Row] = field(default_factory=dict)
    frequencies: dict[uuid.UUID, Row] = field(default_factory=dict)
    time_preferences: dict[uuid.UUID, Row] = field(default_factory=dict)
    users: dict[uuid.UUID, Row] = field(default_factory=dict)


def _index(rows: list[Row]) -> dict[uuid.UUID, Row]:
    return {row["id"]: row for row in rows}


async def load_goal_habit_lookups(config: ConfigStore, platform: PlatformStore) -> GoalHabitLookups:
    """
    Fetch all lookup tables concurrently.

    An empty table yields an empty mapping. A storage error from any read
    propagates and no partial lookups are returned.
    """
    categories, timeframes, frequencies, time_preferences, users = await asyncio.gather(
        config.list_goal_categories(),
        config.list_goal_timeframes(),
        config.list_habit_frequencies(),
        config.list_habit_time_preferences(),
        platform.list_directory_users(),
    )
    return GoalHabitLookups(
        categories=_index(categories),
        timeframes=_index(timeframes),
        frequencies=_index(frequencies),
        time_preferences=_index(time_preferences),
        users=_index(users),
    )


def _resolve(mapping: dict[uuid.UUID, Row], key: Any) -> Row | None:
    if key is None:
        return None
    return mapping.get(key)


def enrich_goal(goal: Row, lookups: GoalHabitLookups) -> Row:
    return {
        **goal,
        "category": _resolve(lookups.categories, goal.get("category_id")),
        "timeframe": _resolve(lookups.timeframes, goal.get("timeframe_id")),
        "owner": _resolve(lookups.users, goal.get("owner_id")),
    }


def enrich_goals(goals: list[Row], lookups: GoalHabitLookups) -> list[Row]:
    return [enrich_goal(g, lookups) for g in goals]


def enrich_habit(habit: Row, lookups: GoalHabitLookups) -> Row:
    return {
        **habit,
        "category": _resolve(lookups.categories, habit.get("category_id")),
        "frequency": _resolve(lookups.frequencies, habit.get("frequency_id")),
        "time_preference": _resolve(lookups.time_preferences, habit.get("time_preference_id")),
        "owner": _resolve(lookups.users, habit.get("owner_id")),
    }


def enrich_habits(habits: list[Row], lookups: GoalHabitLookups) -> list[Row]:
    return [enrich_habit(h, lookups) for h in habits]
