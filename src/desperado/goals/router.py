"""Goal and habit listing endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from desperado.auth.dependencies import get_current_user
from desperado.auth.jwt import SessionUser
from desperado.dependencies import get_config_store, get_platform_store
from desperado.goals.enrichment import enrich_goals, enrich_habits, load_goal_habit_lookups
from desperado.stores.config import ConfigStore
from desperado.stores.platform import PlatformStore

router = APIRouter(prefix="/api", tags=["Goals"])


def _filter_by_category(rows: list[dict[str, Any]], slug: str | None) -> list[dict[str, Any]]:
    if not slug:
        return rows
    return [r for r in rows if r["category"] is not None and r["category"].get("slug") == slug]


@router.get("/goals")
async def list_goals(
    status: str | None = Query(None, description="Comma-separated statuses, default active"),
    category: str | None = Query(None, description="Category slug"),
    user: SessionUser = Depends(get_current_user),  # noqa: B008
    platform: PlatformStore = Depends(get_platform_store),  # noqa: B008
    config: ConfigStore = Depends(get_config_store),  # noqa: B008
) -> dict[str, Any]:
    """List the caller's top-level goals, soonest target date first."""
    statuses = [s.strip() for s in status.split(",") if s.strip()] if status else ["active"]
    goals = await platform.list_goals(user.id, statuses)
    lookups = await load_goal_habit_lookups(config, platform)
    enriched = _filter_by_category(enrich_goals(goals, lookups), category)
    return {"goals": enriched, "total": len(enriched)}


@router.get("/habits")
async def list_habits(
    category: str | None = Query(None, description="Category slug"),
    include_archived: bool = Query(False),
    user: SessionUser = Depends(get_current_user),  # noqa: B008
    platform: PlatformStore = Depends(get_platform_store),  # noqa: B008
    config: ConfigStore = Depends(get_config_store),  # noqa: B008
) -> dict[str, Any]:
    """List the caller's habits, newest first."""
    habits = await platform.list_habits(user.id, include_archived=include_archived)
    lookups = await load_goal_habit_lookups(config, platform)
    enriched = _filter_by_category(enrich_habits(habits, lookups), category)
    return {"habits": enriched, "total": len(enriched)}
