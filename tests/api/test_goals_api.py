"""Goal and habit listing API tests."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone

import pytest
from conftest import auth_headers
from fakes import storage_failure
from httpx import AsyncClient


@pytest.fixture
def owner(platform_store):
    return platform_store.add_user("Pat")


@pytest.mark.asyncio
async def test_goals_are_enriched_and_ordered(client: AsyncClient, platform_store, config_store, owner):
    fitness = config_store.add_row("goal_categories", slug="fitness", name="Fitness")
    platform_store.add_goal(owner, title="Later", target_date=date(2026, 12, 1), category_id=fitness)
    platform_store.add_goal(owner, title="Sooner", target_date=date(2026, 6, 1), category_id=uuid.uuid4())
    platform_store.add_goal(owner, title="Someday")
    platform_store.add_goal(owner, title="Done", status="completed")
    platform_store.add_goal(uuid.uuid4(), title="Not mine")

    response = await client.get("/api/goals", headers=auth_headers(owner))

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    assert [g["title"] for g in body["goals"]] == ["Sooner", "Later", "Someday"]
    sooner, later, someday = body["goals"]
    assert later["category"]["slug"] == "fitness"
    assert later["category_id"] == str(fitness)
    assert sooner["category"] is None
    assert someday["category"] is None
    assert someday["owner"]["full_name"] == "Pat"


@pytest.mark.asyncio
async def test_goal_status_and_category_filters(client: AsyncClient, platform_store, config_store, owner):
    home = config_store.add_row("goal_categories", slug="home")
    platform_store.add_goal(owner, title="Fix roof", status="completed", category_id=home)
    platform_store.add_goal(owner, title="Paint", status="paused", category_id=home)
    platform_store.add_goal(owner, title="Run", status="completed")

    response = await client.get(
        "/api/goals", params={"status": "completed,paused", "category": "home"}, headers=auth_headers(owner)
    )

    assert sorted(g["title"] for g in response.json()["goals"]) == ["Fix roof", "Paint"]


@pytest.mark.asyncio
async def test_habits_exclude_archived_by_default(client: AsyncClient, platform_store, config_store, owner):
    daily = config_store.add_row("habit_frequencies", slug="daily", target_type="daily")
    now = datetime.now(timezone.utc)
    platform_store.add_habit(owner, name="Read", frequency_id=daily, created_at=now)
    platform_store.add_habit(owner, name="Old", archived=True, created_at=now - timedelta(days=1))

    default = await client.get("/api/habits", headers=auth_headers(owner))
    everything = await client.get("/api/habits", params={"include_archived": "true"}, headers=auth_headers(owner))

    assert [h["name"] for h in default.json()["habits"]] == ["Read"]
    assert default.json()["habits"][0]["frequency"]["target_type"] == "daily"
    assert default.json()["habits"][0]["time_preference"] is None
    assert everything.json()["total"] == 2


@pytest.mark.asyncio
async def test_lookup_storage_error_fails_request(client: AsyncClient, platform_store, config_store, owner):
    platform_store.add_goal(owner)
    config_store.fail_with = storage_failure("could not connect to server")

    response = await client.get("/api/goals", headers=auth_headers(owner))

    assert response.status_code == 500
    assert response.json() == {"error": "could not connect to server"}
