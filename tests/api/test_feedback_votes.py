"""Feedback vote toggle API tests."""

from __future__ import annotations

import uuid

import pytest
from conftest import auth_headers, make_token
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_toggle_is_its_own_inverse(client: AsyncClient, platform_store):
    feedback_id = platform_store.add_feedback()
    user = uuid.uuid4()
    url = f"/api/feedback/{feedback_id}/vote"

    first = await client.post(url, headers=auth_headers(user))
    assert first.status_code == 201
    assert first.json() == {"voted": True}
    assert (feedback_id, user) in platform_store.votes

    second = await client.post(url, headers=auth_headers(user))
    assert second.status_code == 200
    assert second.json() == {"voted": False}
    assert platform_store.votes == set()


@pytest.mark.asyncio
async def test_votes_are_per_user(client: AsyncClient, platform_store):
    feedback_id = platform_store.add_feedback()
    url = f"/api/feedback/{feedback_id}/vote"
    await client.post(url, headers=auth_headers(uuid.uuid4()))
    await client.post(url, headers=auth_headers(uuid.uuid4()))
    assert len(platform_store.votes) == 2


@pytest.mark.asyncio
async def test_invalid_id(client: AsyncClient):
    response = await client.post("/api/feedback/not-a-uuid/vote", headers=auth_headers(uuid.uuid4()))
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid ID"}


@pytest.mark.asyncio
async def test_unknown_feedback(client: AsyncClient):
    response = await client.post(f"/api/feedback/{uuid.uuid4()}/vote", headers=auth_headers(uuid.uuid4()))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_requires_session(client: AsyncClient, platform_store):
    feedback_id = platform_store.add_feedback()
    response = await client.post(f"/api/feedback/{feedback_id}/vote")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_expired_session_rejected(client: AsyncClient, platform_store):
    feedback_id = platform_store.add_feedback()
    token = make_token(uuid.uuid4(), expires_in=-60)
    response = await client.post(f"/api/feedback/{feedback_id}/vote", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
