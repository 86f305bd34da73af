"""Shared test fixtures."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import jwt
import pytest
import pytest_asyncio
from fakes import FakeConfigStore, FakeFinanceStore, FakeNotifier, FakePlaidClient, FakePlatformStore
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from desperado.config import Settings
from desperado.dependencies import (
    get_config_store,
    get_finance_store,
    get_notifier,
    get_plaid_client,
    get_platform_store,
)
from desperado.main import create_app

JWT_SECRET = "test-jwt-secret-with-enough-length-for-hs256"
CRON_SECRET = "cron-test-secret"
PIPELINE_SECRET = "pipeline-test-secret"
CHANNEL_ID = "1234567890"


def make_token(user_id: uuid.UUID, secret: str = JWT_SECRET, expires_in: int = 3600, **claims) -> str:
    """Mint a session token the way Supabase Auth does (HS256, audience ``authenticated``)."""
    payload = {
        "sub": str(user_id),
        "aud": "authenticated",
        "role": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        **claims,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(user_id: uuid.UUID) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_jwt_secret=JWT_SECRET,
        cron_secret=CRON_SECRET,
        pipeline_secret=PIPELINE_SECRET,
        pipeline_channel_id=CHANNEL_ID,
        log_format="console",
        environment="test",
    )


@pytest.fixture
def platform_store() -> FakePlatformStore:
    return FakePlatformStore()


@pytest.fixture
def config_store() -> FakeConfigStore:
    return FakeConfigStore()


@pytest.fixture
def finance_store() -> FakeFinanceStore:
    return FakeFinanceStore()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def plaid_client() -> FakePlaidClient:
    return FakePlaidClient()


@pytest.fixture
def app(settings, platform_store, config_store, finance_store, notifier, plaid_client) -> FastAPI:
    app = create_app(settings)
    app.dependency_overrides[get_platform_store] = lambda: platform_store
    app.dependency_overrides[get_config_store] = lambda: config_store
    app.dependency_overrides[get_finance_store] = lambda: finance_store
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_plaid_client] = lambda: plaid_client
    return app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app; unhandled errors come back as 500 responses."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
