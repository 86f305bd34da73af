"""Plaid webhook dispatch tests."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

URL = "/api/plaid/webhook"


@pytest.fixture
def item(finance_store):
    item = finance_store.add_item("item-abc", cursor="c0")
    finance_store.access_tokens[item["user_id"]] = "access-sandbox-1"
    return item


@pytest.mark.asyncio
async def test_invalid_json(client: AsyncClient):
    response = await client.post(URL, content=b"{not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON"}


@pytest.mark.asyncio
async def test_ignores_other_webhook_types(client: AsyncClient, plaid_client):
    response = await client.post(URL, json={"webhook_type": "AUTH", "webhook_code": "AUTOMATICALLY_VERIFIED"})
    assert response.json() == {"received": True}
    assert plaid_client.calls == []


@pytest.mark.asyncio
async def test_unknown_item(client: AsyncClient):
    response = await client.post(
        URL, json={"webhook_type": "TRANSACTIONS", "webhook_code": "SYNC_UPDATES_AVAILABLE", "item_id": "nope"}
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Unknown item"}


@pytest.mark.asyncio
@pytest.mark.parametrize("code", ["SYNC_UPDATES_AVAILABLE", "DEFAULT_UPDATE", "TRANSACTIONS_REMOVED"])
async def test_sync_codes_run_sync(client: AsyncClient, finance_store, plaid_client, item, code):
    plaid_client.pages = [{"added": [], "modified": [], "removed": [], "next_cursor": "c1", "has_more": False}]

    payload = {"webhook_type": "TRANSACTIONS", "webhook_code": code, "item_id": "item-abc"}
    response = await client.post(URL, json=payload)

    assert response.json() == {"received": True}
    assert plaid_client.calls == [("access-sandbox-1", "c0")]
    assert finance_store.items["item-abc"]["cursor"] == "c1"


@pytest.mark.asyncio
async def test_sync_without_access_token(client: AsyncClient, finance_store, item):
    finance_store.access_tokens.clear()
    response = await client.post(
        URL, json={"webhook_type": "TRANSACTIONS", "webhook_code": "INITIAL_UPDATE", "item_id": "item-abc"}
    )
    assert response.status_code == 500
    assert response.json() == {"error": "No access token found"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"webhook_type": "TRANSACTIONS", "webhook_code": "ITEM_ERROR"},
        {"webhook_type": "ITEM", "webhook_code": "ERROR"},
    ],
)
async def test_item_error_marks_item(client: AsyncClient, finance_store, plaid_client, item, payload):
    response = await client.post(URL, json={**payload, "item_id": "item-abc"})
    assert response.json() == {"received": True}
    assert finance_store.items["item-abc"]["status"] == "error"
    assert plaid_client.calls == []
