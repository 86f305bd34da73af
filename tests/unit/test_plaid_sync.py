"""Plaid client and transaction sync tests."""

from __future__ import annotations

import json
import uuid
from datetime import date
from decimal import Decimal

import httpx
import pytest
from fakes import FakeConfigStore, FakeFinanceStore, FakePlaidClient

from desperado.finance.plaid_client import PlaidClient, PlaidError
from desperado.finance.sync import sync_transactions


def _plaid_tx(tx_id: str, amount: float, **fields) -> dict:
    tx = {
        "transaction_id": tx_id,
        "account_id": "acc-1",
        "amount": amount,
        "name": "COFFEE SHOP",
        "merchant_name": None,
        "date": "2026-03-01",
        "pending": False,
    }
    tx.update(fields)
    return tx


class TestPlaidClient:
    @pytest.mark.asyncio
    async def test_transactions_sync_sends_credentials_and_cursor(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"added": [], "has_more": False, "next_cursor": "c2"})

        client = PlaidClient("cid", "sec", env="sandbox", transport=httpx.MockTransport(handler))
        page = await client.transactions_sync("access-1", cursor="c1")

        assert page["next_cursor"] == "c2"
        assert str(seen[0].url) == "https://sandbox.plaid.com/transactions/sync"
        assert json.loads(seen[0].content) == {
            "client_id": "cid",
            "secret": "sec",
            "access_token": "access-1",
            "cursor": "c1",
        }

    @pytest.mark.asyncio
    async def test_first_sync_omits_cursor(self):
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"has_more": False})

        client = PlaidClient("cid", "sec", transport=httpx.MockTransport(handler))
        await client.transactions_sync("access-1")
        assert "cursor" not in bodies[0]

    @pytest.mark.asyncio
    async def test_error_payload_raises(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(
                400, json={"error_code": "ITEM_LOGIN_REQUIRED", "error_message": "login required"}
            )
        )
        client = PlaidClient("cid", "sec", transport=transport)
        with pytest.raises(PlaidError) as exc_info:
            await client.transactions_sync("access-1")
        assert exc_info.value.error_code == "ITEM_LOGIN_REQUIRED"

    def test_unknown_environment_rejected(self):
        with pytest.raises(ValueError):
            PlaidClient("cid", "sec", env="staging")


class TestSyncTransactions:
    @pytest.mark.asyncio
    async def test_pages_until_done_and_applies_changes(self):
        finance = FakeFinanceStore()
        item = finance.add_item(cursor="start")
        account_id = uuid.uuid4()
        finance.accounts[item["id"]] = {"acc-1": account_id}
        coffee = uuid.uuid4()
        finance.rules.append({"merchant_pattern": "COFFEE%", "category_id": coffee})
        finance.transactions["old"] = {"plaid_transaction_id": "old", "amount": Decimal("1")}
        finance.transactions["mod"] = {"plaid_transaction_id": "mod", "amount": Decimal("1"), "pending": True}

        plaid = FakePlaidClient(
            pages=[
                {
                    "added": [_plaid_tx("t1", 4.5)],
                    "modified": [],
                    "removed": [{"transaction_id": "old"}],
                    "next_cursor": "p1",
                    "has_more": True,
                },
                {
                    "added": [_plaid_tx("t2", -20, name="PAYROLL", account_id="unknown")],
                    "modified": [_plaid_tx("mod", 7.25, pending=False)],
                    "removed": [],
                    "next_cursor": "p2",
                    "has_more": False,
                },
            ]
        )

        counts = await sync_transactions(plaid, finance, FakeConfigStore(), item["user_id"], "access", item["id"])

        assert counts == {"added": 2, "modified": 1, "removed": 1}
        assert plaid.calls == [("access", "start"), ("access", "p1")]
        t1 = finance.transactions["t1"]
        assert t1["amount"] == Decimal("4.5")
        assert t1["plaid_account_id"] == account_id
        assert t1["category_id"] == coffee
        assert t1["reviewed"] is True
        assert t1["transaction_date"] == date(2026, 3, 1)
        t2 = finance.transactions["t2"]
        assert t2["amount"] == Decimal("20")
        assert t2["plaid_account_id"] is None
        assert t2["category_id"] is None
        assert t2["reviewed"] is False
        assert finance.transactions["mod"]["amount"] == Decimal("7.25")
        assert finance.transactions["mod"]["pending"] is False
        assert "old" not in finance.transactions
        assert finance.items[item["plaid_item_id"]]["cursor"] == "p2"
        assert finance.commits == 1
