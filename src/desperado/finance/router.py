"""Plaid webhook receiver."""

from __future__ import annotations

import json

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request

from desperado.dependencies import get_config_store, get_finance_store, get_plaid_client
from desperado.finance.plaid_client import PlaidClient
from desperado.finance.sync import sync_transactions
from desperado.stores.config import ConfigStore
from desperado.stores.finance import FinanceStore

logger = structlog.get_logger()

router = APIRouter(prefix="/api/plaid", tags=["Finance"])

HANDLED_WEBHOOK_TYPES = frozenset({"TRANSACTIONS", "ITEM"})
SYNC_CODES = frozenset(
    {
        "SYNC_UPDATES_AVAILABLE",
        "INITIAL_UPDATE",
        "HISTORICAL_UPDATE",
        "DEFAULT_UPDATE",
        "TRANSACTIONS_REMOVED",
    }
)


def _is_item_error(webhook_type: str, webhook_code: str | None) -> bool:
    return webhook_code == "ITEM_ERROR" or (webhook_type == "ITEM" and webhook_code == "ERROR")


@router.post("/webhook")
async def plaid_webhook(
    request: Request,
    finance: FinanceStore = Depends(get_finance_store),  # noqa: B008
    config: ConfigStore = Depends(get_config_store),  # noqa: B008
    plaid: PlaidClient = Depends(get_plaid_client),  # noqa: B008
) -> dict[str, bool]:
    """Dispatch a Plaid webhook to a transaction sync or an item status change."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise HTTPException(status_code=400, detail="Invalid JSON") from e
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON")

    webhook_type = body.get("webhook_type")
    webhook_code = body.get("webhook_code")
    if webhook_type not in HANDLED_WEBHOOK_TYPES:
        return {"received": True}

    item = await finance.get_item_by_plaid_id(str(body.get("item_id") or ""))
    if item is None:
        raise HTTPException(status_code=404, detail="Unknown item")

    logger.info("plaid_webhook", webhook_type=webhook_type, webhook_code=webhook_code, item_id=str(item["id"]))

    if webhook_code in SYNC_CODES:
        access_token = await finance.get_access_token(item["user_id"])
        if not access_token:
            raise HTTPException(status_code=500, detail="No access token found")
        await sync_transactions(plaid, finance, config, item["user_id"], access_token, item["id"])
    elif _is_item_error(webhook_type, webhook_code):
        await finance.mark_item_error(item["id"])

    return {"received": True}
