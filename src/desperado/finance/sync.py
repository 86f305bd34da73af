"""Incremental Plaid transaction sync and category classification."""

from __future__ import annotations

import logging
import re
import uuid
from datetime import date
from decimal import Decimal
from typing import Any

from desperado.finance.plaid_client import PlaidClient
from desperado.stores.config import ConfigStore
from desperado.stores.finance import FinanceStore

logger = logging.getLogger(__name__)


def _merchant_name(tx: dict[str, Any]) -> str:
    return tx.get("merchant_name") or tx.get("name") or ""


def _rule_matches(pattern: str, merchant: str) -> bool:
    """SQL-LIKE style match where ``%`` is the only wildcard."""
    regex = ".*".join(re.escape(part) for part in pattern.split("%"))
    return re.fullmatch(regex, merchant, flags=re.IGNORECASE) is not None


def classify_transaction(
    tx: dict[str, Any],
    rules: list[dict[str, Any]],
    categories: list[dict[str, Any]],
) -> uuid.UUID | None:
    """Pick an expense category for a Plaid transaction.

    Merchant rules are tried first, in the order given. If none match, the
    Plaid primary personal-finance category is looked up in each expense
    category's ``plaid_category_mapping.plaid_categories`` list.
    """
    merchant = _merchant_name(tx).upper()
    for rule in rules:
        if _rule_matches(rule["merchant_pattern"], merchant):
            return rule["category_id"]

    primary = (tx.get("personal_finance_category") or {}).get("primary")
    if primary:
        for category in categories:
            mapping = category.get("plaid_category_mapping") or {}
            plaid_categories = mapping.get("plaid_categories")
            if isinstance(plaid_categories, list) and primary in plaid_categories:
                return category["id"]
    return None


def _transaction_values(
    tx: dict[str, Any],
    user_id: uuid.UUID,
    account_map: dict[str, uuid.UUID],
    category_id: uuid.UUID | None,
) -> dict[str, Any]:
    # Plaid reports outflows as positive and credits as negative; stored amounts are magnitudes.
    return {
        "user_id": user_id,
        "plaid_transaction_id": tx["transaction_id"],
        "plaid_account_id": account_map.get(tx.get("account_id", "")),
        "amount": abs(Decimal(str(tx["amount"]))),
        "description": tx.get("name"),
        "merchant_name": _merchant_name(tx) or None,
        "merchant_category": (tx.get("personal_finance_category") or {}).get("primary"),
        "transaction_date": date.fromisoformat(tx["date"]),
        "pending": bool(tx.get("pending", False)),
        "source": "plaid",
        "category_id": category_id,
        "reviewed": category_id is not None,
    }


async def sync_transactions(
    client: PlaidClient,
    finance: FinanceStore,
    config: ConfigStore,
    user_id: uuid.UUID,
    access_token: str,
    item_id: uuid.UUID,
) -> dict[str, int]:
    """
    Pull every pending page from ``/transactions/sync`` and apply it.

    Added transactions are upserted by provider id, modified ones updated,
    removed ones deleted; the cursor is saved last, in the same transaction.

    Returns:
        Counts of added, modified and removed transactions.
    """
    cursor = await finance.get_item_cursor(item_id)
    added: list[dict[str, Any]] = []
    modified: list[dict[str, Any]] = []
    removed: list[str] = []

    has_more = True
    while has_more:
        page = await client.transactions_sync(access_token, cursor)
        added.extend(page.get("added", []))
        modified.extend(page.get("modified", []))
        removed.extend(r["transaction_id"] for r in page.get("removed", []))
        cursor = page.get("next_cursor")
        has_more = bool(page.get("has_more"))

    account_map = await finance.account_id_map(item_id)
    rules = await finance.list_merchant_rules()
    categories = await config.list_expense_categories()

    for tx in added:
        category_id = classify_transaction(tx, rules, categories)
        await finance.upsert_transaction(_transaction_values(tx, user_id, account_map, category_id))

    for tx in modified:
        await finance.update_transaction(
            tx["transaction_id"],
            {
                "amount": abs(Decimal(str(tx["amount"]))),
                "description": tx.get("name"),
                "merchant_name": _merchant_name(tx) or None,
                "pending": bool(tx.get("pending", False)),
                "transaction_date": date.fromisoformat(tx["date"]),
            },
        )

    await finance.delete_transactions(removed)
    await finance.save_cursor(item_id, cursor)
    await finance.commit()

    logger.info(
        "Plaid sync for item %s: %d added, %d modified, %d removed",
        item_id,
        len(added),
        len(modified),
        len(removed),
    )
    return {"added": len(added), "modified": len(modified), "removed": len(removed)}
