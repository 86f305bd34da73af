"""Repository for the ``finance`` schema and the Plaid access-token lookup."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select, text, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from desperado.db.models import MerchantRule, PlaidAccount, PlaidItem, Transaction, UserIntegration

# Access tokens are stored in Supabase Vault; the integration row holds only the secret id.
_VAULT_SECRET_SQL = text("SELECT decrypted_secret FROM vault.decrypted_secrets WHERE id = :secret_id")


class FinanceStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def commit(self) -> None:
        await self.session.commit()

    async def get_item_by_plaid_id(self, plaid_item_id: str) -> dict[str, Any] | None:
        result = await self.session.execute(
            select(PlaidItem.id, PlaidItem.user_id, PlaidItem.plaid_item_id, PlaidItem.cursor, PlaidItem.status).where(
                PlaidItem.plaid_item_id == plaid_item_id
            )
        )
        row = result.mappings().first()
        return dict(row) if row else None

    async def get_item_cursor(self, item_id: uuid.UUID) -> str | None:
        result = await self.session.execute(select(PlaidItem.cursor).where(PlaidItem.id == item_id))
        return result.scalar_one_or_none()

    async def get_access_token(self, user_id: uuid.UUID) -> str | None:
        """Resolve the user's Plaid access token from the vault, or None if there is none."""
        result = await self.session.execute(
            select(UserIntegration.access_token_vault_id).where(
                UserIntegration.user_id == user_id, UserIntegration.service == "plaid"
            )
        )
        vault_id = result.scalar_one_or_none()
        if vault_id is None:
            return None
        secret = await self.session.execute(_VAULT_SECRET_SQL, {"secret_id": vault_id})
        return secret.scalar_one_or_none()

    async def mark_item_error(self, item_id: uuid.UUID) -> None:
        await self.session.execute(
            update(PlaidItem)
            .where(PlaidItem.id == item_id)
            .values(status="error", updated_at=datetime.now(timezone.utc))
        )
        await self.session.commit()

    async def account_id_map(self, item_id: uuid.UUID) -> dict[str, uuid.UUID]:
        """Map Plaid account ids to local account ids for one item."""
        result = await self.session.execute(
            select(PlaidAccount.plaid_account_id, PlaidAccount.id).where(PlaidAccount.plaid_item_id == item_id)
        )
        return {row.plaid_account_id: row.id for row in result}

    async def list_merchant_rules(self) -> list[dict[str, Any]]:
        result = await self.session.execute(
            select(MerchantRule.merchant_pattern, MerchantRule.category_id).order_by(MerchantRule.match_count.desc())
        )
        return [dict(row) for row in result.mappings()]

    async def upsert_transaction(self, values: dict[str, Any]) -> None:
        """Insert a provider transaction, or overwrite it if the provider id is already stored."""
        stmt = pg_insert(Transaction).values(**values)
        updatable = {k: stmt.excluded[k] for k in values if k != "plaid_transaction_id"}
        updatable["updated_at"] = datetime.now(timezone.utc)
        await self.session.execute(
            stmt.on_conflict_do_update(index_elements=[Transaction.plaid_transaction_id], set_=updatable)
        )

    async def update_transaction(self, plaid_transaction_id: str, values: dict[str, Any]) -> None:
        await self.session.execute(
            update(Transaction)
            .where(Transaction.plaid_transaction_id == plaid_transaction_id)
            .values(**values, updated_at=datetime.now(timezone.utc))
        )

    async def delete_transactions(self, plaid_transaction_ids: list[str]) -> None:
        if not plaid_transaction_ids:
            return
        await self.session.execute(
            delete(Transaction).where(Transaction.plaid_transaction_id.in_(plaid_transaction_ids))
        )

    async def save_cursor(self, item_id: uuid.UUID, cursor: str | None) -> None:
        now = datetime.now(timezone.utc)
        await self.session.execute(
            update(PlaidItem).where(PlaidItem.id == item_id).values(cursor=cursor, last_synced_at=now, updated_at=now)
        )
