"""Minimal async client for the Plaid API."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

logger = structlog.get_logger()

PLAID_HOSTS = {
    "sandbox": "https://sandbox.plaid.com",
    "development": "https://development.plaid.com",
    "production": "https://production.plaid.com",
}


class PlaidError(Exception):
    """Raised when Plaid answers with an error payload."""

    def __init__(self, status_code: int, error_code: str | None, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class PlaidClient:
    def __init__(
        self,
        client_id: str,
        secret: str,
        env: str = "sandbox",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if env not in PLAID_HOSTS:
            raise ValueError(f"Unknown Plaid environment: {env}")
        self.client_id = client_id
        self.secret = secret
        self.base_url = PLAID_HOSTS[env]
        self._transport = transport

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        payload = {"client_id": self.client_id, "secret": self.secret, **body}
        async with httpx.AsyncClient(base_url=self.base_url, transport=self._transport, timeout=30.0) as client:
            response = await client.post(path, json=payload)
        data = response.json()
        if response.is_error:
            logger.error(
                "plaid_request_failed",
                path=path,
                status_code=response.status_code,
                error_code=data.get("error_code"),
            )
            raise PlaidError(response.status_code, data.get("error_code"), data.get("error_message", "Plaid error"))
        return data

    async def transactions_sync(self, access_token: str, cursor: str | None = None) -> dict[str, Any]:
        """One page of ``/transactions/sync``: added, modified, removed, next_cursor, has_more."""
        body: dict[str, Any] = {"access_token": access_token}
        if cursor:
            body["cursor"] = cursor
        return await self._post("/transactions/sync", body)
