"""Discord channel messaging via the bot HTTP API."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

logger = structlog.get_logger()

MESSAGE_LIMIT = 2000
SYSTEM_COLOR = 0xDC2626


class NotifierError(Exception):
    """Raised when Discord rejects a message."""


def split_message(content: str, max_length: int = MESSAGE_LIMIT) -> list[str]:
    """Split content into chunks no longer than ``max_length``.

    Prefers breaking at the last newline in the second half of the window,
    otherwise cuts hard at the limit. Leading whitespace of each following
    chunk is dropped.
    """
    if len(content) <= max_length:
        return [content]

    chunks: list[str] = []
    remaining = content
    while remaining:
        if len(remaining) <= max_length:
            chunks.append(remaining)
            break
        split_at = remaining.rfind("\n", 0, max_length + 1)
        if split_at == -1 or split_at < max_length / 2:
            split_at = max_length
        chunks.append(remaining[:split_at])
        remaining = remaining[split_at:].lstrip()
    return chunks


class DiscordNotifier:
    """Posts messages and embeds to Discord channels as the bot user."""

    def __init__(
        self,
        bot_token: str,
        api_base: str = "https://discord.com/api/v10",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.bot_token = bot_token
        self.api_base = api_base.rstrip("/")
        self._transport = transport

    async def _post(self, channel_id: str, payload: dict[str, Any]) -> None:
        async with httpx.AsyncClient(transport=self._transport, timeout=10.0) as client:
            response = await client.post(
                f"{self.api_base}/channels/{channel_id}/messages",
                headers={"Authorization": f"Bot {self.bot_token}"},
                json=payload,
            )
        if response.is_error:
            logger.error(
                "discord_send_failed",
                channel_id=channel_id,
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise NotifierError(f"Discord returned {response.status_code}")
        logger.info("discord_message_sent", channel_id=channel_id)

    async def send_message(self, channel_id: str, content: str) -> None:
        for chunk in split_message(content):
            await self._post(channel_id, {"content": chunk})

    async def send_embed(self, channel_id: str, embed: dict[str, Any]) -> None:
        await self._post(channel_id, {"embeds": [embed]})
