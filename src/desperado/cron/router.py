"""Scheduled-job endpoints, called by the platform scheduler with CRON_SECRET."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from desperado.auth.shared_secret import require_cron_secret
from desperado.config import Settings
from desperado.cron.streak_check import ChannelNotConfiguredError, run_streak_check
from desperado.dependencies import get_app_settings, get_config_store, get_notifier, get_platform_store
from desperado.notify.discord import DiscordNotifier
from desperado.stores.config import ConfigStore
from desperado.stores.platform import PlatformStore

router = APIRouter(prefix="/api/cron", tags=["Cron"], dependencies=[Depends(require_cron_secret)])


@router.get("/streak-check")
async def streak_check(
    platform: PlatformStore = Depends(get_platform_store),  # noqa: B008
    config: ConfigStore = Depends(get_config_store),  # noqa: B008
    notifier: DiscordNotifier = Depends(get_notifier),  # noqa: B008
    settings: Settings = Depends(get_app_settings),  # noqa: B008
) -> dict[str, Any]:
    """Post a streaks-at-risk alert for daily habits that missed yesterday."""
    try:
        return await run_streak_check(platform, config, notifier, settings.pipeline_channel_id)
    except ChannelNotConfiguredError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
