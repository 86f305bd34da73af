"""Shared FastAPI dependencies."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from desperado.config import Settings
from desperado.database import get_session as _get_session
from desperado.database import get_session_factory
from desperado.finance.plaid_client import PlaidClient
from desperado.notify.discord import DiscordNotifier
from desperado.stores.config import ConfigStore
from desperado.stores.finance import FinanceStore
from desperado.stores.platform import PlatformStore

get_db = _get_session


def get_app_settings(request: Request) -> Settings:
    """Return the settings the application was built with."""
    return request.app.state.settings


def get_platform_store(db: AsyncSession = Depends(get_db)) -> PlatformStore:  # noqa: B008
    return PlatformStore(db)


def get_config_store() -> ConfigStore:
    return ConfigStore(get_session_factory())


def get_finance_store(db: AsyncSession = Depends(get_db)) -> FinanceStore:  # noqa: B008
    return FinanceStore(db)


def get_notifier(settings: Settings = Depends(get_app_settings)) -> DiscordNotifier:  # noqa: B008
    return DiscordNotifier(settings.discord_bot_token, api_base=settings.discord_api_base)


def get_plaid_client(settings: Settings = Depends(get_app_settings)) -> PlaidClient:  # noqa: B008
    return PlaidClient(settings.plaid_client_id, settings.plaid_secret, env=settings.plaid_env)
