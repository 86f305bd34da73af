"""
Shared-secret guards for machine callers (cron scheduler, pipeline worker).

The comparison is a pure function of the expected secret and the presented
``Authorization`` header; the FastAPI guards feed it from the settings
injected at startup.
"""

from __future__ import annotations

import hmac

import structlog
from fastapi import Depends, Header, HTTPException, Request

from desperado.config import Settings
from desperado.dependencies import get_app_settings

logger = structlog.get_logger()

_BEARER_PREFIX = "Bearer "


def verify_bearer_secret(expected: str | None, authorization: str | None) -> bool:
    """Return True only if a secret is configured and the header is exactly ``Bearer <secret>``."""
    if not expected or not authorization:
        return False
    if not authorization.startswith(_BEARER_PREFIX):
        return False
    presented = authorization[len(_BEARER_PREFIX):]
    return hmac.compare_digest(presented.encode(), expected.encode())


def _reject(request: Request, guard: str, expected: str | None) -> HTTPException:
    reason = "secret_not_configured" if not expected else "credential_mismatch"
    logger.warning("shared_secret_rejected", guard=guard, reason=reason, path=request.url.path)
    return HTTPException(status_code=401, detail="Unauthorized")


async def require_pipeline_secret(
    request: Request,
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Gate pipeline-worker endpoints on PIPELINE_SECRET."""
    if not verify_bearer_secret(settings.pipeline_secret, authorization):
        raise _reject(request, "pipeline", settings.pipeline_secret)


async def require_cron_secret(
    request: Request,
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Gate scheduled-job endpoints on CRON_SECRET."""
    if not verify_bearer_secret(settings.cron_secret, authorization):
        raise _reject(request, "cron", settings.cron_secret)
