"""CORS for the web client.

Only browser traffic needs it; the pipeline worker, the cron scheduler and
Plaid call server to server.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from desperado.config import Settings


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the web client origins to call the API with the session bearer token."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
        expose_headers=["X-Request-Id"],
    )
