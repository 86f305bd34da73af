"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from desperado.config import Settings, get_settings
from desperado.cron.router import router as cron_router
from desperado.database import close_db, init_db
from desperado.feedback.router import router as feedback_router
from desperado.finance.router import router as finance_router
from desperado.gamification.router import router as gamification_router
from desperado.goals.router import router as goals_router
from desperado.health.router import router as health_router
from desperado.household.router import router as household_router
from desperado.middleware import setup_middleware
from desperado.pipeline.router import router as pipeline_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    await init_db(app.state.settings.database_url)
    yield
    await close_db()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Desperado Club API",
        description="Household habits, goals, feedback pipeline and finance",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(household_router)
    app.include_router(goals_router)
    app.include_router(feedback_router)
    app.include_router(pipeline_router)
    app.include_router(gamification_router)
    app.include_router(cron_router)
    app.include_router(finance_router)

    return app


app = create_app()
