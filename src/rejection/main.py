"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from rejection.challenges.router import router as challenges_router
from rejection.config import get_settings
from rejection.database import close_db, init_db
from rejection.gamification.router import router as gamification_router
from rejection.health.router import router as health_router
from rejection.middleware import setup_middleware
from rejection.submissions.router import router as submissions_router


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings)

    yield

    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Rejection Therapy API",
        description="Backend API for the rejection therapy community: weekly challenges, XP and ranks",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(gamification_router)
    app.include_router(submissions_router)
    app.include_router(challenges_router)

    return app


app = create_app()
