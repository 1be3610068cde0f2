"""
FastAPI application for the reminder engine.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from src.api.middleware.error_handler import setup_exception_handlers
from src.api.routes import (
    health_router,
    recurring_reminders_router,
    reminder_settings_router,
    reminders_router,
)
from src.config import Settings, configure_logging, get_logger, get_settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Migrate and open the pool before serving; release both on shutdown."""
    from src.application.services import reset_services
    from src.infrastructure.storage.sqlite import close_pool, get_pool
    from src.infrastructure.storage.sqlite.migrations import run_migrations

    results = await run_migrations()
    failed = [r for r in results if not r.success]
    if failed:
        logger.error("startup_migration_failed", versions=[r.version for r in failed])
        raise RuntimeError(f"Migration {failed[0].version} failed: {failed[0].error}")

    pool = await get_pool()
    logger.info(
        "application_started",
        db_path=str(pool.db_path),
        migrations_applied=len(results),
    )

    try:
        yield
    finally:
        await close_pool()
        reset_services()
        logger.info("application_stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app with middleware, error handlers and every router."""
    settings = settings or get_settings()
    configure_logging()

    app = FastAPI(
        title=settings.app_name,
        description="Recurring order reminders, rate-limited dispatch and manager overview",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    # Added last runs first: request ids are bound before errors are logged
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(LoggingMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
            allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
            expose_headers=["X-Request-ID", "Retry-After"],
        )

    setup_exception_handlers(app)

    for router in (
        health_router,
        reminders_router,
        recurring_reminders_router,
        reminder_settings_router,
    ):
        app.include_router(router)

    @app.get("/health", include_in_schema=False)
    async def liveness() -> dict[str, str]:
        """Container liveness probe; never touches the database."""
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()
