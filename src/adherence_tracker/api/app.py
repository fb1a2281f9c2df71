"""FastAPI application factory."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from adherence_tracker.api.days import router as days_router
from adherence_tracker.app_logging import configure_logging
from adherence_tracker.containers import AppContainer
from adherence_tracker.domain.errors import DayFinalizedError, TaskNotFoundError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        detector = state_container.day_boundary_detector
        app_day = detector.initialize()
        state_container.day_service.attach(detector)
        try:
            state_container.day_service.finalize_before(app_day)
        except Exception:
            logger.exception("Failed to finalize past days on startup")
        watcher = asyncio.create_task(
            detector.watch(state_container.settings.day_check_interval_seconds)
        )
        yield
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher
        detector.teardown()
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(days_router)

    @app.exception_handler(DayFinalizedError)
    async def day_finalized(_request: Request, exc: DayFinalizedError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.exception_handler(TaskNotFoundError)
    async def task_not_found(_request: Request, exc: TaskNotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
