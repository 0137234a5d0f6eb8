from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from app.api.dependencies import get_orchestrator
from app.config import get_dashboard_settings, load_env_files
from app.schemas.dashboard import HealthResponse
from app.services.dashboard_orchestrator import DashboardOrchestrator, get_dashboard_orchestrator


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    load_env_files()
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Run the first load cycle on boot when enabled."""
    log = logging.getLogger(__name__)
    if get_dashboard_settings().load_on_startup:
        result = await get_dashboard_orchestrator().load_all()
        log.info(
            "Initial load cycle finished files=%d failed=%d",
            len(result.datasets),
            len(result.errors),
        )
    else:
        log.info("Initial load cycle skipped (DASHBOARD_LOAD_ON_STARTUP is off)")
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _configure_logging()

    application = FastAPI(
        title="Marketing Insight Dashboard API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import dashboard_router

    application.include_router(dashboard_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck(
        orchestrator: DashboardOrchestrator = Depends(get_orchestrator),
    ) -> HealthResponse:
        return HealthResponse(
            status="ok",
            datasets_loaded=orchestrator.store.is_loaded,
            load_errors=len(orchestrator.store.errors),
        )

    return application


app = create_app()
