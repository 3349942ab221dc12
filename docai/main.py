# =============================================================================
# FastAPI Application — Entry Point
# =============================================================================
#
# Startup:
#   1. Configure logging from settings
#   2. Build the DocumentAIService (providers, cache backend, ledger)
#   3. Start the hourly cache sweeper
# Shutdown:
#   1. Stop the sweeper, close the cache backend
#   2. Dispose the database pool (ledger enabled only)
#
# Run with:  uvicorn docai.main:app --reload
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from docai.api.document_ai import router as document_ai_router
from docai.config import Settings, get_settings
from docai.engine.orchestrator import DocumentAIService, build_default_service
from docai.models.responses import HealthResponse

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


def create_app(
    settings: Settings | None = None,
    service: DocumentAIService | None = None,
) -> FastAPI:
    """
    Application factory.

    Pass ``service`` to run the app around a pre-built service (tests);
    otherwise one is built from settings when the lifespan starts.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        configure_logging(settings.log_level)
        document_ai = service or build_default_service(settings)
        app.state.document_ai = document_ai
        document_ai.start(settings.cache_sweep_interval_seconds)
        logger.info(
            "%s %s ready (cache=%s, ledger=%s)",
            settings.app_name, settings.app_version,
            settings.cache_backend, settings.ledger_enabled,
        )

        yield

        await document_ai.shutdown()
        if settings.ledger_enabled:
            from docai.db.engine import dispose_async_engine

            await dispose_async_engine()
        logger.info("%s shut down", settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Tiered LLM execution engine for document operations: routing, "
            "token budgets, caching, retries with fallback, structured output."
        ),
        lifespan=lifespan,
    )
    app.include_router(document_ai_router)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health() -> HealthResponse:
        """Liveness probe; does not touch providers."""
        return HealthResponse(version=settings.app_version, service=settings.app_name)

    return app


app = create_app()
