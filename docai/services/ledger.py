# =============================================================================
# Usage Ledger — Billing Debits for Provider-Served Executions
# =============================================================================
#
# DocumentAIService calls ledger.record() exactly once per successful,
# non-cached execute(). Cache hits and terminal failures are never debited.
# A ledger failure is logged by the service and does not fail the request.
#
# Implementations:
#   - SqlAlchemyUsageLedger   — async session factory (FastAPI process)
#   - SyncSessionUsageLedger  — sync session context (Celery workers)
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Session

from docai.db.models import DocumentAIUsage
from docai.models.requests import ExecutionRequest
from docai.models.responses import ExecutionResponse

logger = logging.getLogger(__name__)


class UsageLedger(Protocol):
    async def record(
        self, request: ExecutionRequest, response: ExecutionResponse,
    ) -> None:
        ...


def build_usage_row(
    request: ExecutionRequest, response: ExecutionResponse,
) -> DocumentAIUsage:
    return DocumentAIUsage(
        user_id=request.user_id,
        document_id=request.document_id,
        operation=request.operation,
        tier=response.tier.value,
        provider=response.provider,
        model=response.model,
        input_tokens=response.tokens_used.input,
        output_tokens=response.tokens_used.output,
        total_tokens=response.tokens_used.total,
        cost_usd=response.cost,
        retry_count=response.retry_count,
        part_number=request.part_number,
        processing_time_ms=response.processing_time_ms,
        cache_key=response.cache_key,
    )


class SqlAlchemyUsageLedger:
    """Writes one document_ai_usage row per debit, in its own transaction."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def record(
        self, request: ExecutionRequest, response: ExecutionResponse,
    ) -> None:
        async with self._session_factory() as session:
            session.add(build_usage_row(request, response))
            await session.commit()
        logger.debug(
            "Recorded usage for %s: %d tokens, $%.6f",
            request.operation, response.tokens_used.total, response.cost,
        )


class SyncSessionUsageLedger:
    """
    Ledger for Celery workers. The worker owns its event loop, so the
    blocking write only holds up the task being processed.
    """

    def __init__(
        self, session_context: Callable[[], AbstractContextManager[Session]],
    ) -> None:
        self._session_context = session_context

    async def record(
        self, request: ExecutionRequest, response: ExecutionResponse,
    ) -> None:
        with self._session_context() as session:
            session.add(build_usage_row(request, response))
