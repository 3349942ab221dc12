# =============================================================================
# Celery Task Definitions — Large Document Execution
# =============================================================================
#
# process_document_parts:
#   1. Validate the operation for the user (unknown / paid-only → fail fast)
#   2. Plan: documents above batch_min_chars are split into parts of at
#      most batch_max_chars_per_part characters at paragraph/sentence ends
#   3. Execute each part in order through DocumentAIService, passing
#      part_number / total_parts so the prompt says which part it is
#   4. Return the ordered per-part responses (stitching is the caller's job)
#
# Celery tasks are synchronous; the async service runs inside asyncio.run()
# with a service built for this task. Usage debits go through the sync
# (psycopg2) session when the ledger is enabled.
#
# No Celery-level retry: the service already retries each provider call
# and falls back once. A TerminalExecutionError fails the task.
# =============================================================================

import asyncio
import logging

from docai.config import settings
from docai.db.engine import get_sync_session
from docai.engine.orchestrator import build_default_service, validate_request
from docai.models.requests import ExecutionRequest
from docai.models.responses import ExecutionResponse
from docai.services.ledger import SyncSessionUsageLedger
from docai.services.token_budget import plan_parts, split_into_parts
from docai.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal Helpers
# ---------------------------------------------------------------------------


def _build_part_requests(
    operation: str,
    content: str,
    options: dict | None,
    is_paid_user: bool,
    user_id: str | None,
    document_id: str | None,
) -> list[ExecutionRequest]:
    plan = plan_parts(
        content,
        min_chars_for_batch=settings.batch_min_chars,
        max_chars_per_part=settings.batch_max_chars_per_part,
    )
    parts = (
        split_into_parts(content, plan.total_parts)
        if plan.batch_required else [content]
    )
    total = len(parts)

    logger.info(
        "Planned %s for document %s: %d part(s), ~%d tokens",
        operation, document_id, total, plan.estimated_tokens,
    )

    return [
        ExecutionRequest(
            operation=operation,
            content=part,
            options=options or {},
            is_paid_user=is_paid_user,
            user_id=user_id,
            document_id=document_id,
            part_number=index if total > 1 else None,
            total_parts=total if total > 1 else None,
        )
        for index, part in enumerate(parts, start=1)
    ]


async def _execute_parts(requests: list[ExecutionRequest]) -> list[ExecutionResponse]:
    ledger = SyncSessionUsageLedger(get_sync_session) if settings.ledger_enabled else None
    service = build_default_service(settings, ledger=ledger)
    try:
        responses = []
        for request in requests:
            responses.append(await service.execute(request))
        return responses
    finally:
        await service.shutdown()


# ---------------------------------------------------------------------------
# Batch Task
# ---------------------------------------------------------------------------


@celery_app.task(bind=True, name="process_document_parts")
def process_document_parts(
    self,
    operation: str,
    content: str,
    options: dict | None = None,
    is_paid_user: bool = False,
    user_id: str | None = None,
    document_id: str | None = None,
) -> dict:
    """
    Execute ``operation`` over a possibly large document, part by part.

    Returns:
        dict with the part count and the ordered per-part responses
        (JSON-serialisable for the Celery result backend).
    """
    task_id = self.request.id
    requests = _build_part_requests(
        operation, content, options, is_paid_user, user_id, document_id,
    )
    if not requests:
        raise ValueError("Document has no content to process")
    validate_request(requests[0])

    logger.info("[%s] Executing %s over %d part(s)", task_id, operation, len(requests))
    responses = asyncio.run(_execute_parts(requests))

    total_cost = round(sum(r.cost for r in responses), 6)
    logger.info(
        "[%s] Completed %s: %d part(s), $%.6f", task_id, operation,
        len(responses), total_cost,
    )

    return {
        "operation": operation,
        "document_id": document_id,
        "total_parts": len(responses),
        "total_cost": total_cost,
        "parts": [r.model_dump(mode="json") for r in responses],
    }
