# =============================================================================
# Document AI API — Execute Operations, Inspect the Engine
# =============================================================================
#
#   POST   /document-ai/execute       run one operation
#   GET    /document-ai/operations    operation catalogue
#   GET    /document-ai/stats         metrics snapshot + cache size
#   POST   /document-ai/stats/reset   explicit metrics reset
#   DELETE /document-ai/cache         drop every cached result
#   GET    /document-ai/health        ping each tier's provider
#
# This layer is thin: validate, call the service, map errors to statuses.
#   unknown operation            → 400
#   paid operation, free user    → 403
#   invalid options              → 422 (pydantic)
#   routed tier + fallback fail  → 502 with retry_count
# =============================================================================

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from docai.api.deps import get_document_ai_service
from docai.engine.errors import OperationValidationError, TerminalExecutionError
from docai.engine.orchestrator import DocumentAIService, validate_request
from docai.models.requests import ExecutionRequest
from docai.models.responses import (
    CacheClearResponse,
    ExecutionResponse,
    OperationInfo,
    OperationsResponse,
    ProviderHealthResponse,
    StatsResponse,
)
from docai.services.operations import OPERATION_REGISTRY, Tier, is_valid_operation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/document-ai", tags=["Document AI"])


# ---------------------------------------------------------------------------
# POST /document-ai/execute
# ---------------------------------------------------------------------------


@router.post(
    "/execute",
    response_model=ExecutionResponse,
    summary="Run a document operation",
)
async def execute_operation(
    request: ExecutionRequest,
    service: DocumentAIService = Depends(get_document_ai_service),
) -> ExecutionResponse:
    """
    Route the operation to a tier, execute it with retries and fallback,
    and return the (possibly cached) result.
    """
    try:
        validate_request(request)
    except OperationValidationError as e:
        status_code = 400 if not is_valid_operation(request.operation) else 403
        logger.info("Rejected %s (%d): %s", request.operation, status_code, e)
        raise HTTPException(status_code=status_code, detail=str(e)) from e

    try:
        return await service.execute(request)
    except TerminalExecutionError as e:
        logger.error(
            "Terminal failure for %s after %d failed attempts: %s",
            e.operation, e.retry_count, e,
        )
        raise HTTPException(
            status_code=502,
            detail={
                "message": "All providers failed for this operation",
                "operation": e.operation,
                "tier": e.tier,
                "retry_count": e.retry_count,
            },
        ) from e


# ---------------------------------------------------------------------------
# GET /document-ai/operations
# ---------------------------------------------------------------------------


@router.get(
    "/operations",
    response_model=OperationsResponse,
    summary="List available operations",
)
async def list_operations(
    tier: Tier | None = None,
    free_only: bool = False,
) -> OperationsResponse:
    operations = [
        OperationInfo(
            id=d.id,
            tier=d.tier,
            input_cap=d.input_cap,
            output_cap=d.output_cap,
            free_allowed=d.free_allowed,
            json_output=d.json_output,
            result_type=d.result_type,
            options_family=d.options_family.value,
        )
        for d in OPERATION_REGISTRY.values()
        if (tier is None or d.tier is tier) and (not free_only or d.free_allowed)
    ]
    return OperationsResponse(total=len(operations), operations=operations)


# ---------------------------------------------------------------------------
# Stats & Cache
# ---------------------------------------------------------------------------


@router.get("/stats", response_model=StatsResponse, summary="Engine metrics")
async def get_stats(
    service: DocumentAIService = Depends(get_document_ai_service),
) -> StatsResponse:
    return await service.stats()


@router.post(
    "/stats/reset", response_model=StatsResponse, summary="Reset engine metrics",
)
async def reset_stats(
    service: DocumentAIService = Depends(get_document_ai_service),
) -> StatsResponse:
    service.reset_stats()
    return await service.stats()


@router.delete(
    "/cache", response_model=CacheClearResponse, summary="Clear cached results",
)
async def clear_cache(
    service: DocumentAIService = Depends(get_document_ai_service),
) -> CacheClearResponse:
    return CacheClearResponse(cleared=await service.clear_cache())


# ---------------------------------------------------------------------------
# GET /document-ai/health
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=ProviderHealthResponse,
    summary="Provider reachability per tier",
)
async def provider_health(
    service: DocumentAIService = Depends(get_document_ai_service),
) -> ProviderHealthResponse:
    status = await service.health_check()
    overall = status.pop("overall")
    return ProviderHealthResponse(tiers=status, overall=overall)
