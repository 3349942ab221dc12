# =============================================================================
# Response Models — Pydantic V2 Schemas
# =============================================================================
#
# ExecutionResponse is what DocumentAIService.execute() returns and what
# the cache stores. The remaining models shape the admin endpoints.
# =============================================================================

from __future__ import annotations

from pydantic import BaseModel, Field

from docai.models.results import StructuredResult
from docai.services.operations import Tier


class TokenUsage(BaseModel):
    input: int = 0
    output: int = 0
    total: int = 0


class ExecutionResponse(BaseModel):
    """
    Result of one execute() call.

    `cost` is in USD and always 0 for free users and cache hits.
    `retry_count` counts failed attempts before the one that succeeded:
    0 on a first-attempt success, max_retries + 1 when the fallback tier
    answered.
    """

    success: bool = True
    content: str
    structured_content: StructuredResult | None = None
    provider: str
    model: str
    tier: Tier
    tokens_used: TokenUsage = Field(default_factory=TokenUsage)
    cost: float = 0.0
    processing_time_ms: int = 0
    cached: bool = False
    cache_key: str
    retry_count: int = 0


class OperationInfo(BaseModel):
    """One row of GET /document-ai/operations."""

    id: str
    tier: Tier
    input_cap: int
    output_cap: int
    free_allowed: bool
    json_output: bool
    result_type: str | None = None
    options_family: str


class OperationsResponse(BaseModel):
    total: int
    operations: list[OperationInfo]


class StatsResponse(BaseModel):
    """Metrics snapshot for GET /document-ai/stats."""

    total_requests: int
    total_cost: float
    tier_counts: dict[str, int]
    tier_errors: dict[str, int]
    cache_hits: int
    cache_misses: int
    cache_hit_rate: float = Field(description="Hits / (hits + misses), 0 when idle")
    cache_size: int | None = Field(
        default=None,
        description="Entries currently cached; None when the backend cannot tell",
    )


class ProviderHealthResponse(BaseModel):
    """Per-tier provider reachability for GET /document-ai/health."""

    tiers: dict[str, bool]
    overall: bool


class CacheClearResponse(BaseModel):
    cleared: int


class HealthResponse(BaseModel):
    """Response for GET /health — confirms the API is running."""

    status: str = "ok"
    version: str
    service: str
