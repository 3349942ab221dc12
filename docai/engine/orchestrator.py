# =============================================================================
# Document AI Service — LangGraph Execution Pipeline
# =============================================================================
#
# DocumentAIService.execute(request) is the single entry point. It wires
# cache lookup, routing, truncation, prompt building, resilient execution,
# structured parsing and accounting into a LangGraph StateGraph:
#
#   START ──▶ lookup_cache ──hit──▶ END
#                  │
#                 miss
#                  ▼
#              prepare ──▶ execute ──▶ parse ──▶ finalize ──▶ END
#
#   lookup_cache — fingerprint the request; a hit returns cost 0, cached
#   prepare      — route, truncate to the input cap, render the prompt
#   execute      — ResilientExecutor (retries + one fallback)
#   parse        — structured output for JSON-shaped operations
#   finalize     — tokens, cost, cache write, metrics, ledger debit
#
# DESIGN DECISION: One service instance owns its cache, metrics and
# providers; it is created in the FastAPI lifespan and injected into
# handlers. No module-level singletons, so tests build isolated services.
#
# DESIGN DECISION: Plain TypedDict state (total=False). Nodes return only
# the keys they set. Values are live objects (pydantic models, dataclasses);
# no checkpointer is configured, so nothing needs to be serialisable.
#
# Request validation (unknown / unauthorised operation) happens BEFORE
# execute() in validate_request(); the pipeline assumes a valid request.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterator, Mapping

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from docai.config import Settings
from docai.engine.errors import OperationValidationError, ProviderError
from docai.engine.executor import ExecutionOutcome, ResilientExecutor, RetryPolicy
from docai.models.requests import ExecutionRequest
from docai.models.responses import ExecutionResponse, StatsResponse, TokenUsage
from docai.models.results import StructuredResult
from docai.services.cache import (
    InMemoryResultCache,
    ResultCache,
    build_cache_key,
    create_result_cache,
)
from docai.services.ledger import SqlAlchemyUsageLedger, UsageLedger
from docai.services.llm import LLMProvider, create_provider
from docai.services.metrics import MetricsCollector
from docai.services.operations import (
    Tier,
    get_operation,
    is_operation_allowed,
    resolve_operation,
)
from docai.services.parser import parse_structured_output, wants_structured_output
from docai.services.pricing import estimate_cost
from docai.services.prompts import build_prompt, system_prompt_for
from docai.services.routing import (
    RoutingDecision,
    TierProfile,
    build_tier_profiles,
    route,
)
from docai.services.token_budget import estimate_tokens, truncate_to_token_limit

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pipeline State Schema
# ---------------------------------------------------------------------------


class ExecutionState(TypedDict, total=False):
    # --- Input (set by execute()) ---
    request: ExecutionRequest
    started_at: float

    # --- Intermediate (set by nodes) ---
    cache_key: str
    decision: RoutingDecision
    prompt: str
    outcome: ExecutionOutcome
    structured_content: StructuredResult | None

    # --- Output ---
    response: ExecutionResponse


# ---------------------------------------------------------------------------
# Request Validation
# ---------------------------------------------------------------------------


def validate_request(request: ExecutionRequest) -> None:
    """
    Reject requests the engine must never see.

    Raises:
        OperationValidationError: unknown operation, or a paid-only
            operation requested by a free user.
    """
    if get_operation(request.operation) is None:
        raise OperationValidationError(
            f"Unknown operation: {request.operation}", operation=request.operation,
        )
    if not is_operation_allowed(request.operation, request.is_paid_user):
        raise OperationValidationError(
            f"Operation {request.operation} requires a paid plan",
            operation=request.operation,
        )


# ---------------------------------------------------------------------------
# Provider Pool
# ---------------------------------------------------------------------------


class ProviderPool(Mapping[Tier, LLMProvider]):
    """
    Tier → provider, created on first use from the tier profiles.

    A tier whose provider cannot be built (missing API key, unknown provider
    type) raises a non-transient ProviderError when looked up, so the
    executor moves on to the fallback tier instead of crashing.
    """

    def __init__(self, profiles: Mapping[Tier, TierProfile]) -> None:
        self._profiles = profiles
        self._providers: dict[Tier, LLMProvider] = {}

    def __getitem__(self, tier: Tier) -> LLMProvider:
        provider = self._providers.get(tier)
        if provider is None:
            profile = self._profiles[tier]
            try:
                provider = create_provider(
                    profile.provider_type,
                    model=profile.model,
                    api_key=profile.api_key,
                    base_url=profile.base_url,
                )
            except ValueError as e:
                raise ProviderError(
                    f"{tier.value} tier is not configured: {e}",
                    provider=profile.provider_label,
                ) from e
            self._providers[tier] = provider
        return provider

    def __iter__(self) -> Iterator[Tier]:
        return iter(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class DocumentAIService:
    """
    Executes document operations against tiered LLM providers.

    Args:
        providers: Tier → provider for all four tiers.
        profiles: Tier → profile (provider label, model, pricing key).
        cache: Result cache (default: in-memory, 24h TTL).
        metrics: Counters (default: a fresh collector).
        ledger: Optional usage ledger, debited once per provider-served call.
        policy: Retry/backoff/timeout knobs.
        default_temperature: Used when options.temperature is unset.
        sleep: Backoff delay (injectable for tests).
    """

    def __init__(
        self,
        providers: Mapping[Tier, LLMProvider],
        profiles: Mapping[Tier, TierProfile],
        cache: ResultCache | None = None,
        metrics: MetricsCollector | None = None,
        ledger: UsageLedger | None = None,
        policy: RetryPolicy | None = None,
        default_temperature: float = 0.3,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._providers = providers
        self._profiles = profiles
        self.cache = cache if cache is not None else InMemoryResultCache()
        self.metrics = metrics or MetricsCollector()
        self._ledger = ledger
        self._default_temperature = default_temperature
        self._executor = ResilientExecutor(
            providers, policy=policy, metrics=self.metrics, sleep=sleep,
        )
        self._graph = self._build_graph()

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    async def execute(self, request: ExecutionRequest) -> ExecutionResponse:
        """
        Run one operation end to end.

        Raises:
            TerminalExecutionError: the routed tier and the fallback failed.
        """
        logger.info(
            "Executing %s (paid=%s, user=%s, document=%s, part=%s/%s)",
            request.operation, request.is_paid_user, request.user_id,
            request.document_id, request.part_number, request.total_parts,
        )
        result = await self._graph.ainvoke({
            "request": request,
            "started_at": time.perf_counter(),
        })
        return result["response"]

    async def health_check(self, timeout: float = 15.0) -> dict[str, bool]:
        """
        Ping every tier with a 5-token request.

        Returns {tier: reachable, ..., "overall": fallback reachable}.
        """
        tiers = list(Tier)
        results = await asyncio.gather(
            *(self._ping(tier, timeout) for tier in tiers)
        )
        status = {tier.value: ok for tier, ok in zip(tiers, results)}
        status["overall"] = status[Tier.FALLBACK.value]
        return status

    async def stats(self) -> StatsResponse:
        snapshot = self.metrics.snapshot()
        return StatsResponse(
            total_requests=snapshot.total_requests,
            total_cost=snapshot.total_cost,
            tier_counts=snapshot.tier_counts,
            tier_errors=snapshot.tier_errors,
            cache_hits=snapshot.cache_hits,
            cache_misses=snapshot.cache_misses,
            cache_hit_rate=round(snapshot.cache_hit_rate, 4),
            cache_size=await self.cache.size(),
        )

    def reset_stats(self) -> None:
        self.metrics.reset()

    async def clear_cache(self) -> int:
        return await self.cache.clear()

    def start(self, sweep_interval: float) -> None:
        """Start background work (cache sweeper). Needs a running loop."""
        self.cache.start_sweeper(sweep_interval)

    async def shutdown(self) -> None:
        await self.cache.stop_sweeper()
        await self.cache.close()

    # -----------------------------------------------------------------------
    # Graph Assembly
    # -----------------------------------------------------------------------

    def _build_graph(self):
        builder = StateGraph(ExecutionState)
        builder.add_node("lookup_cache", self._lookup_cache_node)
        builder.add_node("prepare", self._prepare_node)
        builder.add_node("execute", self._execute_node)
        builder.add_node("parse", self._parse_node)
        builder.add_node("finalize", self._finalize_node)

        builder.add_edge(START, "lookup_cache")
        builder.add_conditional_edges(
            "lookup_cache",
            _cache_outcome,
            {"hit": END, "miss": "prepare"},
        )
        builder.add_edge("prepare", "execute")
        builder.add_edge("execute", "parse")
        builder.add_edge("parse", "finalize")
        builder.add_edge("finalize", END)
        return builder.compile()

    # -----------------------------------------------------------------------
    # Nodes
    # -----------------------------------------------------------------------

    async def _lookup_cache_node(self, state: ExecutionState) -> dict:
        request = state["request"]
        key = build_cache_key(
            request.operation,
            request.content,
            request.options,
            request.is_paid_user,
            request.part_number,
        )
        cached = await self.cache.get(key)
        if cached is None:
            self.metrics.record_cache_miss()
            logger.debug("Cache miss for %s", request.operation)
            return {"cache_key": key}

        self.metrics.record_cache_hit()
        logger.info("Cache hit for %s (%s)", request.operation, key)
        response = cached.model_copy(update={
            "cache_key": key,
            "processing_time_ms": _elapsed_ms(state["started_at"]),
        })
        return {"cache_key": key, "response": response}

    async def _prepare_node(self, state: ExecutionState) -> dict:
        request = state["request"]
        decision = route(request.operation, request.is_paid_user, self._profiles)
        content = truncate_to_token_limit(request.content, decision.input_cap)
        prompt = build_prompt(
            request.operation,
            content,
            request.options,
            part_number=request.part_number,
            total_parts=request.total_parts,
        )
        return {"decision": decision, "prompt": prompt}

    async def _execute_node(self, state: ExecutionState) -> dict:
        request = state["request"]
        decision = state["decision"]
        options = request.options

        max_output_tokens = decision.output_cap
        if options.max_output_tokens is not None:
            max_output_tokens = min(max_output_tokens, options.max_output_tokens)
        temperature = (
            options.temperature
            if options.temperature is not None
            else self._default_temperature
        )

        outcome = await self._executor.run(
            request.operation,
            decision.tier,
            state["prompt"],
            system=system_prompt_for(decision.tier),
            max_output_tokens=max_output_tokens,
            temperature=temperature,
        )
        return {"outcome": outcome}

    async def _parse_node(self, state: ExecutionState) -> dict:
        request = state["request"]
        descriptor = resolve_operation(request.operation)
        structured = None
        if wants_structured_output(descriptor, request.options):
            structured = parse_structured_output(
                state["outcome"].response.text,
                descriptor.result_type,
                request.operation,
            )
        return {"structured_content": structured}

    async def _finalize_node(self, state: ExecutionState) -> dict:
        request = state["request"]
        outcome = state["outcome"]
        llm_response = outcome.response
        profile = self._profiles[outcome.tier]

        # Provider-reported usage, else the chars-per-token heuristic
        input_tokens = llm_response.input_tokens
        if input_tokens is None:
            input_tokens = estimate_tokens(state["prompt"])
        output_tokens = llm_response.output_tokens
        if output_tokens is None:
            output_tokens = estimate_tokens(llm_response.text)

        cost = 0.0
        if request.is_paid_user:
            estimated = estimate_cost(
                profile.provider_type, profile.model, input_tokens, output_tokens,
            )
            if estimated is None:
                logger.warning(
                    "No pricing for %s/%s, reporting cost 0",
                    profile.provider_type, profile.model,
                )
            else:
                cost = round(estimated, 6)

        response = ExecutionResponse(
            success=True,
            content=llm_response.text,
            structured_content=state.get("structured_content"),
            provider=profile.provider_label,
            model=llm_response.model or profile.model,
            tier=outcome.tier,
            tokens_used=TokenUsage(
                input=input_tokens,
                output=output_tokens,
                total=input_tokens + output_tokens,
            ),
            cost=cost,
            processing_time_ms=_elapsed_ms(state["started_at"]),
            cached=False,
            cache_key=state["cache_key"],
            retry_count=outcome.retry_count,
        )

        await self.cache.set(state["cache_key"], response)
        self.metrics.record_success(outcome.tier, cost)

        if self._ledger is not None:
            try:
                await self._ledger.record(request, response)
            except Exception as e:
                logger.warning(
                    "Failed to record usage for %s: %s", request.operation, e,
                )

        logger.info(
            "%s completed on %s tier (%s): %d tokens, $%.6f, %d retries, %dms",
            request.operation, outcome.tier.value, response.model,
            response.tokens_used.total, cost, outcome.retry_count,
            response.processing_time_ms,
        )
        return {"response": response}

    # -----------------------------------------------------------------------
    # Internal Helpers
    # -----------------------------------------------------------------------

    async def _ping(self, tier: Tier, timeout: float) -> bool:
        try:
            provider = self._providers[tier]
            await asyncio.wait_for(
                provider.generate(
                    "Reply with OK.",
                    system=None,
                    max_output_tokens=5,
                    temperature=0.0,
                ),
                timeout=timeout,
            )
        except (ProviderError, asyncio.TimeoutError) as e:
            logger.warning("Health check failed for %s tier: %s", tier.value, e)
            return False
        return True


def _cache_outcome(state: ExecutionState) -> str:
    return "hit" if state.get("response") is not None else "miss"


def _elapsed_ms(started_at: float) -> int:
    return int((time.perf_counter() - started_at) * 1000)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def build_default_service(
    settings: Settings,
    ledger: UsageLedger | None = None,
) -> DocumentAIService:
    """
    Wire a service from settings: lazy providers, cache backend, ledger.

    With ledger_enabled and no explicit ``ledger``, usage is written through
    the async session factory.
    """
    profiles = build_tier_profiles(settings)

    if ledger is None and settings.ledger_enabled:
        from docai.db.engine import get_async_session_factory

        ledger = SqlAlchemyUsageLedger(get_async_session_factory())

    return DocumentAIService(
        providers=ProviderPool(profiles),
        profiles=profiles,
        cache=create_result_cache(settings),
        ledger=ledger,
        policy=RetryPolicy.from_settings(settings),
        default_temperature=settings.default_temperature,
    )
