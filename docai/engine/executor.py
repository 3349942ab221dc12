# =============================================================================
# Resilient Executor — Timeout, Exponential Backoff, One Fallback
# =============================================================================
#
# ALGORITHM:
#   1. Call the routed tier's provider up to max_retries + 1 times.
#   2. Each attempt races the call against a fixed timeout. A timed-out
#      call is abandoned (not cancelled); its eventual result is discarded.
#   3. Between attempts sleep min(base_delay * 2**attempt, max_delay).
#      No sleep after the last attempt.
#   4. When the routed tier is exhausted, make exactly ONE attempt on the
#      FALLBACK tier. Its failure raises TerminalExecutionError.
#
# Only ProviderError is handled here. A non-transient ProviderError (bad
# request, auth) ends the routed tier early and goes straight to the
# fallback. Any other exception is a bug and propagates unchanged.
#
# Routed-tier retries run through tenacity.AsyncRetrying with a wait
# function built from RetryPolicy.delay_for.
#
# DESIGN DECISION: `sleep` is injected (default asyncio.sleep). Backoff
# suspends only the calling task, and tests run with a recording stub
# instead of real delays.
#
# retry_count on the outcome = failed attempts before the successful one.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
)

from docai.config import Settings
from docai.engine.errors import (
    ProviderError,
    ProviderTimeoutError,
    TerminalExecutionError,
)
from docai.services.llm import LLMProvider, LLMResponse
from docai.services.metrics import MetricsCollector
from docai.services.operations import Tier
from docai.services.prompts import system_prompt_for

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    base_delay: float = 1.0     # seconds
    max_delay: float = 10.0     # seconds
    timeout: float = 60.0       # seconds, per attempt

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        return cls(
            max_retries=settings.max_retries,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
            timeout=settings.request_timeout,
        )

    def delay_for(self, attempt: int) -> float:
        """Backoff before the retry that follows 0-based ``attempt``."""
        return min(self.base_delay * (2 ** attempt), self.max_delay)


@dataclass
class ExecutionOutcome:
    """What the executor hands back on success."""

    response: LLMResponse
    tier: Tier                  # tier that actually answered
    retry_count: int
    used_fallback: bool = False


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, ProviderError) and exc.transient


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------


class ResilientExecutor:
    """
    Runs one prompt against the routed tier with retries and a fallback.

    Args:
        providers: Tier → provider. Must contain the FALLBACK tier.
        policy: Retry/backoff/timeout knobs.
        metrics: Failed attempts are counted per tier.
        sleep: Awaitable delay used for backoff.
    """

    def __init__(
        self,
        providers: Mapping[Tier, LLMProvider],
        policy: RetryPolicy | None = None,
        metrics: MetricsCollector | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._providers = providers
        self._policy = policy or RetryPolicy()
        self._metrics = metrics or MetricsCollector()
        self._sleep = sleep
        # Strong references to timed-out calls still running in the loop.
        self._abandoned: set[asyncio.Future] = set()

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def run(
        self,
        operation: str,
        tier: Tier,
        prompt: str,
        *,
        system: str | None,
        max_output_tokens: int,
        temperature: float,
    ) -> ExecutionOutcome:
        """
        Execute ``prompt`` on ``tier``, falling back once on exhaustion.

        Raises:
            TerminalExecutionError: routed tier and fallback both failed.
        """
        attempts = self._policy.max_retries + 1
        failures = 0

        async def call_routed_tier() -> LLMResponse:
            nonlocal failures
            try:
                return await self._attempt(
                    tier, prompt, system, max_output_tokens, temperature,
                )
            except ProviderError as e:
                failures += 1
                self._metrics.record_error(tier)
                logger.warning(
                    "Attempt %d/%d for %s on %s tier failed: %s",
                    failures, attempts, operation, tier.value, e,
                )
                raise

        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=self._backoff,
            retry=retry_if_exception(_is_transient),
            sleep=self._sleep,
            reraise=True,
        )
        try:
            response = await retrying(call_routed_tier)
        except ProviderError as e:
            if not e.transient:
                logger.warning(
                    "Non-transient error for %s, skipping remaining retries",
                    operation,
                )
        else:
            if failures:
                logger.info(
                    "%s succeeded on %s tier after %d failed attempt(s)",
                    operation, tier.value, failures,
                )
            return ExecutionOutcome(response=response, tier=tier, retry_count=failures)

        logger.error(
            "%s failed on %s tier after %d attempt(s), trying %s tier",
            operation, tier.value, failures, Tier.FALLBACK.value,
        )
        try:
            response = await self._attempt(
                Tier.FALLBACK,
                prompt,
                system_prompt_for(Tier.FALLBACK),
                max_output_tokens,
                temperature,
            )
        except ProviderError as e:
            failures += 1
            self._metrics.record_error(Tier.FALLBACK)
            logger.error(
                "Fallback failed for %s, giving up after %d attempts: %s",
                operation, failures, e,
            )
            raise TerminalExecutionError(
                f"{operation} failed on {tier.value} tier and on fallback: {e}",
                operation=operation,
                tier=tier.value,
                fallback_tier=Tier.FALLBACK.value,
                retry_count=failures,
            ) from e

        return ExecutionOutcome(
            response=response,
            tier=Tier.FALLBACK,
            retry_count=failures,
            used_fallback=True,
        )

    # -----------------------------------------------------------------------
    # Internal Helpers
    # -----------------------------------------------------------------------

    def _backoff(self, retry_state: RetryCallState) -> float:
        return self._policy.delay_for(retry_state.attempt_number - 1)

    async def _attempt(
        self,
        tier: Tier,
        prompt: str,
        system: str | None,
        max_output_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        """One provider call raced against the per-attempt timeout."""
        provider = self._providers[tier]
        task = asyncio.ensure_future(
            provider.generate(
                prompt,
                system=system,
                max_output_tokens=max_output_tokens,
                temperature=temperature,
            )
        )
        done, _ = await asyncio.wait({task}, timeout=self._policy.timeout)
        if task not in done:
            self._abandoned.add(task)
            task.add_done_callback(self._discard_abandoned)
            raise ProviderTimeoutError(
                f"{tier.value} provider did not answer within "
                f"{self._policy.timeout:g}s",
                provider=tier.value,
            )
        return task.result()

    def _discard_abandoned(self, task: asyncio.Future) -> None:
        self._abandoned.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.debug(
                "Abandoned provider call finished with %r", task.exception(),
            )
