# =============================================================================
# Unit Tests — Resilient Executor
# =============================================================================
#
# Provider stubs fail a scripted number of times; backoff delays are
# recorded, never slept.
# =============================================================================

from __future__ import annotations

import asyncio

import pytest

from docai.engine.errors import (
    ProviderError,
    ProviderTimeoutError,
    TerminalExecutionError,
    TransientProviderError,
)
from docai.engine.executor import ResilientExecutor, RetryPolicy
from docai.services.metrics import MetricsCollector
from docai.services.operations import Tier
from docai.services.prompts import system_prompt_for
from helpers import RecordingSleep, make_llm_response, make_provider, run


def _transient(n: int = 1) -> list[TransientProviderError]:
    return [TransientProviderError("503 upstream overloaded") for _ in range(n)]


def _executor(primary, fallback, policy=None, sleep=None, metrics=None):
    return ResilientExecutor(
        {Tier.MEDIUM: primary, Tier.FALLBACK: fallback},
        policy=policy or RetryPolicy(),
        metrics=metrics or MetricsCollector(),
        sleep=sleep or RecordingSleep(),
    )


def _run_executor(executor, tier=Tier.MEDIUM):
    return run(executor.run(
        "TEST_GENERATOR",
        tier,
        "prompt",
        system="system",
        max_output_tokens=2000,
        temperature=0.3,
    ))


class TestRetryPolicy:
    def test_exponential_backoff_capped(self):
        policy = RetryPolicy()
        assert [policy.delay_for(n) for n in range(6)] == [1, 2, 4, 8, 10, 10]

    def test_from_settings(self):
        from docai.config import Settings

        policy = RetryPolicy.from_settings(Settings(max_retries=5, request_timeout=30))
        assert policy.max_retries == 5
        assert policy.timeout == 30


class TestResilientExecutor:
    def test_first_attempt_success(self):
        primary = make_provider(make_llm_response())
        fallback = make_provider(make_llm_response())
        outcome = _run_executor(_executor(primary, fallback))

        assert outcome.tier is Tier.MEDIUM
        assert outcome.retry_count == 0
        assert not outcome.used_fallback
        primary.generate.assert_awaited_once_with(
            "prompt", system="system", max_output_tokens=2000, temperature=0.3,
        )
        fallback.generate.assert_not_awaited()

    @pytest.mark.parametrize("k", [1, 2, 3])
    def test_k_failures_then_success_stays_on_primary(self, k):
        primary = make_provider(*_transient(k), make_llm_response())
        fallback = make_provider(make_llm_response())
        sleep = RecordingSleep()
        outcome = _run_executor(_executor(primary, fallback, sleep=sleep))

        assert outcome.retry_count == k
        assert outcome.tier is Tier.MEDIUM
        assert primary.generate.await_count == k + 1
        fallback.generate.assert_not_awaited()
        assert sleep.delays == [1, 2, 4][:k]

    def test_exhaustion_triggers_exactly_one_fallback(self):
        primary = make_provider(*_transient(4))
        fallback = make_provider(make_llm_response(model="mistral-small-latest"))
        sleep = RecordingSleep()
        outcome = _run_executor(_executor(primary, fallback, sleep=sleep))

        assert primary.generate.await_count == 4
        assert fallback.generate.await_count == 1
        assert outcome.tier is Tier.FALLBACK
        assert outcome.used_fallback
        assert outcome.retry_count == 4
        # no sleep after the final primary attempt
        assert sleep.delays == [1, 2, 4]

    def test_fallback_uses_its_own_system_prompt(self):
        primary = make_provider(*_transient(4))
        fallback = make_provider(make_llm_response())
        _run_executor(_executor(primary, fallback))
        _, kwargs = fallback.generate.call_args
        assert kwargs["system"] == system_prompt_for(Tier.FALLBACK)

    def test_fallback_failure_is_terminal(self):
        primary = make_provider(*_transient(4))
        fallback = make_provider(TransientProviderError("still down"))
        executor = _executor(primary, fallback)

        with pytest.raises(TerminalExecutionError) as exc_info:
            _run_executor(executor)

        error = exc_info.value
        assert error.retry_count == 5
        assert error.operation == "TEST_GENERATOR"
        assert error.tier == "medium"
        assert error.fallback_tier == "fallback"
        assert isinstance(error.__cause__, TransientProviderError)
        assert primary.generate.await_count == 4
        assert fallback.generate.await_count == 1

    def test_non_transient_error_skips_to_fallback(self):
        primary = make_provider(ProviderError("401 invalid api key", status_code=401))
        fallback = make_provider(make_llm_response())
        sleep = RecordingSleep()
        outcome = _run_executor(_executor(primary, fallback, sleep=sleep))

        assert primary.generate.await_count == 1
        assert outcome.used_fallback
        assert outcome.retry_count == 1
        assert sleep.delays == []

    def test_programming_errors_propagate_without_retry(self):
        primary = make_provider(KeyError("bug"))
        fallback = make_provider(make_llm_response())

        with pytest.raises(KeyError):
            _run_executor(_executor(primary, fallback))
        assert primary.generate.await_count == 1
        fallback.generate.assert_not_awaited()

    def test_errors_counted_per_tier(self):
        metrics = MetricsCollector()
        primary = make_provider(*_transient(4))
        fallback = make_provider(TransientProviderError("down"))
        with pytest.raises(TerminalExecutionError):
            _run_executor(_executor(primary, fallback, metrics=metrics))

        snapshot = metrics.snapshot()
        assert snapshot.tier_errors["medium"] == 4
        assert snapshot.tier_errors["fallback"] == 1

    def test_custom_retry_budget(self):
        primary = make_provider(*_transient(2))
        fallback = make_provider(make_llm_response())
        policy = RetryPolicy(max_retries=1)
        outcome = _run_executor(_executor(primary, fallback, policy=policy))
        assert primary.generate.await_count == 2
        assert outcome.used_fallback


class SlowProvider:
    """Answers after ``delay`` seconds; records whether it finished."""

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self.finished = 0

    async def generate(self, prompt, *, system=None, max_output_tokens, temperature):
        await asyncio.sleep(self.delay)
        self.finished += 1
        return make_llm_response()


class TestTimeout:
    def test_timed_out_attempt_counts_as_failure(self):
        slow = SlowProvider(delay=0.2)
        fallback = make_provider(make_llm_response())
        policy = RetryPolicy(max_retries=0, timeout=0.01)
        outcome = _run_executor(_executor(slow, fallback, policy=policy))

        assert outcome.used_fallback
        assert outcome.retry_count == 1

    def test_timeout_raises_provider_timeout_error(self):
        slow = SlowProvider(delay=0.2)
        executor = _executor(slow, make_provider(make_llm_response()),
                             policy=RetryPolicy(timeout=0.01))

        async def attempt():
            return await executor._attempt(Tier.MEDIUM, "p", None, 10, 0.0)

        with pytest.raises(ProviderTimeoutError):
            run(attempt())

    def test_abandoned_call_is_not_cancelled(self):
        slow = SlowProvider(delay=0.05)
        fallback = make_provider(make_llm_response())
        executor = _executor(slow, fallback, policy=RetryPolicy(max_retries=0, timeout=0.01))

        async def scenario():
            outcome = await executor.run(
                "TEST_GENERATOR", Tier.MEDIUM, "p",
                system=None, max_output_tokens=10, temperature=0.0,
            )
            await asyncio.sleep(0.1)
            return outcome

        outcome = run(scenario())
        assert outcome.used_fallback
        assert slow.finished == 1
        assert executor._abandoned == set()
