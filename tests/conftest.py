# =============================================================================
# Shared Test Fixtures
# =============================================================================
#
# Every test runs without API keys, databases, Redis or network access.
# Providers are AsyncMocks that answer with canned LLMResponses; backoff
# sleeps are recorded instead of awaited.
# =============================================================================

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from docai.engine.executor import RetryPolicy
from docai.engine.orchestrator import DocumentAIService
from docai.services.cache import InMemoryResultCache
from docai.services.metrics import MetricsCollector
from docai.services.operations import Tier
from docai.services.routing import TierProfile
from helpers import FakeClock, RecordingSleep, make_llm_response, make_provider


@pytest.fixture
def profiles() -> dict[Tier, TierProfile]:
    return {
        Tier.SIMPLE: TierProfile(
            Tier.SIMPLE, "openai_compatible", "google", "gemini-2.0-flash",
        ),
        Tier.MEDIUM: TierProfile(
            Tier.MEDIUM, "openai_compatible", "openai", "gpt-4o-mini",
        ),
        Tier.COMPLEX: TierProfile(
            Tier.COMPLEX, "anthropic", "anthropic", "claude-haiku-4-5",
        ),
        Tier.FALLBACK: TierProfile(
            Tier.FALLBACK, "openai_compatible", "mistral", "mistral-small-latest",
        ),
    }


@pytest.fixture
def providers() -> dict[Tier, AsyncMock]:
    return {
        Tier.SIMPLE: make_provider(make_llm_response(model="gemini-2.0-flash")),
        Tier.MEDIUM: make_provider(make_llm_response(model="gpt-4o-mini")),
        Tier.COMPLEX: make_provider(make_llm_response(model="claude-haiku-4-5")),
        Tier.FALLBACK: make_provider(make_llm_response(model="mistral-small-latest")),
    }


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def service(providers, profiles, sleep, clock) -> DocumentAIService:
    return DocumentAIService(
        providers=providers,
        profiles=profiles,
        cache=InMemoryResultCache(clock=clock),
        metrics=MetricsCollector(),
        policy=RetryPolicy(),
        sleep=sleep,
    )
