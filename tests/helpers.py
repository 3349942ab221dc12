# =============================================================================
# Test Helpers — Stub Providers, Clock, Sleep
# =============================================================================

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

from docai.services.llm import LLMResponse


def run(coro):
    """Run an async function from a sync test."""
    return asyncio.run(coro)


class RecordingSleep:
    """Stand-in for asyncio.sleep that records the requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_llm_response(
    text: str = "A concise summary.",
    model: str = "stub-model",
    input_tokens: int | None = 100,
    output_tokens: int | None = 20,
) -> LLMResponse:
    return LLMResponse(
        text=text, model=model, input_tokens=input_tokens, output_tokens=output_tokens,
    )


def make_provider(*outcomes) -> AsyncMock:
    """
    Provider whose generate() yields ``outcomes`` in order (exceptions are
    raised). With a single non-exception outcome, every call returns it.
    """
    provider = AsyncMock()
    if len(outcomes) == 1 and not isinstance(outcomes[0], BaseException):
        provider.generate.return_value = outcomes[0]
    else:
        provider.generate.side_effect = list(outcomes)
    return provider
