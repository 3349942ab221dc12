# =============================================================================
# Model Prices — USD Cost of a Provider Call
# =============================================================================
#
# Static price table keyed by (provider_type, model). Prices are written
# the way vendors publish them, USD per million tokens, and converted in
# ModelPricing.cost().
#
# Two consumers:
#   - routing:      pre-call estimate from the operation's token caps
#   - orchestrator: actual cost of a paid, provider-served execution
#
# An unpriced model yields None from estimate_cost(); both consumers
# report 0 for it and log a warning.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass

_PER_MILLION = 1_000_000


@dataclass(frozen=True)
class ModelPricing:
    vendor: str
    input_per_million: float
    output_per_million: float

    def cost(self, input_tokens: int, output_tokens: int) -> float:
        return (
            input_tokens * self.input_per_million
            + output_tokens * self.output_per_million
        ) / _PER_MILLION


def _vendor_prices(
    vendor: str,
    provider_type: str,
    prices: dict[str, tuple[float, float]],
) -> dict[tuple[str, str], ModelPricing]:
    return {
        (provider_type, model): ModelPricing(vendor, input_price, output_price)
        for model, (input_price, output_price) in prices.items()
    }


# (input, output) USD per 1M tokens. Gemini and Mistral are reached through
# their OpenAI-compatible endpoints.
PRICING_REGISTRY: dict[tuple[str, str], ModelPricing] = {
    **_vendor_prices("Anthropic", "anthropic", {
        "claude-haiku-4-5": (0.80, 4.00),
        "claude-sonnet-4-6": (3.00, 15.00),
    }),
    **_vendor_prices("OpenAI", "openai_compatible", {
        "gpt-4o-mini": (0.15, 0.60),
        "gpt-4o": (2.50, 10.00),
    }),
    **_vendor_prices("Google", "openai_compatible", {
        "gemini-2.0-flash": (0.10, 0.40),
    }),
    **_vendor_prices("Mistral", "openai_compatible", {
        "mistral-small-latest": (0.10, 0.30),
        "mistral-large-latest": (0.50, 1.50),
    }),
}


def get_pricing(provider_type: str, model: str) -> ModelPricing | None:
    return PRICING_REGISTRY.get((provider_type, model))


def estimate_cost(
    provider_type: str,
    model: str,
    input_tokens: int,
    output_tokens: int,
) -> float | None:
    """
    USD cost of ``input_tokens`` + ``output_tokens`` on ``model``.

    Returns None when the model has no price entry; unknown is not free.
    """
    pricing = get_pricing(provider_type, model)
    if pricing is None:
        return None
    return pricing.cost(input_tokens, output_tokens)
