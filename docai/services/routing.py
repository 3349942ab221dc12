# =============================================================================
# Routing Decision Engine — (operation, is_paid_user) → Tier Profile
# =============================================================================
#
# Pure function over the static operation registry and the tier profiles
# resolved from settings. No network calls, no side effects beyond logging.
#
# Rules:
#   1. Free users always run on the SIMPLE tier, whatever the operation.
#   2. Paid users run on the operation's configured tier.
#   3. Unknown operations degrade to SIMPLE with default caps and a logged
#      warning; routing always yields a usable decision.
#
# The FALLBACK profile is never chosen here. The executor switches to it
# only after every attempt on the routed tier has failed.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass

from docai.config import Settings
from docai.services.operations import Tier, get_operation, resolve_operation
from docai.services.pricing import estimate_cost, get_pricing

logger = logging.getLogger(__name__)

# Which vendor key each tier slot uses by default.
_TIER_API_KEYS = {
    Tier.SIMPLE: "gemini_api_key",
    Tier.MEDIUM: "openai_api_key",
    Tier.COMPLEX: "anthropic_api_key",
    Tier.FALLBACK: "mistral_api_key",
}


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TierProfile:
    """A provider+model pairing assigned to one tier slot."""

    tier: Tier
    provider_type: str              # "anthropic" | "openai_compatible"
    provider_label: str             # "google", "openai", "anthropic", ...
    model: str
    base_url: str | None = None
    api_key: str = ""


@dataclass(frozen=True)
class RoutingDecision:
    provider: str
    provider_type: str
    model: str
    tier: Tier
    input_cap: int
    output_cap: int
    estimated_cost: float           # upper bound in USD, 0 for free users
    reason: str


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_tier_profiles(settings: Settings) -> dict[Tier, TierProfile]:
    """Resolve one TierProfile per tier slot from settings."""
    profiles: dict[Tier, TierProfile] = {}
    for tier in Tier:
        provider_type = getattr(settings, f"{tier.value}_provider")
        model = getattr(settings, f"{tier.value}_model")
        pricing = get_pricing(provider_type, model)
        profiles[tier] = TierProfile(
            tier=tier,
            provider_type=provider_type,
            provider_label=(
                pricing.vendor.lower() if pricing else provider_type
            ),
            model=model,
            base_url=getattr(settings, f"{tier.value}_base_url"),
            api_key=getattr(settings, _TIER_API_KEYS[tier]),
        )
    return profiles


def route(
    operation: str,
    is_paid_user: bool,
    profiles: dict[Tier, TierProfile],
) -> RoutingDecision:
    """
    Decide which tier, provider and token caps serve a request.

    Never raises for an unknown operation: it is routed to the simple tier
    with default caps.
    """
    known = get_operation(operation) is not None
    descriptor = resolve_operation(operation)

    if not known:
        logger.warning(
            "Unknown operation %s, routing to %s tier with default caps",
            operation, Tier.SIMPLE.value,
        )
        tier = Tier.SIMPLE
        reason = f"Unknown operation {operation}, degraded to simple tier"
    elif not is_paid_user:
        tier = Tier.SIMPLE
        reason = "Free user, routed to simple tier"
    else:
        tier = descriptor.tier
        reason = f"Paid user, {operation} requires {tier.value} tier"

    profile = profiles[tier]

    estimated_cost = 0.0
    if is_paid_user:
        estimated_cost = estimate_cost(
            profile.provider_type,
            profile.model,
            descriptor.input_cap,
            descriptor.output_cap,
        ) or 0.0

    decision = RoutingDecision(
        provider=profile.provider_label,
        provider_type=profile.provider_type,
        model=profile.model,
        tier=tier,
        input_cap=descriptor.input_cap,
        output_cap=descriptor.output_cap,
        estimated_cost=round(estimated_cost, 6),
        reason=reason,
    )

    logger.info(
        "Routing %s (paid=%s) → %s/%s [%s]: %s",
        operation, is_paid_user, decision.provider, decision.model,
        tier.value, reason,
    )
    return decision
