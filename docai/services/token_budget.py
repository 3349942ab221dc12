# =============================================================================
# Token Budget Manager — Input Truncation & Large-Document Splitting
# =============================================================================
#
# Bounds operation input to the operation's token cap before it reaches a
# provider, and splits very large documents into parts that are executed
# one by one (stitching the part results is the batch store's job).
#
# DESIGN DECISION: Fixed chars-per-token heuristic (4 chars ≈ 1 token).
# Exact tokenisation is provider-specific (Gemini, GPT and Claude all use
# different vocabularies) and unavailable before routing, so the estimate
# is deliberately model-agnostic.
#
# TRUNCATION ALGORITHM (keep both ends):
#   max_chars = cap * 4
#   len(content) <= max_chars  → unchanged
#   otherwise                  → first half + MARKER + last half of
#                                (max_chars - 100) characters
# A document's opening framing and closing conclusions carry more than an
# arbitrary contiguous middle slice.
# =============================================================================

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4
TRUNCATION_MARKER = "\n\n[... Content truncated for processing ...]\n\n"
# Room kept free for the marker; must stay >= len(TRUNCATION_MARKER).
MARKER_RESERVE_CHARS = 100

_SENTENCE_END = re.compile(r"[.!?]\s")


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BatchPlan:
    """How a document will be executed: in one go or in N parts."""

    batch_required: bool
    total_parts: int
    estimated_tokens: int


# ---------------------------------------------------------------------------
# Public API — Estimation & Truncation
# ---------------------------------------------------------------------------


def estimate_tokens(text: str) -> int:
    """Approximate token count of ``text`` (ceil(chars / 4))."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def fits_budget(content: str, max_tokens: int) -> bool:
    return len(content) <= max_tokens * CHARS_PER_TOKEN


def truncate_to_token_limit(content: str, max_tokens: int) -> str:
    """
    Return ``content`` bounded to ``max_tokens`` approximate tokens.

    Content within the cap is returned unchanged. Oversized content keeps
    its head and tail (half of the remaining budget each) around a single
    TRUNCATION_MARKER; the result is always shorter than the cap.
    """
    max_chars = max_tokens * CHARS_PER_TOKEN
    if len(content) <= max_chars:
        return content

    half_keep = max(max_chars - MARKER_RESERVE_CHARS, 0) // 2
    head = content[:half_keep]
    tail = content[len(content) - half_keep:] if half_keep else ""

    logger.info(
        "Truncated content from %d to %d chars (cap=%d tokens)",
        len(content), 2 * half_keep + len(TRUNCATION_MARKER), max_tokens,
    )
    return head + TRUNCATION_MARKER + tail


# ---------------------------------------------------------------------------
# Public API — Large Document Splitting
# ---------------------------------------------------------------------------


def plan_parts(
    content: str,
    min_chars_for_batch: int = 50_000,
    max_chars_per_part: int = 32_000,
) -> BatchPlan:
    """Decide whether ``content`` must be split, and into how many parts."""
    estimated = estimate_tokens(content)
    if len(content) <= min_chars_for_batch:
        return BatchPlan(batch_required=False, total_parts=1, estimated_tokens=estimated)

    return BatchPlan(
        batch_required=True,
        total_parts=math.ceil(len(content) / max_chars_per_part),
        estimated_tokens=estimated,
    )


def split_into_parts(content: str, total_parts: int) -> list[str]:
    """
    Split ``content`` into about ``total_parts`` consecutive parts.

    Each cut point is nudged forward (at most 500 chars) so that a part
    does not end mid-thought: a paragraph break within 300 chars wins,
    then the first sentence end, then a newline within 200 chars.
    Whitespace-only parts are dropped.
    """
    if total_parts <= 1 or not content:
        stripped = content.strip()
        return [stripped] if stripped else []

    chars_per_part = math.ceil(len(content) / total_parts)
    parts: list[str] = []
    start = 0

    while start < len(content):
        end = min(start + chars_per_part, len(content))
        if end < len(content):
            end = _nudge_cut(content, end)

        part = content[start:end].strip()
        if part:
            parts.append(part)
        start = end

    return parts


# ---------------------------------------------------------------------------
# Internal Helpers
# ---------------------------------------------------------------------------


def _nudge_cut(content: str, end: int) -> int:
    window = content[end:end + 500]

    paragraph = window.find("\n\n")
    if paragraph != -1 and paragraph < 300:
        return end + paragraph + 2

    sentence = _SENTENCE_END.search(window)
    if sentence:
        return end + sentence.start() + 2

    newline = window.find("\n")
    if newline != -1 and newline < 200:
        return end + newline + 1

    return end
