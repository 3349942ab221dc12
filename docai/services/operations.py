# =============================================================================
# Operation Registry — Static Operation Catalogue
# =============================================================================
#
# Maps operation id → OperationDescriptor (tier requirement, token caps,
# free-vs-paid allowance, output shape, options family).
#
# DESIGN DECISION: Static dict, loaded at import time, never mutated.
# Same approach as the pricing registry: the catalogue changes with code
# releases, lookups need no I/O, and tests need no infrastructure.
#
# Tier assignment for PAID users:
#   SIMPLE  — 15 operations (summaries, cleanup, basic translation, notes)
#   MEDIUM  — 11 operations (tests, presentations, scripts, charts)
#   COMPLEX —  8 operations (legal scan, multi-document synthesis,
#              trend/insight extraction, AI detection)
# FREE users always run on SIMPLE, whatever the operation's tier.
# =============================================================================

from __future__ import annotations

import enum
from dataclasses import dataclass


class Tier(str, enum.Enum):
    """Cost/capability bucket a provider+model pairing belongs to."""

    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"
    FALLBACK = "fallback"


class OptionsFamily(str, enum.Enum):
    """Which closed options model validates an operation's options."""

    GENERAL = "general"
    SUMMARY = "summary"
    QUIZ = "quiz"
    FLASHCARDS = "flashcards"
    NOTES = "notes"
    PRESENTATION = "presentation"
    EXPLAIN = "explain"
    TEACHING = "teaching"
    SCRIPT = "script"
    DEFINITIONS = "definitions"
    QA = "qa"
    TRANSLATION = "translation"
    REPORT = "report"
    LEGAL = "legal"


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OperationDescriptor:
    """Immutable description of one document-processing operation."""

    id: str
    tier: Tier                      # tier used for PAID users
    input_cap: int                  # max input tokens (approximate)
    output_cap: int                 # max output tokens
    free_allowed: bool = False
    json_output: bool = False       # output is parsed as structured JSON
    result_type: str | None = None  # discriminator of the structured result
    options_family: OptionsFamily = OptionsFamily.GENERAL


def _op(
    op_id: str,
    tier: Tier,
    caps: tuple[int, int],
    *,
    free: bool = False,
    json_output: bool = False,
    result_type: str | None = None,
    family: OptionsFamily = OptionsFamily.GENERAL,
) -> tuple[str, OperationDescriptor]:
    return op_id, OperationDescriptor(
        id=op_id,
        tier=tier,
        input_cap=caps[0],
        output_cap=caps[1],
        free_allowed=free,
        json_output=json_output,
        result_type=result_type,
        options_family=family,
    )


_S, _M, _C = Tier.SIMPLE, Tier.MEDIUM, Tier.COMPLEX
_F = OptionsFamily

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

OPERATION_REGISTRY: dict[str, OperationDescriptor] = dict([
    # --- Free operations (7) ---
    _op("SUMMARY_SHORT", _S, (2000, 200), free=True,
        result_type="summary", family=_F.SUMMARY),
    _op("SUMMARY_BULLET", _S, (2000, 300), free=True,
        result_type="bullet_summary", family=_F.SUMMARY),
    _op("KEYWORD_EXTRACT", _S, (2000, 200), free=True, json_output=True,
        result_type="keywords"),
    _op("DOCUMENT_CLEANUP", _S, (3000, 3000), free=True,
        result_type="cleanup"),
    _op("FLASHCARDS", _S, (2000, 500), free=True, json_output=True,
        result_type="flashcards", family=_F.FLASHCARDS),
    _op("EXPLAIN_SIMPLE", _S, (2000, 400), free=True, family=_F.EXPLAIN),
    _op("EXTRACT_DEFINITIONS", _S, (2000, 300), free=True, json_output=True,
        result_type="definitions", family=_F.DEFINITIONS),

    # --- Paid, simple tier (8) ---
    _op("SUMMARY_LONG", _S, (4000, 800),
        result_type="summary", family=_F.SUMMARY),
    _op("TRANSLATE_BASIC", _S, (4000, 4000),
        result_type="translation", family=_F.TRANSLATION),
    _op("NOTES_GENERATOR", _S, (5000, 2000),
        result_type="notes", family=_F.NOTES),
    _op("TOPIC_BREAKDOWN", _S, (5000, 2000), json_output=True,
        result_type="topic_breakdown"),
    _op("FILL_IN_BLANKS", _S, (4000, 2000),
        result_type="test", family=_F.QUIZ),
    _op("DOCUMENT_CLEANUP_ADVANCED", _S, (5000, 5000),
        result_type="cleanup"),
    _op("SUMMARIES_ADVANCED", _S, (6000, 1500),
        result_type="summary", family=_F.SUMMARY),
    _op("VOICE_MODE", _S, (4000, 1500), family=_F.SCRIPT),

    # --- Paid, medium tier (11) ---
    _op("TEST_GENERATOR", _M, (4000, 2000), json_output=True,
        result_type="test", family=_F.QUIZ),
    _op("QUESTION_BANK", _M, (5000, 3000), json_output=True,
        result_type="test", family=_F.QUIZ),
    _op("PRESENTATION_MAKER", _M, (6000, 4500), json_output=True,
        result_type="presentation", family=_F.PRESENTATION),
    _op("REPORT_BUILDER", _M, (8000, 4000),
        result_type="report", family=_F.REPORT),
    _op("WORKFLOW_CONVERSION", _M, (5000, 2000)),
    _op("KEYWORD_INDEX_EXTRACTOR", _M, (6000, 1500),
        result_type="keywords"),
    _op("TRANSLATE_SIMPLIFY_ADVANCED", _M, (5000, 5000),
        result_type="translation", family=_F.TRANSLATION),
    _op("TABLE_TO_CHARTS", _M, (4000, 1500), json_output=True,
        result_type="chart_data"),
    _op("EXPLAIN_AS_TEACHER", _M, (6000, 3500), json_output=True,
        result_type="teacher_explanation", family=_F.TEACHING),
    _op("CONTENT_TO_SCRIPT", _M, (5000, 3000), json_output=True,
        result_type="script", family=_F.SCRIPT),
    _op("NOTES_TO_QUIZ_TURBO", _M, (5000, 3500), json_output=True,
        result_type="quiz_turbo", family=_F.QUIZ),

    # --- Paid, complex tier (8) ---
    _op("CONTRACT_LAW_SCAN", _C, (8000, 3000), json_output=True,
        result_type="legal_scan", family=_F.LEGAL),
    _op("MULTI_DOC_REASONING", _C, (10000, 3000), json_output=True,
        result_type="comparison", family=_F.QA),
    _op("INSIGHTS_EXTRACTION", _C, (5000, 1500), json_output=True,
        result_type="insights"),
    _op("TREND_ANALYSIS", _C, (6000, 2000), json_output=True,
        result_type="insights"),
    _op("AI_DETECTION_REDACTION", _C, (5000, 2000), json_output=True,
        result_type="ai_detection"),
    _op("CROSS_PDF_COMPARE", _C, (8000, 2000), json_output=True,
        result_type="comparison"),
    _op("DIAGRAM_INTERPRETATION", _C, (4000, 1500), json_output=True,
        result_type="insights"),
    _op("DOCUMENT_CHAT_MEMORY", _C, (6000, 1500), json_output=True,
        result_type="qa", family=_F.QA),
])

# Caps used for operations missing from the registry.
DEFAULT_CAPS = (2000, 1000)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_operation(operation: str) -> OperationDescriptor | None:
    """Look up an operation; None if it is not in the registry."""
    return OPERATION_REGISTRY.get(operation)


def resolve_operation(operation: str) -> OperationDescriptor:
    """
    Look up an operation, degrading unknown ids to a default descriptor
    (simple tier, default caps, paid-only, plain-text output).
    """
    descriptor = OPERATION_REGISTRY.get(operation)
    if descriptor is not None:
        return descriptor
    return OperationDescriptor(
        id=operation,
        tier=Tier.SIMPLE,
        input_cap=DEFAULT_CAPS[0],
        output_cap=DEFAULT_CAPS[1],
    )


def is_valid_operation(operation: str) -> bool:
    return operation in OPERATION_REGISTRY


def is_operation_allowed(operation: str, is_paid_user: bool) -> bool:
    """Paid users may run every known operation, free users only free ones."""
    descriptor = OPERATION_REGISTRY.get(operation)
    if descriptor is None:
        return False
    return is_paid_user or descriptor.free_allowed


def operations_for_tier(tier: Tier) -> list[str]:
    """All operation ids whose paid routing lands on ``tier``."""
    return [op for op, d in OPERATION_REGISTRY.items() if d.tier is tier]


def free_operations() -> list[str]:
    return [op for op, d in OPERATION_REGISTRY.items() if d.free_allowed]
