# =============================================================================
# Structured Results — Tagged Union Over Operation Output Shapes
# =============================================================================
#
# Every JSON-shaped operation produces one of these models, discriminated
# by the `type` field. The parser sets `type` from the operation registry
# (never from the model output), so the discriminator always matches the
# operation that produced the result.
#
# DESIGN DECISION: Permissive models (extra="allow", every field optional
# and untyped). LLM output drifts between calls: a keywords list may come
# back as strings or as objects, a score as 0.85 or "85%". Any JSON object
# is accepted as-is; the models name the fields clients look for and tag
# the result with its type. Field names are snake_case in Python and
# camelCase on the wire, which is what the prompt templates ask for.
# =============================================================================

from __future__ import annotations

from typing import Annotated, Any, Literal, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class _Result(BaseModel):
    model_config = ConfigDict(
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class SummaryResult(_Result):
    type: Literal["summary"] = "summary"
    summary: Any = None
    key_points: Any = None


class BulletSummaryResult(_Result):
    type: Literal["bullet_summary"] = "bullet_summary"
    bullets: Any = None


class KeywordsResult(_Result):
    type: Literal["keywords"] = "keywords"
    keywords: Any = None
    categories: Any = None


class FlashcardsResult(_Result):
    type: Literal["flashcards"] = "flashcards"
    cards: Any = None


class TestResult(_Result):
    __test__ = False  # not a pytest class

    type: Literal["test"] = "test"
    title: Any = None
    total_marks: Any = None
    questions: Any = None


class QuizTurboResult(_Result):
    type: Literal["quiz_turbo"] = "quiz_turbo"
    title: Any = None
    sections: Any = None
    case_studies: Any = None


class NotesResult(_Result):
    type: Literal["notes"] = "notes"
    title: Any = None
    sections: Any = None


class PresentationResult(_Result):
    type: Literal["presentation"] = "presentation"
    title: Any = None
    subtitle: Any = None
    slides: Any = None


class DefinitionsResult(_Result):
    type: Literal["definitions"] = "definitions"
    definitions: Any = None


class TeacherExplanationResult(_Result):
    type: Literal["teacher_explanation"] = "teacher_explanation"
    title: Any = None
    learning_objectives: Any = None
    sections: Any = None
    summary: Any = None


class ScriptResult(_Result):
    type: Literal["script"] = "script"
    title: Any = None
    script_type: Any = None
    sections: Any = None


class ReportResult(_Result):
    type: Literal["report"] = "report"
    title: Any = None
    executive_summary: Any = None
    sections: Any = None


class ComparisonResult(_Result):
    type: Literal["comparison"] = "comparison"
    documents: Any = None
    similarities: Any = None
    differences: Any = None
    synthesis: Any = None


class InsightsResult(_Result):
    type: Literal["insights"] = "insights"
    insights: Any = None
    summary: Any = None


class LegalScanResult(_Result):
    type: Literal["legal_scan"] = "legal_scan"
    document_type: Any = None
    parties: Any = None
    overall_risk: Any = None
    risks: Any = None
    missing_clauses: Any = None
    summary: Any = None


class AIDetectionResult(_Result):
    type: Literal["ai_detection"] = "ai_detection"
    overall_score: Any = None
    verdict: Any = None
    flagged_sections: Any = None


class TranslationResult(_Result):
    type: Literal["translation"] = "translation"
    translated_text: Any = None
    target_language: Any = None


class CleanupResult(_Result):
    type: Literal["cleanup"] = "cleanup"
    cleaned_text: Any = None
    changes: Any = None


class ChartDataResult(_Result):
    type: Literal["chart_data"] = "chart_data"
    charts: Any = None


class TopicBreakdownResult(_Result):
    type: Literal["topic_breakdown"] = "topic_breakdown"
    main_topic: Any = None
    topics: Any = None


class QAResult(_Result):
    type: Literal["qa"] = "qa"
    question: Any = None
    answer: Any = None
    confidence: Any = None
    citations: Any = None
    not_found: Any = None


StructuredResult = Annotated[
    Union[
        SummaryResult,
        BulletSummaryResult,
        KeywordsResult,
        FlashcardsResult,
        TestResult,
        QuizTurboResult,
        NotesResult,
        PresentationResult,
        DefinitionsResult,
        TeacherExplanationResult,
        ScriptResult,
        ReportResult,
        ComparisonResult,
        InsightsResult,
        LegalScanResult,
        AIDetectionResult,
        TranslationResult,
        CleanupResult,
        ChartDataResult,
        TopicBreakdownResult,
        QAResult,
    ],
    Field(discriminator="type"),
]

structured_result_adapter: TypeAdapter[StructuredResult] = TypeAdapter(StructuredResult)

RESULT_TYPES: frozenset[str] = frozenset(
    model.model_fields["type"].default
    for model in get_args(get_args(StructuredResult)[0])
)
