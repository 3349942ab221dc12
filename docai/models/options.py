# =============================================================================
# Operation Options — Closed, Per-Family Pydantic Models
# =============================================================================
#
# Replaces a free-form options map with one model per operation family.
# Every family extends BaseOptions (the general knobs) and forbids unknown
# fields, so a typo such as "questoinCount" is a 422 at the API boundary
# instead of a silently ignored prompt parameter.
#
# The request model picks the family from the operation id (see
# OperationDescriptor.options_family) before validation.
# =============================================================================

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from docai.services.operations import OptionsFamily, resolve_operation


class BaseOptions(BaseModel):
    """General options accepted by every operation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    # May lower the operation's output cap, never raise it.
    max_output_tokens: int | None = Field(default=None, gt=0)
    language: str | None = Field(
        default=None, description="Response language (default: English)",
    )
    format: Literal["text", "json", "markdown"] | None = Field(
        default=None,
        description="'json' forces structured parsing for any operation",
    )
    custom_instructions: str | None = Field(default=None, max_length=2000)


class SummaryOptions(BaseOptions):
    length: Literal["short", "medium", "long"] | None = None


class QuizOptions(BaseOptions):
    question_count: int | None = Field(default=None, ge=1, le=100)
    question_type: Literal[
        "mcq", "short", "long", "fill_blank", "true_false", "mixed",
    ] | None = None
    difficulty: Literal["easy", "medium", "hard", "mixed"] | None = None
    include_answer_key: bool = True
    quiz_types: list[str] | None = None
    include_case_studies: bool = False
    case_study_count: int | None = Field(default=None, ge=1, le=10)


class FlashcardOptions(BaseOptions):
    card_count: int | None = Field(default=None, ge=1, le=50)
    include_hints: bool = True


class NotesOptions(BaseOptions):
    detail_level: Literal["brief", "detailed", "comprehensive"] | None = None
    include_examples: bool = True
    notes_structure: Literal[
        "outline", "cornell", "mindmap", "traditional",
    ] | None = None


class PresentationOptions(BaseOptions):
    slide_count: int | None = Field(default=None, ge=1, le=50)
    template_style: Literal[
        "professional", "academic", "creative", "minimal", "corporate",
    ] | None = None
    include_speaker_notes: bool = True
    include_infographics: bool = False
    color_theme: str | None = None


class ExplainOptions(BaseOptions):
    target_audience: Literal[
        "child", "teenager", "adult_beginner", "general",
    ] | None = None
    use_analogies: bool = True


class TeachingOptions(BaseOptions):
    teaching_style: Literal[
        "socratic", "lecture", "interactive", "storytelling",
    ] | None = None
    subject_area: str | None = None
    include_formulas: bool = False
    include_practice_problems: bool = True
    include_memory_aids: bool = True


class ScriptOptions(BaseOptions):
    script_type: Literal[
        "youtube", "podcast", "presentation", "explainer", "tutorial",
    ] | None = None
    target_duration: int | None = Field(
        default=None, ge=1, le=180, description="Minutes",
    )
    include_timestamps: bool = True
    include_b_roll_suggestions: bool = False
    script_tone: Literal[
        "professional", "casual", "educational", "entertaining",
    ] | None = None


class DefinitionOptions(BaseOptions):
    max_definitions: int | None = Field(default=None, ge=1, le=100)
    include_examples_with_definitions: bool = False
    sort_definitions: Literal[
        "alphabetical", "order_of_appearance", "importance",
    ] | None = None


class QAOptions(BaseOptions):
    question: str | None = Field(default=None, max_length=2000)


class TranslationOptions(BaseOptions):
    target_language: str | None = None


class ReportOptions(BaseOptions):
    report_type: Literal[
        "summary", "analysis", "research", "executive", "technical",
    ] | None = None
    include_recommendations: bool = True


class LegalOptions(BaseOptions):
    jurisdiction: str | None = None
    risk_focus: Literal["high", "medium", "all"] | None = None


OPTIONS_MODELS: dict[OptionsFamily, type[BaseOptions]] = {
    OptionsFamily.GENERAL: BaseOptions,
    OptionsFamily.SUMMARY: SummaryOptions,
    OptionsFamily.QUIZ: QuizOptions,
    OptionsFamily.FLASHCARDS: FlashcardOptions,
    OptionsFamily.NOTES: NotesOptions,
    OptionsFamily.PRESENTATION: PresentationOptions,
    OptionsFamily.EXPLAIN: ExplainOptions,
    OptionsFamily.TEACHING: TeachingOptions,
    OptionsFamily.SCRIPT: ScriptOptions,
    OptionsFamily.DEFINITIONS: DefinitionOptions,
    OptionsFamily.QA: QAOptions,
    OptionsFamily.TRANSLATION: TranslationOptions,
    OptionsFamily.REPORT: ReportOptions,
    OptionsFamily.LEGAL: LegalOptions,
}


def options_model_for(operation: str) -> type[BaseOptions]:
    """Options model for ``operation``; unknown operations get BaseOptions."""
    return OPTIONS_MODELS[resolve_operation(operation).options_family]
