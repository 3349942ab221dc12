# =============================================================================
# Prompt Builder — Operation-Specific Instruction Templates
# =============================================================================
#
# Renders the instruction template for an operation over the (possibly
# truncated) document content. Templates are string.Template objects with
# $-placeholders so that the literal JSON braces in the output-format
# examples need no escaping.
#
# Each template follows the same pattern:
# 1. Role definition
# 2. Requirements (driven by the operation's options)
# 3. Output format (JSON schema for JSON-shaped operations)
# 4. The document, then an answer cue
#
# Post-processing appended to every prompt:
#   - "ADDITIONAL INSTRUCTIONS" block when custom_instructions is set
#   - response-language line when language is set and not English
#   - "part N of M" header when the content is one part of a split document
# =============================================================================

from __future__ import annotations

import logging
from string import Template

from docai.models.options import BaseOptions
from docai.services.operations import Tier

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Tier System Prompts
# ---------------------------------------------------------------------------

_JSON_RULE = (
    "When asked for JSON, return valid JSON only without markdown code blocks."
)

TIER_SYSTEM_PROMPTS: dict[Tier, str] = {
    Tier.SIMPLE: (
        "You are an expert document analysis assistant. Provide clear, "
        "accurate, and helpful responses. " + _JSON_RULE
    ),
    Tier.MEDIUM: (
        "You are a professional document intelligence assistant. Provide "
        "accurate, well-structured, and helpful responses. " + _JSON_RULE
    ),
    Tier.COMPLEX: (
        "You are a professional document intelligence assistant specialised "
        "in complex analysis, legal review, and multi-document reasoning. "
        "Provide thorough, accurate, and well-reasoned responses. " + _JSON_RULE
    ),
    Tier.FALLBACK: (
        "You are a reliable document analysis assistant. Follow the "
        "requested output format exactly. " + _JSON_RULE
    ),
}

_AUDIENCES = {
    "child": "a 5-year-old child could understand",
    "teenager": "a high school student could understand",
    "adult_beginner": "an adult with no background in this topic could understand",
    "general": "anyone could easily understand",
}


# ---------------------------------------------------------------------------
# Operation Templates
# ---------------------------------------------------------------------------

PROMPT_TEMPLATES: dict[str, Template] = {k: Template(v) for k, v in {

    # --- Free operations ---

    "SUMMARY_SHORT": """You are an expert summarizer. Create a concise 2-3 sentence summary that captures the essence of this document.

REQUIREMENTS:
- Maximum 3 sentences
- Include the main topic or purpose
- Mention key findings or conclusions
- Use clear, professional language

DOCUMENT:
$content

SUMMARY:""",

    "SUMMARY_BULLET": """You are an expert content analyst. Extract the most important points from this document as bullet points.

REQUIREMENTS:
- Exactly 5-7 bullet points
- Each point is one clear, complete sentence
- Order by importance (most important first)
- Cover different aspects of the document

DOCUMENT:
$content

KEY POINTS:""",

    "KEYWORD_EXTRACT": """You are a keyword extraction specialist. Identify the most important keywords and phrases in this document.

REQUIREMENTS:
- Extract 10-15 keywords or phrases
- Include single words and multi-word phrases
- Rate importance as high, medium or low
- Include named entities (people, places, organizations)

FORMAT (JSON):
{
  "keywords": [
    {"keyword": "term", "importance": "high|medium|low", "frequency": 3, "context": "brief context"}
  ],
  "categories": [
    {"name": "Category Name", "keywords": ["term1", "term2"]}
  ]
}

DOCUMENT:
$content

KEYWORDS (JSON):""",

    "DOCUMENT_CLEANUP": """You are a professional editor. Clean up this document while preserving its original meaning.

TASKS:
- Fix grammar, spelling and punctuation
- Improve sentence structure and clarity
- Remove redundant phrases
- Keep the original tone and every factual statement

DOCUMENT:
$content

CLEANED DOCUMENT:""",

    "FLASHCARDS": """You are an expert educator. Create $card_count study flashcards from this document.

REQUIREMENTS:
- Each card tests one specific concept
- Questions are clear and unambiguous; answers concise but complete
- $hints_rule
- Vary difficulty levels

FORMAT (JSON):
{
  "cards": [
    {"id": 1, "front": "Question or term", "back": "Answer or definition", "hint": "Optional hint", "difficulty": "easy|medium|hard", "topic": "Topic area"}
  ]
}

DOCUMENT:
$content

FLASHCARDS (JSON):""",

    "EXPLAIN_SIMPLE": """You are a master teacher who can explain anything simply. Explain this document in terms that $audience.

REQUIREMENTS:
- Use short sentences and everyday words
- $analogies_rule
- Start with the single most important idea
- End with a one-line takeaway

DOCUMENT:
$content

SIMPLE EXPLANATION:""",

    "EXTRACT_DEFINITIONS": """You are an expert lexicographer. Extract the important terms and their definitions from this document.

REQUIREMENTS:
- At most $max_definitions definitions
- Sort by $sort_definitions
- Definitions must reflect how the document uses each term
- $definition_examples_rule

FORMAT (JSON):
{
  "definitions": [
    {"term": "Term", "definition": "Clear definition", "example": "Optional example", "category": "Optional category"}
  ]
}

DOCUMENT:
$content

DEFINITIONS (JSON):""",

    # --- Paid, simple tier ---

    "SUMMARY_LONG": """You are a professional content analyst. Create a comprehensive $length summary of this document.

REQUIREMENTS:
- Open with a one-paragraph overview
- Cover every major section with its key points
- Preserve important figures, names and dates
- Close with the main conclusions

DOCUMENT:
$content

COMPREHENSIVE SUMMARY:""",

    "TRANSLATE_BASIC": """You are an expert translator. Translate this document to $target_language.

REQUIREMENTS:
- Preserve meaning, tone and formatting
- Keep proper nouns and technical terms accurate
- Do not add or omit information

DOCUMENT:
$content

TRANSLATION ($target_language):""",

    "NOTES_GENERATOR": """You are an expert note-taker and educator. Generate $detail_level study notes from this document using the $notes_structure structure.

REQUIREMENTS:
- Use clear headings and sub-points
- Highlight key terms and definitions
- $examples_rule
- End with a short recap of the main ideas

DOCUMENT:
$content

STUDY NOTES:""",

    "TOPIC_BREAKDOWN": """You are an expert content organizer. Break this document down into a clear topic hierarchy.

REQUIREMENTS:
- Identify the main topics and their subtopics
- Give each topic a one-sentence description
- Estimate the share of the document each main topic covers

FORMAT (JSON):
{
  "mainTopic": "Overall subject",
  "topics": [
    {"title": "Topic", "description": "What it covers", "coverage": 30, "subtopics": [{"title": "Subtopic", "description": "Details"}]}
  ]
}

DOCUMENT:
$content

TOPIC BREAKDOWN (JSON):""",

    "FILL_IN_BLANKS": """You are an expert educator. Create $question_count fill-in-the-blank exercises from this document.

REQUIREMENTS:
- Blank out one key term per sentence, marked as ______
- Difficulty: $difficulty
- $answer_key_rule

DOCUMENT:
$content

EXERCISES:""",

    "DOCUMENT_CLEANUP_ADVANCED": """You are a senior professional editor. Perform a comprehensive cleanup and enhancement of this document.

TASKS:
- Fix all language errors
- Restructure paragraphs for logical flow
- Add headings where they help navigation
- Standardise terminology and formatting
- Preserve every fact and the author's intent

DOCUMENT:
$content

ENHANCED DOCUMENT:""",

    "SUMMARIES_ADVANCED": """You are a senior business analyst. Create an executive summary suitable for senior stakeholders.

STRUCTURE:
1. Purpose (1-2 sentences)
2. Key findings (3-5 bullets)
3. Implications
4. Recommended next steps

DOCUMENT:
$content

EXECUTIVE SUMMARY:""",

    "VOICE_MODE": """You are a professional scriptwriter. Convert this document into a natural voice script for audio narration.

REQUIREMENTS:
- Conversational $script_tone tone, short sentences
- Spell out abbreviations and numbers the way they are spoken
- Mark natural pauses with [pause]
- Target length: about $target_duration minutes

DOCUMENT:
$content

VOICE SCRIPT:""",

    # --- Paid, medium tier ---

    "TEST_GENERATOR": """You are an expert test designer. Create a test with $question_count questions from this document.

REQUIREMENTS:
- Question type: $question_type
- Difficulty: $difficulty
- Every question is answerable from the document
- $answer_key_rule

FORMAT (JSON):
{
  "title": "Test title",
  "totalMarks": 50,
  "questions": [
    {"id": 1, "type": "mcq|short|long|fill_blank|true_false", "question": "Question text", "options": ["A", "B", "C", "D"], "correctAnswer": "Answer", "explanation": "Why", "marks": 2, "difficulty": "easy|medium|hard"}
  ]
}

DOCUMENT:
$content

TEST (JSON):""",

    "QUESTION_BANK": """You are an expert question paper designer. Create a question bank of $question_count questions from this document.

REQUIREMENTS:
- Mix of question types: $question_type
- Difficulty: $difficulty
- Group questions by topic
- $answer_key_rule

FORMAT (JSON):
{
  "title": "Question bank title",
  "questions": [
    {"id": 1, "type": "mcq|short|long|fill_blank|true_false", "question": "Question text", "options": [], "correctAnswer": "Answer", "topic": "Topic", "difficulty": "easy|medium|hard", "marks": 2}
  ]
}

DOCUMENT:
$content

QUESTION BANK (JSON):""",

    "PRESENTATION_MAKER": """You are a world-class presentation designer. Create a $template_style presentation of $slide_count slides from this document.

REQUIREMENTS:
- One clear message per slide, 3-5 bullets maximum
- Title slide first, summary slide last
- $speaker_notes_rule
- $infographics_rule

FORMAT (JSON):
{
  "title": "Presentation title",
  "subtitle": "Subtitle",
  "theme": "$template_style",
  "slides": [
    {"slideNumber": 1, "type": "title|content|chart|summary", "title": "Slide title", "bullets": ["Point"], "speakerNotes": "Notes", "visualSuggestion": "Optional visual"}
  ]
}

DOCUMENT:
$content

PRESENTATION (JSON):""",

    "REPORT_BUILDER": """You are a senior business analyst. Generate a professional $report_type report from this document.

STRUCTURE:
1. Title and executive summary
2. Background
3. Analysis with supporting evidence
4. Conclusions
5. $recommendations_rule

DOCUMENT:
$content

REPORT:""",

    "WORKFLOW_CONVERSION": """You are a process improvement specialist. Convert this document into a clear step-by-step workflow.

REQUIREMENTS:
- Numbered steps in execution order
- Name the responsible role for each step where the document says so
- Mark decision points and their branches
- List inputs and outputs of the whole workflow

DOCUMENT:
$content

WORKFLOW:""",

    "KEYWORD_INDEX_EXTRACTOR": """You are a professional indexer. Create a comprehensive keyword index for this document.

REQUIREMENTS:
- Alphabetical entries
- Sub-entries for related concepts
- Cross-references ("see also") between related entries
- Note the section where each entry appears, when identifiable

DOCUMENT:
$content

KEYWORD INDEX:""",

    "TRANSLATE_SIMPLIFY_ADVANCED": """You are an expert translator and simplifier. Translate this document to $target_language while making it accessible to a general audience.

REQUIREMENTS:
- Replace jargon with plain words, keeping the meaning
- Short sentences and clear structure
- Keep names, numbers and dates exact

DOCUMENT:
$content

SIMPLIFIED TRANSLATION ($target_language):""",

    "TABLE_TO_CHARTS": """You are a data visualization expert. Analyze the data in this document and recommend charts for it.

REQUIREMENTS:
- Identify every table or numeric series worth charting
- Pick the most suitable chart type for each
- Extract the data points exactly as written

FORMAT (JSON):
{
  "charts": [
    {"title": "Chart title", "chartType": "bar|line|pie|scatter|area", "description": "What it shows", "data": {"labels": ["A", "B"], "datasets": [{"label": "Series", "values": [1, 2]}]}, "insight": "Key takeaway"}
  ]
}

DOCUMENT:
$content

CHART DATA (JSON):""",

    "EXPLAIN_AS_TEACHER": """You are a world-class $subject_area teacher with decades of experience making complex topics accessible. Teach the content of this document using a $teaching_style style.

REQUIREMENTS:
- Start with learning objectives
- Build concepts step by step, from simple to advanced
- $formulas_rule
- $practice_rule
- $memory_aids_rule

FORMAT (JSON):
{
  "title": "Lesson title",
  "learningObjectives": ["Objective"],
  "sections": [
    {"title": "Section", "explanation": "Teaching text", "examples": ["Example"], "keyPoints": ["Point"]}
  ],
  "formulas": [{"name": "Formula", "expression": "E = mc^2", "explanation": "Meaning"}],
  "practiceProblems": [{"problem": "Problem", "solution": "Solution"}],
  "memoryAids": ["Mnemonic"],
  "summary": "Lesson summary"
}

DOCUMENT:
$content

LESSON (JSON):""",

    "CONTENT_TO_SCRIPT": """You are a professional content creator and scriptwriter. Convert this document into a $script_type script of about $target_duration minutes.

REQUIREMENTS:
- Hook in the first 10 seconds
- $script_tone tone throughout
- $timestamps_rule
- $b_roll_rule
- Close with a clear call to action

FORMAT (JSON):
{
  "title": "Script title",
  "scriptType": "$script_type",
  "estimatedDuration": "$target_duration minutes",
  "sections": [
    {"timestamp": "00:00", "title": "Hook", "narration": "Spoken text", "bRoll": "Optional visual", "notes": "Delivery notes"}
  ]
}

DOCUMENT:
$content

SCRIPT (JSON):""",

    "NOTES_TO_QUIZ_TURBO": """You are an expert assessment designer. Create a comprehensive multi-format quiz from this document.

REQUIREMENTS:
- $question_count questions in total across these formats: $quiz_types
- Difficulty: $difficulty
- $case_study_rule
- $answer_key_rule

FORMAT (JSON):
{
  "title": "Quiz title",
  "sections": [
    {"type": "mcq|true_false|short|fill_blank", "questions": [{"id": 1, "question": "Question", "options": [], "answer": "Answer", "explanation": "Why"}]}
  ],
  "caseStudies": [{"scenario": "Scenario", "questions": ["Question"], "modelAnswer": "Answer"}]
}

DOCUMENT:
$content

QUIZ (JSON):""",

    # --- Paid, complex tier ---

    "CONTRACT_LAW_SCAN": """You are an experienced legal analyst specialising in contract review. Review this contract under $jurisdiction law, reporting $risk_focus risks.

REQUIREMENTS:
- Identify the parties, contract type and key dates
- Flag risky or unusual clauses with severity and a recommendation
- List missing standard clauses
- This is an analysis aid, not legal advice

FORMAT (JSON):
{
  "documentType": "Contract type",
  "parties": ["Party"],
  "keyDates": [{"label": "Effective date", "date": "YYYY-MM-DD"}],
  "overallRisk": "high|medium|low",
  "risks": [
    {"clause": "Clause reference", "text": "Quoted text", "severity": "high|medium|low", "issue": "What is wrong", "recommendation": "Suggested change"}
  ],
  "missingClauses": ["Clause"],
  "summary": "Overall assessment",
  "disclaimer": "Not legal advice"
}

DOCUMENT:
$content

LEGAL SCAN (JSON):""",

    "MULTI_DOC_REASONING": """You are an expert analyst specialising in synthesising information across multiple sources. The content below may contain several documents.

TASK: $question

REQUIREMENTS:
- Identify agreements, contradictions and gaps between the sources
- Attribute every claim to its source
- Conclude with a synthesised answer

FORMAT (JSON):
{
  "documents": ["Document label"],
  "similarities": ["Point"],
  "differences": [{"aspect": "Aspect", "details": {"Document label": "Position"}}],
  "contradictions": ["Contradiction"],
  "synthesis": "Combined conclusion",
  "confidence": "high|medium|low"
}

DOCUMENTS:
$content

SYNTHESIS (JSON):""",

    "INSIGHTS_EXTRACTION": """You are a senior business intelligence analyst. Extract actionable insights from this document.

REQUIREMENTS:
- Each insight is specific, evidence-based and actionable
- Rate impact and confidence
- Separate opportunities from risks

FORMAT (JSON):
{
  "insights": [
    {"title": "Insight", "description": "Details", "evidence": "Supporting text", "impact": "high|medium|low", "confidence": "high|medium|low", "action": "Recommended action"}
  ],
  "opportunities": ["Opportunity"],
  "risks": ["Risk"],
  "summary": "Overall takeaway"
}

DOCUMENT:
$content

INSIGHTS (JSON):""",

    "TREND_ANALYSIS": """You are a trend analysis specialist. Analyze the patterns and trends in this document.

REQUIREMENTS:
- Identify upward, downward and cyclical trends with their evidence
- Note anomalies and turning points
- Give cautious, evidence-based projections

FORMAT (JSON):
{
  "insights": [
    {"title": "Trend", "direction": "up|down|stable|cyclical", "description": "Details", "evidence": "Data points", "impact": "high|medium|low"}
  ],
  "anomalies": ["Anomaly"],
  "projections": ["Projection"],
  "summary": "Overall trend picture"
}

DOCUMENT:
$content

TREND ANALYSIS (JSON):""",

    "AI_DETECTION_REDACTION": """You are an AI content detection specialist. Analyze this text and identify passages that are likely AI-generated.

REQUIREMENTS:
- Give an overall probability that the text is AI-generated (0-100)
- Flag individual passages with the indicators you relied on
- Suggest human-sounding rewrites for flagged passages
- Detection is probabilistic; state your confidence

FORMAT (JSON):
{
  "overallScore": 65,
  "verdict": "likely_ai|mixed|likely_human",
  "confidence": "high|medium|low",
  "flaggedSections": [
    {"text": "Passage", "score": 80, "indicators": ["Indicator"], "suggestedRewrite": "Rewrite"}
  ],
  "summary": "Explanation"
}

TEXT:
$content

DETECTION RESULT (JSON):""",

    "CROSS_PDF_COMPARE": """You are a document comparison specialist. Compare and contrast the documents below thoroughly.

REQUIREMENTS:
- Compare structure, key claims, figures and conclusions
- Note what each document covers that the other does not
- Give an overall similarity estimate (0-100)

FORMAT (JSON):
{
  "documents": ["Document label"],
  "similarityScore": 70,
  "similarities": ["Point"],
  "differences": [{"aspect": "Aspect", "details": {"Document label": "Position"}}],
  "uniqueContent": {"Document label": ["Point"]},
  "synthesis": "Overall comparison"
}

DOCUMENTS:
$content

COMPARISON (JSON):""",

    "DIAGRAM_INTERPRETATION": """You are a visual content analyst. Interpret the diagrams, charts and visual elements described in this document.

REQUIREMENTS:
- Describe what each visual shows
- Explain the relationships and data it conveys
- Extract the key insight from each visual

FORMAT (JSON):
{
  "insights": [
    {"title": "Visual", "description": "What it shows", "evidence": "Data or labels", "impact": "high|medium|low"}
  ],
  "summary": "What the visuals say together"
}

DOCUMENT:
$content

INTERPRETATION (JSON):""",

    "DOCUMENT_CHAT_MEMORY": """You are a helpful document assistant. Answer the question about this document accurately.

QUESTION: $question

RULES:
1. Answer only from the document
2. Quote the passages that support the answer
3. If the document does not contain the answer, set notFound to true
4. If uncertain, express your confidence level

FORMAT (JSON):
{
  "question": "The question asked",
  "answer": "Direct answer",
  "confidence": "high|medium|low",
  "citations": [{"text": "Relevant quote", "section": "Section name if known"}],
  "relatedQuestions": ["Follow-up question"],
  "notFound": false
}

DOCUMENT:
$content

ANSWER (JSON):""",
}.items()}

GENERIC_TEMPLATE = Template("""Process this document and perform the following operation: $operation

DOCUMENT:
$content

RESULT:""")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_prompt(
    operation: str,
    content: str,
    options: BaseOptions | None = None,
    part_number: int | None = None,
    total_parts: int | None = None,
) -> str:
    """
    Render the prompt for ``operation`` over ``content``.

    Unknown operations get a generic template (logged as a warning).
    """
    options = options or BaseOptions()
    template = PROMPT_TEMPLATES.get(operation)
    if template is None:
        logger.warning(
            "No specific prompt for operation %s, using generic template",
            operation,
        )
        template = GENERIC_TEMPLATE

    prompt = template.substitute(_template_params(operation, content, options))

    if part_number and total_parts and total_parts > 1:
        prompt = (
            f"NOTE: This is part {part_number} of {total_parts} of a larger "
            "document. Process only this part.\n\n" + prompt
        )

    if options.custom_instructions:
        prompt += f"\n\nADDITIONAL INSTRUCTIONS: {options.custom_instructions}"

    if options.language and options.language.lower() != "english":
        prompt += f"\n\nIMPORTANT: Provide the response in {options.language}."

    return prompt


def system_prompt_for(tier: Tier) -> str:
    return TIER_SYSTEM_PROMPTS[tier]


# ---------------------------------------------------------------------------
# Internal Helpers
# ---------------------------------------------------------------------------


def _opt(options: BaseOptions, name: str, default):
    """Read an option that only some families define."""
    value = getattr(options, name, None)
    return default if value is None else value


def _rule(flag: bool, yes: str, no: str) -> str:
    return yes if flag else no


def _template_params(operation: str, content: str, options: BaseOptions) -> dict:
    quiz_types = _opt(options, "quiz_types", None) or ["mcq", "true_false", "short"]
    return {
        "operation": operation,
        "content": content,
        "length": _opt(options, "length", "detailed"),
        "card_count": _opt(options, "card_count", 5),
        "hints_rule": _rule(
            _opt(options, "include_hints", True),
            "Include a helpful hint on each card",
            "Leave the hint field empty",
        ),
        "audience": _AUDIENCES.get(
            _opt(options, "target_audience", "general"), _AUDIENCES["general"],
        ),
        "analogies_rule": _rule(
            _opt(options, "use_analogies", True),
            "Use everyday analogies to explain abstract ideas",
            "Explain directly without analogies",
        ),
        "max_definitions": _opt(options, "max_definitions", 15),
        "sort_definitions": _opt(options, "sort_definitions", "importance").replace("_", " "),
        "definition_examples_rule": _rule(
            _opt(options, "include_examples_with_definitions", False),
            "Add a short usage example to each definition",
            "Examples are optional",
        ),
        "target_language": _opt(options, "target_language", "Hindi"),
        "detail_level": _opt(options, "detail_level", "detailed"),
        "notes_structure": _opt(options, "notes_structure", "outline"),
        "examples_rule": _rule(
            _opt(options, "include_examples", True),
            "Include a concrete example for each key concept",
            "Keep notes concise, without examples",
        ),
        "question_count": _opt(options, "question_count", 10),
        "question_type": _opt(options, "question_type", "mixed"),
        "difficulty": _opt(options, "difficulty", "mixed"),
        "answer_key_rule": _rule(
            _opt(options, "include_answer_key", True),
            "Include the correct answer and a short explanation for each question",
            "Do not include answers",
        ),
        "quiz_types": ", ".join(quiz_types),
        "case_study_rule": _rule(
            _opt(options, "include_case_studies", False),
            f"Add {_opt(options, 'case_study_count', 2)} case studies with model answers",
            "No case studies",
        ),
        "slide_count": _opt(options, "slide_count", 10),
        "template_style": _opt(options, "template_style", "professional"),
        "speaker_notes_rule": _rule(
            _opt(options, "include_speaker_notes", True),
            "Write speaker notes for every slide",
            "No speaker notes",
        ),
        "infographics_rule": _rule(
            _opt(options, "include_infographics", False),
            "Suggest an infographic or chart wherever data is presented",
            "Visual suggestions are optional",
        ),
        "report_type": _opt(options, "report_type", "analysis"),
        "recommendations_rule": _rule(
            _opt(options, "include_recommendations", True),
            "Recommendations with priorities",
            "Next steps (no recommendations section)",
        ),
        "subject_area": _opt(options, "subject_area", "subject"),
        "teaching_style": _opt(options, "teaching_style", "interactive"),
        "formulas_rule": _rule(
            _opt(options, "include_formulas", False),
            "Present every formula with a worked explanation",
            "Mention formulas only where essential",
        ),
        "practice_rule": _rule(
            _opt(options, "include_practice_problems", True),
            "Add practice problems with solutions",
            "No practice problems",
        ),
        "memory_aids_rule": _rule(
            _opt(options, "include_memory_aids", True),
            "Add mnemonics or memory aids for key facts",
            "No memory aids",
        ),
        "script_type": _opt(options, "script_type", "youtube"),
        "target_duration": _opt(options, "target_duration", 5),
        "script_tone": _opt(options, "script_tone", "educational"),
        "timestamps_rule": _rule(
            _opt(options, "include_timestamps", True),
            "Add a timestamp to every section",
            "No timestamps",
        ),
        "b_roll_rule": _rule(
            _opt(options, "include_b_roll_suggestions", False),
            "Suggest B-roll footage for each section",
            "No B-roll suggestions",
        ),
        "question": _opt(
            options, "question", "Summarise what this content says and how its parts relate.",
        ),
        "jurisdiction": _opt(options, "jurisdiction", "general"),
        "risk_focus": {"high": "high-severity", "medium": "medium and high severity"}.get(
            _opt(options, "risk_focus", "all"), "all",
        ),
    }
