# =============================================================================
# Unit Tests — Structured Output Parser
# =============================================================================

from __future__ import annotations

import json
import logging

from docai.models.options import BaseOptions, SummaryOptions
from docai.models.results import (
    RESULT_TYPES,
    AIDetectionResult,
    FlashcardsResult,
    KeywordsResult,
    LegalScanResult,
)
from docai.services.operations import get_operation
from docai.services.parser import (
    parse_structured_output,
    strip_code_fences,
    wants_structured_output,
)

LEGAL_JSON = json.dumps({
    "documentType": "Services Agreement",
    "parties": ["Acme Ltd", "Globex plc"],
    "overallRisk": "high",
    "risks": [{"clause": "7.2", "severity": "high", "issue": "Uncapped liability"}],
    "summary": "One high-risk clause.",
})


class TestStripCodeFences:
    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_no_fence(self):
        assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'

    def test_inner_backticks_untouched(self):
        text = '{"code": "use ```x``` here"}'
        assert strip_code_fences(text) == text


class TestParseStructuredOutput:
    def test_plain_json(self):
        result = parse_structured_output(LEGAL_JSON, "legal_scan")
        assert isinstance(result, LegalScanResult)
        assert result.type == "legal_scan"
        assert result.overall_risk == "high"
        assert result.parties == ["Acme Ltd", "Globex plc"]

    def test_fenced_json_parses_identically(self):
        plain = parse_structured_output(LEGAL_JSON, "legal_scan")
        fenced = parse_structured_output(f"```json\n{LEGAL_JSON}\n```", "legal_scan")
        assert fenced == plain

    def test_type_comes_from_operation_not_model(self):
        text = json.dumps({"type": "summary", "cards": [{"front": "Q", "back": "A"}]})
        result = parse_structured_output(text, "flashcards")
        assert isinstance(result, FlashcardsResult)
        assert result.type == "flashcards"

    def test_unknown_fields_are_kept(self):
        text = json.dumps({"cards": [], "deckName": "Biology"})
        result = parse_structured_output(text, "flashcards")
        assert result.model_dump(by_alias=True)["deckName"] == "Biology"

    def test_malformed_json_returns_none_and_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="docai.services.parser"):
            result = parse_structured_output('{"cards": [', "flashcards", "FLASHCARDS")
        assert result is None
        assert "FLASHCARDS" in caplog.text

    def test_non_object_json_returns_none(self):
        assert parse_structured_output("[1, 2, 3]", "keywords") is None

    def test_keywords_as_plain_strings_are_kept(self):
        result = parse_structured_output(
            '{"keywords": ["revenue", "margin"]}', "keywords", "KEYWORD_EXTRACT",
        )
        assert isinstance(result, KeywordsResult)
        assert result.type == "keywords"
        assert result.keywords == ["revenue", "margin"]

    def test_score_as_string_is_kept(self):
        result = parse_structured_output(
            '{"overallScore": "85%", "verdict": "likely AI"}', "ai_detection",
        )
        assert isinstance(result, AIDetectionResult)
        assert result.overall_score == "85%"
        assert result.verdict == "likely AI"

    def test_any_object_shape_gets_the_operation_type(self):
        for result_type in RESULT_TYPES:
            text = json.dumps({"cards": "not a list", "totalMarks": "ten", "n": [1, {}]})
            result = parse_structured_output(text, result_type)
            assert result is not None, result_type
            assert result.type == result_type

    def test_unregistered_result_type_returns_none(self):
        assert parse_structured_output('{"a": 1}', "horoscope") is None

    def test_no_result_type_returns_none(self):
        assert parse_structured_output('{"a": 1}', None) is None

    def test_camel_case_round_trip(self):
        result = parse_structured_output(LEGAL_JSON, "legal_scan")
        dumped = result.model_dump(by_alias=True, exclude_none=True)
        assert dumped["overallRisk"] == "high"
        assert dumped["documentType"] == "Services Agreement"


class TestWantsStructuredOutput:
    def test_json_operation(self):
        assert wants_structured_output(get_operation("CONTRACT_LAW_SCAN"))

    def test_text_operation(self):
        assert not wants_structured_output(get_operation("SUMMARY_SHORT"), BaseOptions())

    def test_format_json_forces_parsing(self):
        descriptor = get_operation("SUMMARY_SHORT")
        assert wants_structured_output(descriptor, SummaryOptions(format="json"))

    def test_operation_without_result_type_never_parses(self):
        descriptor = get_operation("VOICE_MODE")
        assert not wants_structured_output(descriptor, BaseOptions(format="json"))
