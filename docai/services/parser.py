# =============================================================================
# Structured Output Parser — Raw Model Text → Tagged Result
# =============================================================================
#
# Converts a model's raw answer into a StructuredResult when the operation's
# output is JSON-shaped:
#   1. Strip leading/trailing Markdown code fences (```json ... ```)
#   2. json.loads() the remainder; it must be a JSON object
#   3. Tag it with `type` from the operation registry; field values are
#      kept whatever their JSON type
#
# DESIGN DECISION: Parsing never fails a request. A malformed answer is
# logged and yields None; the raw text is still returned to the caller.
# =============================================================================

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from docai.engine.errors import StructuredOutputError
from docai.models.options import BaseOptions
from docai.models.results import StructuredResult, structured_result_adapter
from docai.services.operations import OperationDescriptor

logger = logging.getLogger(__name__)

_OPENING_FENCE = re.compile(r"^```[a-zA-Z]*[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\n?```$")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def wants_structured_output(
    descriptor: OperationDescriptor,
    options: BaseOptions | None = None,
) -> bool:
    """JSON-shaped operations always parse; others only when format=json."""
    if descriptor.result_type is None:
        return False
    return descriptor.json_output or (
        options is not None and options.format == "json"
    )


def strip_code_fences(text: str) -> str:
    text = text.strip()
    text = _OPENING_FENCE.sub("", text, count=1)
    text = _CLOSING_FENCE.sub("", text, count=1)
    return text.strip()


def parse_structured_output(
    text: str,
    result_type: str | None,
    operation: str = "",
) -> StructuredResult | None:
    """
    Parse ``text`` into the result model tagged ``result_type``.

    Returns None (after logging a warning) when the text is not a JSON
    object or does not fit the result model.
    """
    if result_type is None:
        return None
    try:
        return _parse(text, result_type)
    except StructuredOutputError as e:
        logger.warning(
            "Failed to parse structured output for %s (%s): %s",
            operation or result_type, result_type, e,
        )
        return None


# ---------------------------------------------------------------------------
# Internal Helpers
# ---------------------------------------------------------------------------


def _parse(text: str, result_type: str) -> StructuredResult:
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise StructuredOutputError(f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise StructuredOutputError(
            f"expected a JSON object, got {type(data).__name__}"
        )

    # Fields are untyped, so only an unregistered result_type can fail here.
    try:
        return structured_result_adapter.validate_python(
            {**data, "type": result_type}
        )
    except ValidationError as e:
        raise StructuredOutputError(f"unknown result type {result_type!r}") from e
