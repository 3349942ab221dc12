# =============================================================================
# Request Models — Pydantic V2 Schemas
# =============================================================================
#
# ExecutionRequest is both the body of POST /document-ai/execute and the
# input of DocumentAIService.execute(). Options are validated against the
# closed model of the operation's family before the request reaches the
# engine, so unknown or mistyped option keys are rejected here (422).
# =============================================================================

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, model_validator

from docai.models.options import BaseOptions, options_model_for


class ExecutionRequest(BaseModel):
    """
    Request body for POST /document-ai/execute.

    Example:
        {
            "operation": "FLASHCARDS",
            "content": "Photosynthesis converts light energy ...",
            "options": {"card_count": 8, "include_hints": false},
            "is_paid_user": false
        }
    """

    operation: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Operation id from GET /document-ai/operations",
        examples=["SUMMARY_SHORT"],
    )
    content: str = Field(
        ...,
        min_length=1,
        description="Plain text already extracted from the document",
    )
    # Validated against the family model of `operation` (see below).
    options: SerializeAsAny[BaseOptions] = Field(default_factory=BaseOptions)
    is_paid_user: bool = False
    user_id: str | None = None
    document_id: str | None = None

    # Set when the content is one part of a split large document.
    part_number: int | None = Field(default=None, ge=1)
    total_parts: int | None = Field(default=None, ge=1)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "operation": "SUMMARY_SHORT",
                    "content": "Quarterly revenue grew 12% on strong services demand ...",
                    "is_paid_user": False,
                },
                {
                    "operation": "CONTRACT_LAW_SCAN",
                    "content": "This Services Agreement is entered into by ...",
                    "options": {"jurisdiction": "England and Wales", "risk_focus": "high"},
                    "is_paid_user": True,
                },
            ]
        }
    )

    @model_validator(mode="before")
    @classmethod
    def _validate_options_for_family(cls, data: Any) -> Any:
        """Validate options with the model of the operation's family."""
        if not isinstance(data, dict):
            return data
        options = data.get("options")
        model = options_model_for(str(data.get("operation", "")))
        if isinstance(options, BaseModel):
            if type(options) is model:
                return data
            # Built for another family: re-check the fields that were set.
            options = options.model_dump(exclude_unset=True)
        data = {**data, "options": model.model_validate(options or {})}
        return data

    @model_validator(mode="after")
    def _check_part_range(self) -> ExecutionRequest:
        if self.part_number is not None:
            if self.total_parts is None:
                raise ValueError("part_number requires total_parts")
            if self.part_number > self.total_parts:
                raise ValueError("part_number cannot exceed total_parts")
        return self
