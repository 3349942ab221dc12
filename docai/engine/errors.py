# =============================================================================
# Error Taxonomy — Document AI Engine
# =============================================================================
#
#   DocumentAIError
#   ├── OperationValidationError  — bad / unknown / unauthorised operation.
#   │                               Raised at the API boundary, never retried.
#   ├── ProviderError             — a provider call failed (non-transient:
#   │   │                           auth, bad request). Skips straight to the
#   │   │                           fallback tier.
#   │   └── TransientProviderError — timeout, rate limit, 5xx. Retried with
#   │       │                         exponential backoff.
#   │       └── ProviderTimeoutError — per-attempt timeout elapsed.
#   ├── StructuredOutputError     — JSON-shaped output could not be parsed.
#   │                               Caught by the parser, never escapes it.
#   └── TerminalExecutionError    — routed tier AND fallback both failed.
#                                   The only failure callers of execute() see.
# =============================================================================

from __future__ import annotations


class DocumentAIError(Exception):
    """Base class for all engine errors."""


class OperationValidationError(DocumentAIError):
    """The request cannot be executed (unknown or unauthorised operation)."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


class ProviderError(DocumentAIError):
    """A provider call failed in a way that retrying will not fix."""

    transient = False

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class TransientProviderError(ProviderError):
    """A provider call failed in a way that may succeed on retry."""

    transient = True


class ProviderTimeoutError(TransientProviderError):
    """The provider did not answer within the per-attempt timeout."""


class StructuredOutputError(DocumentAIError):
    """Model output for a JSON-shaped operation was not valid JSON."""


class TerminalExecutionError(DocumentAIError):
    """
    All attempts failed: every retry on the routed tier plus the single
    fallback attempt. The original error is chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        tier: str,
        fallback_tier: str,
        retry_count: int,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.tier = tier
        self.fallback_tier = fallback_tier
        self.retry_count = retry_count
