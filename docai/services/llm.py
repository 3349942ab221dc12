# =============================================================================
# Multi-Provider LLM Abstraction — Pluggable AI Backend
# =============================================================================
#
# One narrow interface, `generate(prompt, ...) -> LLMResponse`, with two
# concrete adapters:
#   - AnthropicProvider        — Claude via the native Anthropic SDK
#   - OpenAICompatibleProvider — any OpenAI-compatible API (OpenAI itself,
#                                Gemini and Mistral via their compatible
#                                endpoints, DeepSeek, Qwen, ...)
#
# Routing and execution depend only on the LLMProvider protocol, never on
# vendor SDK types. Vendor exceptions are translated into the engine's
# ProviderError / TransientProviderError at this boundary.
#
# DESIGN DECISION: SDK-level retries are disabled (max_retries=0). The
# resilient executor owns retry, backoff, timeout and fallback; stacking
# SDK retries underneath would multiply attempts and hide failures from
# the per-tier error counters.
#
# ARCHITECTURE:
#   LLMProvider (Protocol)
#   ├── AnthropicProvider        — system prompt as top-level kwarg
#   ├── OpenAICompatibleProvider — system prompt as message role
#   └── create_provider()        — factory from (provider_type, model, ...)
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from docai.engine.errors import ProviderError, TransientProviderError

logger = logging.getLogger(__name__)

# HTTP statuses worth retrying: request timeout, conflict, rate limit.
_TRANSIENT_STATUSES = {408, 409, 429}


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass
class LLMResponse:
    """
    Standardised response from any LLM provider.

    Token counts are None when the provider did not report usage; the
    executor then falls back to the chars-per-token heuristic.
    """

    text: str
    model: str
    input_tokens: int | None = None
    output_tokens: int | None = None


# ---------------------------------------------------------------------------
# Protocol Definition
# ---------------------------------------------------------------------------


class LLMProvider(Protocol):
    """Interface every provider adapter implements."""

    async def generate(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_output_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        """
        Generate a completion for a single user prompt.

        Raises:
            TransientProviderError: timeout, rate limit, 5xx, network error.
            ProviderError: any other provider-side failure.
        """
        ...


# ---------------------------------------------------------------------------
# Error Translation
# ---------------------------------------------------------------------------


def _translate_error(exc: Exception, provider: str) -> ProviderError:
    """
    Map a vendor SDK exception onto the engine's taxonomy.

    Both SDKs expose `status_code` on HTTP errors; connection errors and
    client-side timeouts carry none and are always transient.
    """
    status = getattr(exc, "status_code", None)
    message = f"{provider}: {type(exc).__name__}: {exc}"
    if status is None or status in _TRANSIENT_STATUSES or status >= 500:
        return TransientProviderError(message, provider=provider, status_code=status)
    return ProviderError(message, provider=provider, status_code=status)


# ---------------------------------------------------------------------------
# Implementation 1: Anthropic (Claude)
# ---------------------------------------------------------------------------


class AnthropicProvider:
    """
    Anthropic Claude provider using the native async SDK.

    KEY API DIFFERENCE: Anthropic takes the system prompt as a top-level
    `system=` kwarg, NOT as a message with role "system".
    """

    provider_type = "anthropic"

    def __init__(self, api_key: str, model: str, base_url: str | None = None) -> None:
        import anthropic

        if not api_key:
            raise ValueError(
                "No Anthropic API key configured. Set DOCAI_ANTHROPIC_API_KEY in .env"
            )

        client_kwargs: dict = {"api_key": api_key, "max_retries": 0}
        if base_url:
            client_kwargs["base_url"] = base_url

        self._errors = (anthropic.APIError,)
        self._client = anthropic.AsyncAnthropic(**client_kwargs)
        self._model = model

        logger.info("Initialized AnthropicProvider (model=%s)", self._model)

    async def generate(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_output_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        """Generate a completion using Claude."""
        kwargs: dict = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_output_tokens,
            "temperature": temperature,
        }
        if system:
            kwargs["system"] = system

        try:
            response = await self._client.messages.create(**kwargs)
        except self._errors as e:
            raise _translate_error(e, "anthropic") from e

        # Concatenate all text blocks
        text = "".join(
            block.text for block in response.content if block.type == "text"
        )
        usage = response.usage

        return LLMResponse(
            text=text,
            model=response.model or self._model,
            input_tokens=usage.input_tokens if usage else None,
            output_tokens=usage.output_tokens if usage else None,
        )


# ---------------------------------------------------------------------------
# Implementation 2: OpenAI-Compatible (OpenAI, Gemini, Mistral, ...)
# ---------------------------------------------------------------------------


class OpenAICompatibleProvider:
    """
    Provider for any API that follows the OpenAI chat-completions spec.

    Switching vendors is a config change:
        DOCAI_SIMPLE_PROVIDER=openai_compatible
        DOCAI_SIMPLE_BASE_URL=https://generativelanguage.googleapis.com/v1beta/openai/
        DOCAI_SIMPLE_MODEL=gemini-2.0-flash
    """

    provider_type = "openai_compatible"

    def __init__(self, api_key: str, model: str, base_url: str | None = None) -> None:
        import openai

        if not api_key:
            raise ValueError(
                f"No API key configured for OpenAI-compatible model '{model}'. "
                "Set the matching DOCAI_*_API_KEY in .env"
            )

        client_kwargs: dict = {"api_key": api_key, "max_retries": 0}
        if base_url:
            client_kwargs["base_url"] = base_url

        self._errors = (openai.APIError,)
        self._client = openai.AsyncOpenAI(**client_kwargs)
        self._model = model

        logger.info(
            "Initialized OpenAICompatibleProvider (model=%s, base_url=%s)",
            self._model,
            base_url or "https://api.openai.com/v1",
        )

    async def generate(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_output_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        """Generate a completion using an OpenAI-compatible API."""
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                max_tokens=max_output_tokens,
                temperature=temperature,
            )
        except self._errors as e:
            raise _translate_error(e, self._model) from e

        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""

        # Token counts: OpenAI uses different field names than Anthropic
        usage = response.usage
        return LLMResponse(
            text=text,
            model=response.model or self._model,
            input_tokens=usage.prompt_tokens if usage else None,
            output_tokens=usage.completion_tokens if usage else None,
        )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_KNOWN_PROVIDER_TYPES = {"anthropic", "openai_compatible"}


def create_provider(
    provider_type: str,
    model: str,
    api_key: str,
    base_url: str | None = None,
) -> AnthropicProvider | OpenAICompatibleProvider:
    """
    Create a provider adapter.

    Raises:
        ValueError: If provider_type is unknown or the API key is missing.
    """
    if provider_type not in _KNOWN_PROVIDER_TYPES:
        raise ValueError(
            f"Unknown provider type '{provider_type}'. "
            f"Supported types: {sorted(_KNOWN_PROVIDER_TYPES)}"
        )

    if provider_type == "anthropic":
        return AnthropicProvider(api_key=api_key, model=model, base_url=base_url)

    return OpenAICompatibleProvider(api_key=api_key, model=model, base_url=base_url)
