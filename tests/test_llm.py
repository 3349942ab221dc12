# =============================================================================
# Unit Tests — LLM Provider Adapters
# =============================================================================
#
# Covers the vendor-error translation and the factory. No network calls:
# provider clients are replaced with AsyncMocks.
# =============================================================================

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from docai.engine.errors import ProviderError, TransientProviderError
from docai.services.llm import (
    AnthropicProvider,
    OpenAICompatibleProvider,
    _translate_error,
    create_provider,
)
from helpers import run


class _StatusError(Exception):
    def __init__(self, status_code):
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


class TestTranslateError:
    @pytest.mark.parametrize("status", [408, 409, 429, 500, 503])
    def test_transient_statuses(self, status):
        error = _translate_error(_StatusError(status), "openai")
        assert isinstance(error, TransientProviderError)
        assert error.status_code == status

    @pytest.mark.parametrize("status", [400, 401, 403, 404])
    def test_non_transient_statuses(self, status):
        error = _translate_error(_StatusError(status), "openai")
        assert type(error) is ProviderError
        assert error.transient is False

    def test_connection_error_is_transient(self):
        error = _translate_error(ConnectionError("reset"), "anthropic")
        assert isinstance(error, TransientProviderError)
        assert error.provider == "anthropic"


class TestCreateProvider:
    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown provider type"):
            create_provider("bedrock", "model", "key")

    def test_missing_anthropic_key(self):
        with pytest.raises(ValueError, match="No Anthropic API key"):
            create_provider("anthropic", "claude-haiku-4-5", "")

    def test_missing_openai_key(self):
        with pytest.raises(ValueError, match="No API key"):
            create_provider("openai_compatible", "gpt-4o-mini", "")

    def test_builds_adapters(self):
        assert isinstance(
            create_provider("anthropic", "claude-haiku-4-5", "sk-test"), AnthropicProvider,
        )
        assert isinstance(
            create_provider("openai_compatible", "gpt-4o-mini", "sk-test"),
            OpenAICompatibleProvider,
        )


class TestAdapters:
    def test_anthropic_passes_system_as_kwarg(self):
        provider = AnthropicProvider(api_key="sk-test", model="claude-haiku-4-5")
        provider._client = SimpleNamespace(messages=SimpleNamespace(create=AsyncMock(
            return_value=SimpleNamespace(
                content=[SimpleNamespace(type="text", text="hello")],
                model="claude-haiku-4-5",
                usage=SimpleNamespace(input_tokens=10, output_tokens=2),
            )
        )))

        response = run(provider.generate(
            "prompt", system="be brief", max_output_tokens=50, temperature=0.2,
        ))

        kwargs = provider._client.messages.create.call_args.kwargs
        assert kwargs["system"] == "be brief"
        assert kwargs["max_tokens"] == 50
        assert response.text == "hello"
        assert response.input_tokens == 10

    def test_openai_puts_system_in_messages(self):
        provider = OpenAICompatibleProvider(api_key="sk-test", model="gpt-4o-mini")
        provider._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(
            create=AsyncMock(return_value=SimpleNamespace(
                choices=[SimpleNamespace(message=SimpleNamespace(content="hi"))],
                model="gpt-4o-mini",
                usage=None,
            ))
        )))

        response = run(provider.generate(
            "prompt", system="be brief", max_output_tokens=50, temperature=0.2,
        ))

        messages = provider._client.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "be brief"}
        assert response.text == "hi"
        assert response.input_tokens is None

    def test_vendor_error_is_translated(self):
        provider = OpenAICompatibleProvider(api_key="sk-test", model="gpt-4o-mini")
        provider._errors = (_StatusError,)
        provider._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(
            create=AsyncMock(side_effect=_StatusError(429)),
        )))

        with pytest.raises(TransientProviderError):
            run(provider.generate("p", max_output_tokens=5, temperature=0.0))
