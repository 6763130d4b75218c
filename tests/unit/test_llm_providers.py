"""
Unit tests for generation backends and provider chain resolution.

SDK clients are patched; no network calls are made.
"""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from content_fix.config import Settings
from content_fix.llm import build_provider_chain, get_llm_provider
from content_fix.llm.base import GenerationOptions
from content_fix.llm.mock_provider import MockProvider, echo_current_content
from content_fix.llm.prompts import CORRECTION_REQUEST_TEMPLATE
from content_fix.services.resilience import (
    LLMServiceError,
    LLMTimeoutError,
    ProviderConfigError,
)


@pytest.fixture
def no_api_keys(monkeypatch):
    for var in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GROQ_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY"):
        monkeypatch.delenv(var, raising=False)


class TestGetLLMProvider:
    """Tests for the provider factory."""

    def test_unknown_provider(self):
        with pytest.raises(ProviderConfigError, match="Unknown LLM provider"):
            get_llm_provider("llamalocal")

    def test_mock(self):
        provider = get_llm_provider("mock")
        assert isinstance(provider, MockProvider)
        assert provider.name == "mock"

    def test_default_from_env(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_PROVIDER", "MOCK")
        assert isinstance(get_llm_provider(), MockProvider)

    def test_missing_key(self, no_api_keys):
        with pytest.raises(ProviderConfigError, match="OPENAI_API_KEY"):
            get_llm_provider("openai")


class TestBuildProviderChain:
    """Tests for build_provider_chain."""

    def test_mock_only(self):
        chain = build_provider_chain(Settings(DEFAULT_PROVIDER="mock", BACKUP_PROVIDERS=""))
        assert [p.name for p in chain] == ["mock"]

    def test_skips_credentialless_and_unknown(self, no_api_keys):
        settings = Settings(
            DEFAULT_PROVIDER="openai",
            BACKUP_PROVIDERS="nonesuch,mock",
            OPENAI_API_KEY=None,
        )
        chain = build_provider_chain(settings)
        assert [p.name for p in chain] == ["mock"]

    def test_skips_disabled(self):
        settings = Settings(DEFAULT_PROVIDER="mock", DISABLED_PROVIDERS="mock")
        assert build_provider_chain(settings) == []

    def test_order_preserved(self):
        with patch("content_fix.llm.openai_provider.OpenAI") as client_cls:
            settings = Settings(
                DEFAULT_PROVIDER="groq",
                BACKUP_PROVIDERS="mock,openai",
                GROQ_API_KEY="gk",
                OPENAI_API_KEY="ok",
            )
            chain = build_provider_chain(settings, timeout=12)

        assert [p.name for p in chain] == ["groq", "mock", "openai"]
        timeouts = {c.kwargs["timeout"] for c in client_cls.call_args_list}
        assert timeouts == {12.0}


class TestMockProvider:
    """Tests for the scripted mock."""

    def test_scripted_responses_in_order(self):
        provider = MockProvider(["first", {"title": "x"}, lambda prompt: prompt.upper()])

        assert provider.generate("a") == "first"
        assert provider.generate("b") == {"title": "x"}
        assert provider.generate("c") == "C"
        assert provider.call_count == 3

    def test_raises_scripted_exception(self):
        provider = MockProvider([LLMTimeoutError("slow")])
        with pytest.raises(LLMTimeoutError):
            provider.generate("a")

    def test_records_options(self):
        provider = MockProvider(["x"])
        provider.generate("a", GenerationOptions(temperature=0.1))
        assert provider.options[0].temperature == 0.1

    def test_echoes_content_when_script_exhausted(self):
        prompt = CORRECTION_REQUEST_TEMPLATE.format(
            correction="Shorten the title.",
            title="My title",
            meta_description="My meta",
            body="<p>Body</p>",
            keyword_line="",
        )
        answer = json.loads(MockProvider().generate(prompt))
        assert answer == {"title": "My title", "meta_description": "My meta", "content": "<p>Body</p>"}

    def test_echo_without_content_block(self):
        assert echo_current_content("no content here") == "{}"

    def test_queue(self):
        provider = MockProvider()
        provider.queue("later")
        assert provider.generate("a") == "later"


class TestOpenAIProvider:
    """Tests for the OpenAI backend with a patched client."""

    def _response(self, text):
        message = SimpleNamespace(content=text)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    def test_generate(self):
        with patch("content_fix.llm.openai_provider.OpenAI") as client_cls:
            client = client_cls.return_value
            client.chat.completions.create.return_value = self._response('{"title": "t"}')

            provider = get_llm_provider("openai", api_key="k", model="gpt-test")
            text = provider.generate("fix it", GenerationOptions(temperature=0.2, max_tokens=100))

        assert text == '{"title": "t"}'
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["temperature"] == 0.2
        assert kwargs["max_tokens"] == 100
        assert kwargs["messages"][1] == {"role": "user", "content": "fix it"}
        assert client_cls.call_args.kwargs["max_retries"] == 0

    def test_sdk_error_classified(self):
        with patch("content_fix.llm.openai_provider.OpenAI") as client_cls:
            client_cls.return_value.chat.completions.create.side_effect = TimeoutError("read timed out")
            provider = get_llm_provider("openai", api_key="k")

            with pytest.raises(LLMTimeoutError, match="openai"):
                provider.generate("fix it")

    def test_empty_response(self):
        with patch("content_fix.llm.openai_provider.OpenAI") as client_cls:
            client_cls.return_value.chat.completions.create.return_value = self._response("")
            provider = get_llm_provider("openai", api_key="k")

            with pytest.raises(LLMServiceError):
                provider.generate("fix it")

    def test_groq_uses_compatible_endpoint(self):
        with patch("content_fix.llm.openai_provider.OpenAI") as client_cls:
            provider = get_llm_provider("groq", api_key="k")

        assert provider.name == "groq"
        assert "groq.com" in client_cls.call_args.kwargs["base_url"]


class TestAnthropicProvider:
    """Tests for the Anthropic backend with a patched client."""

    def test_generate_joins_text_blocks(self):
        with patch("content_fix.llm.anthropic_provider.anthropic.Anthropic") as client_cls:
            client = client_cls.return_value
            client.messages.create.return_value = SimpleNamespace(
                content=[
                    SimpleNamespace(type="text", text='{"title": '),
                    SimpleNamespace(type="tool_use"),
                    SimpleNamespace(type="text", text='"t"}'),
                ]
            )

            provider = get_llm_provider("anthropic", api_key="k", model="claude-haiku")
            text = provider.generate("fix it")

        assert text == '{"title": "t"}'
        assert provider.model_name == "claude-haiku-4-5"
        assert client.messages.create.call_args.kwargs["messages"] == [{"role": "user", "content": "fix it"}]

    def test_sdk_error_classified(self):
        with patch("content_fix.llm.anthropic_provider.anthropic.Anthropic") as client_cls:
            client_cls.return_value.messages.create.side_effect = RuntimeError("overloaded")
            provider = get_llm_provider("anthropic", api_key="k")

            with pytest.raises(LLMServiceError, match="anthropic: overloaded"):
                provider.generate("fix it")


class TestGeminiProvider:
    """Tests for the Gemini backend with the SDK patched."""

    def test_generate(self):
        with patch("content_fix.llm.gemini_provider.genai") as genai:
            model = MagicMock()
            model.generate_content.return_value = SimpleNamespace(text='{"title": "t"}')
            genai.GenerativeModel.return_value = model

            provider = get_llm_provider("gemini", api_key="k", timeout=7)
            text = provider.generate("fix it")

        assert text == '{"title": "t"}'
        genai.configure.assert_called_once_with(api_key="k")
        assert model.generate_content.call_args.kwargs["request_options"] == {"timeout": 7}
