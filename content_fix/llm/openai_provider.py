# content_fix/llm/openai_provider.py
"""
OpenAI generation backend, plus Groq through its OpenAI-compatible endpoint.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from openai import OpenAI

from content_fix.llm.base import GenerationOptions, LLMProvider
from content_fix.llm.prompts import CORRECTION_SYSTEM_PROMPT
from content_fix.services.resilience import (
    LLMServiceError,
    ProviderConfigError,
    classify_provider_error,
)

logger = logging.getLogger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


class OpenAIProvider(LLMProvider):
    """OpenAI chat-completions backend."""

    API_KEY_ENV = "OPENAI_API_KEY"
    MODEL_ENV = "OPENAI_MODEL"
    DEFAULT_MODEL = "gpt-4o-mini"
    BASE_URL: Optional[str] = None

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize the provider.

        Args:
            api_key: API key. If not provided, read from the provider's env var.
            model: Model to use. If not provided, read from env or use the default.
            timeout: Per-call timeout in seconds, enforced by the SDK client.

        Raises:
            ProviderConfigError: If no API key is available
        """
        self._api_key = api_key or os.getenv(self.API_KEY_ENV)
        if not self._api_key:
            raise ProviderConfigError(
                f"{self.name} API key required. Set {self.API_KEY_ENV} env var or pass api_key."
            )

        self._model = model or os.getenv(self.MODEL_ENV, self.DEFAULT_MODEL)
        # Retries are owned by the failover chain, not the SDK
        self._client = OpenAI(
            api_key=self._api_key,
            base_url=self.BASE_URL,
            timeout=timeout,
            max_retries=0,
        )

    @property
    def name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model

    def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str:
        """Make a chat completion request."""
        options = options or GenerationOptions()
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": options.system_prompt or CORRECTION_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=options.temperature,
                max_tokens=options.max_tokens,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            raise classify_provider_error(e, self.name) from e

        text = response.choices[0].message.content if response.choices else None
        if not text:
            raise LLMServiceError(f"{self.name}: empty response from {self._model}")
        return text


class GroqProvider(OpenAIProvider):
    """Groq backend (OpenAI-compatible API)."""

    API_KEY_ENV = "GROQ_API_KEY"
    MODEL_ENV = "GROQ_MODEL"
    DEFAULT_MODEL = "llama-3.3-70b-versatile"
    BASE_URL = GROQ_BASE_URL

    @property
    def name(self) -> str:
        return "groq"
