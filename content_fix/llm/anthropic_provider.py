# content_fix/llm/anthropic_provider.py
"""
Anthropic Claude generation backend.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import anthropic

from content_fix.llm.base import GenerationOptions, LLMProvider
from content_fix.llm.prompts import CORRECTION_SYSTEM_PROMPT
from content_fix.services.resilience import (
    LLMServiceError,
    ProviderConfigError,
    classify_provider_error,
)

logger = logging.getLogger(__name__)


class AnthropicProvider(LLMProvider):
    """Anthropic messages-API backend (Claude Haiku, Sonnet, etc.)."""

    MODELS = {
        "claude-haiku": "claude-haiku-4-5",
        "claude-sonnet": "claude-sonnet-4-5",
    }

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self._api_key:
            raise ProviderConfigError(
                "Anthropic API key required. Set ANTHROPIC_API_KEY env var or pass api_key."
            )

        model = model or os.getenv("ANTHROPIC_MODEL", "claude-haiku-4-5")
        self._model = self.MODELS.get(model, model)
        self._client = anthropic.Anthropic(api_key=self._api_key, timeout=timeout, max_retries=0)

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def model_name(self) -> str:
        return self._model

    def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str:
        options = options or GenerationOptions()
        try:
            response = self._client.messages.create(
                model=self._model,
                max_tokens=options.max_tokens,
                temperature=options.temperature,
                system=options.system_prompt or CORRECTION_SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as e:
            raise classify_provider_error(e, self.name) from e

        # Claude returns content blocks; only text blocks carry the answer
        text = "".join(block.text for block in response.content if getattr(block, "type", "") == "text")
        if not text.strip():
            raise LLMServiceError(f"anthropic: empty response from {self._model}")
        return text
