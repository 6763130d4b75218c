# content_fix/llm/gemini_provider.py
"""
Google Gemini generation backend.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import google.generativeai as genai

from content_fix.llm.base import GenerationOptions, LLMProvider
from content_fix.llm.prompts import CORRECTION_SYSTEM_PROMPT
from content_fix.services.resilience import (
    LLMServiceError,
    ProviderConfigError,
    classify_provider_error,
)

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """Gemini backend via google-generativeai."""

    MODELS = {
        "gemini-2.0-flash": "gemini-2.0-flash",
        "gemini-1.5-flash": "gemini-1.5-flash",
    }

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self._api_key = api_key or os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
        if not self._api_key:
            raise ProviderConfigError(
                "Gemini API key required. Set GEMINI_API_KEY or GOOGLE_API_KEY env var or pass api_key."
            )

        model = model or os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
        self._model = self.MODELS.get(model, model)
        self._timeout = timeout
        genai.configure(api_key=self._api_key)

    @property
    def name(self) -> str:
        return "gemini"

    @property
    def model_name(self) -> str:
        return self._model

    def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str:
        options = options or GenerationOptions()
        try:
            model = genai.GenerativeModel(
                model_name=self._model,
                system_instruction=options.system_prompt or CORRECTION_SYSTEM_PROMPT,
                generation_config={
                    "temperature": options.temperature,
                    "max_output_tokens": options.max_tokens,
                    "response_mime_type": "application/json",
                },
            )
            response = model.generate_content(prompt, request_options={"timeout": self._timeout})
            text = response.text
        except Exception as e:
            raise classify_provider_error(e, self.name) from e

        if not text:
            raise LLMServiceError(f"gemini: empty response from {self._model}")
        return text
