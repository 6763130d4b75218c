# content_fix/llm/base.py
"""
Base interface for generation backends.
Allows swapping between Groq, OpenAI, Anthropic, Gemini, or a scripted mock.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GenerationOptions:
    """Options for a single generation request."""

    temperature: float = 0.3
    max_tokens: int = 4096
    system_prompt: Optional[str] = None


class LLMProvider(ABC):
    """Abstract base class for generation backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name (e.g., 'openai', 'groq')."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model being used (e.g., 'gpt-4o-mini')."""
        pass

    @abstractmethod
    def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: Full instruction text
            options: Temperature / token limits; provider defaults when omitted

        Returns:
            Raw response text

        Raises:
            GenerationError: On transport, timeout, rate limit or service failure
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model_name!r})"
