# content_fix/llm/__init__.py
"""
Generation backend abstraction layer.

Usage:
    from content_fix.llm import build_provider_chain, get_llm_provider

    provider = get_llm_provider("openai", model="gpt-4o-mini")
    text = provider.generate(prompt, GenerationOptions(temperature=0.3))

    providers = build_provider_chain()  # default provider first, then backups
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from content_fix.config import Settings, get_settings
from content_fix.llm.base import GenerationOptions, LLMProvider
from content_fix.llm.mock_provider import MockProvider
from content_fix.services.resilience import ProviderConfigError

logger = logging.getLogger(__name__)

__all__ = [
    "GenerationOptions",
    "LLMProvider",
    "MockProvider",
    "build_provider_chain",
    "get_llm_provider",
]

AVAILABLE_PROVIDERS = ("groq", "openai", "anthropic", "gemini", "mock")


def get_llm_provider(
    provider_name: Optional[str] = None,
    **kwargs,
) -> LLMProvider:
    """
    Factory function to get a generation backend instance.

    Args:
        provider_name: Provider to use ('groq', 'openai', 'anthropic', 'gemini', 'mock').
                      If not provided, uses DEFAULT_PROVIDER env var (default: 'groq')
        **kwargs: Additional arguments passed to the provider constructor

    Returns:
        Configured LLMProvider instance

    Raises:
        ProviderConfigError: Unknown provider or missing credentials

    Example:
        provider = get_llm_provider()  # Uses default
        provider = get_llm_provider("anthropic", model="claude-sonnet-4-5")
    """
    name = provider_name or os.getenv("DEFAULT_PROVIDER", "groq")
    name = name.lower().strip()

    if name == "openai":
        from content_fix.llm.openai_provider import OpenAIProvider

        return OpenAIProvider(**kwargs)

    if name == "groq":
        from content_fix.llm.openai_provider import GroqProvider

        return GroqProvider(**kwargs)

    if name == "anthropic":
        from content_fix.llm.anthropic_provider import AnthropicProvider

        return AnthropicProvider(**kwargs)

    if name == "gemini":
        from content_fix.llm.gemini_provider import GeminiProvider

        return GeminiProvider(**kwargs)

    if name == "mock":
        return MockProvider(**kwargs)

    raise ProviderConfigError(
        f"Unknown LLM provider: {name}. Available: {', '.join(AVAILABLE_PROVIDERS)}"
    )


def _provider_kwargs(name: str, settings: Settings, timeout: float) -> dict:
    """Constructor arguments for a provider, taken from settings."""
    if name == "openai":
        return {"api_key": settings.OPENAI_API_KEY, "model": settings.OPENAI_MODEL, "timeout": timeout}
    if name == "groq":
        return {"api_key": settings.GROQ_API_KEY, "model": settings.GROQ_MODEL, "timeout": timeout}
    if name == "anthropic":
        return {"api_key": settings.ANTHROPIC_API_KEY, "model": settings.ANTHROPIC_MODEL, "timeout": timeout}
    if name == "gemini":
        api_key = settings.GEMINI_API_KEY or settings.GOOGLE_API_KEY
        return {"api_key": api_key, "model": settings.GEMINI_MODEL, "timeout": timeout}
    return {}


def build_provider_chain(
    settings: Optional[Settings] = None,
    timeout: Optional[float] = None,
) -> list[LLMProvider]:
    """
    Resolve the ordered list of usable providers.

    Order is the default provider followed by the backups, de-duplicated.
    Unknown, disabled, or credential-less providers are skipped here, at
    initialization, never at call time.

    Args:
        settings: Settings to read; defaults to the cached environment settings
        timeout: Per-call timeout; defaults to CORRECTION_TIMEOUT_SECONDS

    Returns:
        Providers in failover order (possibly empty)
    """
    settings = settings or get_settings()
    timeout = float(timeout if timeout is not None else settings.CORRECTION_TIMEOUT_SECONDS)

    providers: list[LLMProvider] = []
    for name in settings.provider_order:
        if name in settings.disabled_providers:
            logger.info(f"Skipping disabled provider: {name}")
            continue
        if name not in AVAILABLE_PROVIDERS:
            logger.warning(f"Skipping unknown provider: {name}")
            continue

        try:
            provider = get_llm_provider(name, **_provider_kwargs(name, settings, timeout))
        except ProviderConfigError as e:
            logger.warning(f"Skipping provider {name}: {e}")
            continue

        logger.info(f"Initialized provider: {name} ({provider.model_name})")
        providers.append(provider)

    if not providers:
        logger.error("No generation providers available; every correction will fail")

    return providers
