"""
Provider failover chain.

Tries each generation backend in order, up to `max_attempts` times per
backend with a fixed pause between attempts, until one attempt produces an
accepted result.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from content_fix.constants import CorrectionDefaults
from content_fix.llm.base import GenerationOptions, LLMProvider
from content_fix.logging_config import AuditLog, log_llm_call
from content_fix.services.resilience import ATTEMPT_FAILURES, GenerationError, classify_provider_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

NO_PROVIDERS_ERROR = "No generation providers available"


@dataclass
class FailoverOutcome(Generic[T]):
    """Result of running one request through the chain."""

    success: bool
    value: Optional[T] = None
    provider: Optional[str] = None
    attempts: int = 0
    last_error: Optional[str] = None


class ProviderFailoverChain:
    """
    Ordered generation backends with bounded retries and failover.

    Args:
        providers: Backends in failover order (already filtered at init)
        enable_failover: When False, only the first provider is tried
        retry_delay_seconds: Pause between attempts on the same provider
        audit: Audit log that receives attempt failures
        sleep: Delay function (patched in tests)
    """

    def __init__(
        self,
        providers: Sequence[LLMProvider],
        enable_failover: bool = True,
        retry_delay_seconds: float = CorrectionDefaults.RETRY_DELAY_SECONDS,
        audit: Optional[AuditLog] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.providers = list(providers)
        self.enable_failover = enable_failover
        self.retry_delay_seconds = retry_delay_seconds
        self.audit = audit if audit is not None else AuditLog(logger)
        self._sleep = sleep
        self.current_attempt = 0

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self.providers]

    def execute(
        self,
        request_text: str,
        max_attempts: int,
        handle_response: Callable[[Any, str], T],
        options: Optional[GenerationOptions] = None,
        call_type: str = "correction",
    ) -> FailoverOutcome[T]:
        """
        Run a request through the chain.

        Args:
            request_text: Full instruction sent to each backend
            max_attempts: Attempts per provider
            handle_response: Turns a raw response into the accepted value;
                raises CorrectionAttemptError to reject it
            options: Generation options passed to every backend call
            call_type: Label for call instrumentation

        Returns:
            FailoverOutcome; `last_error` holds the final failure message
        """
        if not self.providers:
            return FailoverOutcome(success=False, last_error=NO_PROVIDERS_ERROR)

        options = options or GenerationOptions()
        last_error: Optional[str] = None
        total_attempts = 0

        for provider in self.providers:
            for attempt in range(1, max_attempts + 1):
                self.current_attempt = attempt
                total_attempts += 1

                try:
                    try:
                        with log_llm_call(provider.name, provider.model_name, call_type):
                            raw = provider.generate(request_text, options)
                    except GenerationError:
                        raise
                    except Exception as e:
                        # Adapters outside content_fix.llm may leak raw SDK errors
                        raise classify_provider_error(e, provider.name) from e
                    value = handle_response(raw, provider.name)
                except ATTEMPT_FAILURES as e:
                    last_error = str(e)
                    self.audit.record(
                        "warning",
                        f"Correction attempt {attempt} failed with {provider.name}: {last_error}",
                        provider=provider.name,
                        attempt=attempt,
                    )
                else:
                    self.audit.record(
                        "info",
                        f"Correction successful with {provider.name} on attempt {attempt}",
                        provider=provider.name,
                        attempt=attempt,
                    )
                    return FailoverOutcome(
                        success=True,
                        value=value,
                        provider=provider.name,
                        attempts=total_attempts,
                    )

                if attempt < max_attempts and self.retry_delay_seconds > 0:
                    self._sleep(self.retry_delay_seconds)

            if not self.enable_failover:
                break

        return FailoverOutcome(
            success=False,
            attempts=total_attempts,
            last_error=last_error or "All correction attempts failed",
        )
