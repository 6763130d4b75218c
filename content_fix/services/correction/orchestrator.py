"""
Correction orchestrator: the top-level correction engine.

Applies correction prompts in priority order, one at a time, each through the
provider failover chain. A prompt that exhausts every provider is recorded as
failed and the batch moves on; nothing short of a programming error aborts a
batch.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import deque
from typing import Callable, Iterable, Optional, Sequence

from content_fix.config import CorrectorConfig
from content_fix.llm.base import GenerationOptions, LLMProvider
from content_fix.llm.prompts import CORRECTION_REQUEST_TEMPLATE, FOCUS_KEYWORD_LINE
from content_fix.logging_config import AuditLog, log_stage
from content_fix.services.resilience import CorrectionAttemptError

from .failover import ProviderFailoverChain
from .prompt_builder import sort_by_priority
from .response_parser import ResponseParser
from .types import (
    Content,
    CorrectionBatchResult,
    CorrectionHistoryEntry,
    CorrectionPrompt,
    FailedCorrection,
)
from .validator import CorrectionValidator

logger = logging.getLogger(__name__)

PARSE_FAILED = "Failed to parse correction response"
VALIDATION_FAILED = "Correction validation failed - changes not applied correctly"
FALLBACK_STRATEGY = "retry_with_simplified_prompt"


def build_correction_request(content: Content, prompt: CorrectionPrompt, focus_keyword: str = "") -> str:
    """Full instruction sent to a backend for one correction."""
    keyword_line = FOCUS_KEYWORD_LINE.format(keyword=focus_keyword) if focus_keyword else ""
    return CORRECTION_REQUEST_TEMPLATE.format(
        correction=prompt.prompt_text,
        title=content.title,
        meta_description=content.meta_description,
        body=content.body,
        keyword_line=keyword_line,
    )


class CorrectionOrchestrator:
    """
    Applies correction prompts to content with retry, failover and validation.

    Usage:
        orchestrator = CorrectionOrchestrator(providers=[MockProvider([...])])
        result = orchestrator.apply_corrections(content, prompts, "seo tips")
        result.corrections_applied, result.failed_corrections

    Args:
        providers: Backends in failover order; resolved from settings when None
        config: Orchestrator configuration
        parser: Response parser
        validator: Correction validator
        sleep: Delay function between attempts (patched in tests)
    """

    def __init__(
        self,
        providers: Optional[Sequence[LLMProvider]] = None,
        config: Optional[CorrectorConfig] = None,
        parser: Optional[ResponseParser] = None,
        validator: Optional[CorrectionValidator] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or CorrectorConfig()

        if providers is None:
            from content_fix.llm import build_provider_chain

            providers = build_provider_chain(timeout=self.config.timeout_seconds)

        self.parser = parser or ResponseParser()
        self.validator = validator or CorrectionValidator()
        self.audit = AuditLog(logger, level=self.config.log_level, capacity=self.config.history_capacity)
        self.chain = ProviderFailoverChain(
            providers,
            enable_failover=self.config.enable_provider_failover,
            retry_delay_seconds=self.config.retry_delay_seconds,
            audit=self.audit,
            sleep=sleep,
        )
        self.options = GenerationOptions(
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
        )

        self._history: deque[CorrectionHistoryEntry] = deque(maxlen=self.config.history_capacity)
        self._failures: deque[FailedCorrection] = deque(maxlen=self.config.history_capacity)

    # -------------------------------------------------------------------------
    # Applying corrections
    # -------------------------------------------------------------------------

    def apply_corrections(
        self,
        content: Content,
        prompts: Sequence[CorrectionPrompt],
        focus_keyword: str = "",
    ) -> CorrectionBatchResult:
        """
        Apply every prompt, highest priority first.

        Args:
            content: Content to correct (never mutated)
            prompts: Correction prompts, in any order
            focus_keyword: Keyword included in each correction request

        Returns:
            CorrectionBatchResult; `success` is True when at least one
            correction was applied
        """
        self.audit.record("info", f"Applying {len(prompts)} corrections")

        if not prompts:
            return CorrectionBatchResult(
                success=True,
                content=content,
                corrections_applied=0,
                history=list(self._history),
                message="No corrections needed",
            )

        original = content
        current = content
        applied = 0
        failed: list[FailedCorrection] = []

        with log_stage("correction_batch", trace_id=uuid.uuid4().hex[:12]):
            for prompt in sort_by_priority(prompts):
                self.audit.record(
                    "info",
                    f"Applying correction for: {prompt.issue_type.value}",
                    issue_type=prompt.issue_type.value,
                )

                outcome = self.chain.execute(
                    build_correction_request(current, prompt, focus_keyword),
                    prompt.max_attempts,
                    self._response_handler(current, prompt),
                    options=self.options,
                )

                if outcome.success:
                    current = outcome.value
                    applied += 1
                    self._history.append(
                        CorrectionHistoryEntry(
                            issue_type=prompt.issue_type,
                            success=True,
                            provider=outcome.provider or "unknown",
                        )
                    )
                else:
                    failure = FailedCorrection(
                        issue_type=prompt.issue_type,
                        error=outcome.last_error or "Unknown error",
                        prompt=prompt,
                    )
                    failed.append(failure)
                    self._failures.append(failure)
                    self.audit.record(
                        "warning",
                        f"Failed to apply correction for {prompt.issue_type.value}: {failure.error}",
                        issue_type=prompt.issue_type.value,
                    )

            validation = None
            if self.config.enable_correction_validation:
                validation = self.validator.validate_batch(original, current, prompts)
                if not validation.success:
                    self.audit.record("warning", f"Correction validation failed: {validation.message}")

        logger.info(
            f"Correction batch finished: {applied} applied, {len(failed)} failed",
            extra={
                "event": "correction_batch_complete",
                "corrections_applied": applied,
                "corrections_failed": len(failed),
            },
        )

        return CorrectionBatchResult(
            success=applied > 0,
            content=current,
            corrections_applied=applied,
            failed_corrections=failed,
            history=list(self._history),
            validation=validation,
            message=f"{applied} of {len(prompts)} corrections applied",
        )

    def _response_handler(self, current: Content, prompt: CorrectionPrompt):
        """Parse and validate one backend response against the running content."""

        def handle(raw, provider_name: str) -> Content:
            corrected = self.parser.parse(raw, current)
            if corrected is None:
                raise CorrectionAttemptError(PARSE_FAILED)
            if self.config.enable_correction_validation and not self.validator.validate_single(
                current, corrected, prompt
            ):
                raise CorrectionAttemptError(VALIDATION_FAILED)
            return corrected

        return handle

    # -------------------------------------------------------------------------
    # Failure handling and introspection
    # -------------------------------------------------------------------------

    def handle_correction_failures(self, failed: Iterable[FailedCorrection]) -> dict:
        """Choose a fallback strategy for each failed correction."""
        failed = list(failed)
        self.audit.record("info", f"Handling {len(failed)} failed corrections")
        strategies = [
            {"issue_type": f.issue_type.value, "strategy": FALLBACK_STRATEGY, "priority": "medium"}
            for f in failed
        ]
        return {
            "strategies": strategies,
            "message": "Fallback strategies determined for failed corrections",
        }

    def get_correction_history(self) -> list[CorrectionHistoryEntry]:
        return list(self._history)

    def get_error_log(self) -> list[dict]:
        return self.audit.entries()

    def clear_history(self) -> None:
        """Clear correction history, failure tally and audit log."""
        self._history.clear()
        self._failures.clear()
        self.audit.clear()

    def get_correction_stats(self) -> dict:
        """Totals, success rate and provider usage across batches since the last clear."""
        successful = sum(1 for entry in self._history if entry.success)
        failed = len(self._failures)
        total = successful + failed
        if total == 0:
            return {"status": "no_data"}

        provider_usage: dict[str, int] = {}
        for entry in self._history:
            provider_usage[entry.provider] = provider_usage.get(entry.provider, 0) + 1

        return {
            "status": "available",
            "total_corrections": total,
            "successful": successful,
            "failed": failed,
            "success_rate": successful / total * 100,
            "provider_usage": provider_usage,
        }

    @property
    def current_attempt(self) -> int:
        """Attempt number of the most recent backend call."""
        return self.chain.current_attempt
