"""
End-to-end content correction.

issues -> prompts -> corrections -> structure check (rollback on major
violations) -> optional effectiveness measurement.

Usage:
    from content_fix.services.content_pipeline import correct_content

    result = correct_content(content, issues, focus_keyword="seo tips")
    print(result.content.title, result.rolled_back)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from content_fix.config import CorrectorConfig, PreserverConfig, Settings
from content_fix.llm.base import LLMProvider
from content_fix.services.correction import (
    Content,
    CorrectionBatchResult,
    CorrectionOrchestrator,
    CorrectionPrompt,
    CorrectionPromptBuilder,
    Issue,
)
from content_fix.services.integrity import PreservationResult, StructurePreserver

logger = logging.getLogger(__name__)

# (content, focus_keyword) -> metric name -> value, e.g. {"title_length": 72}
MetricOracle = Callable[[Content, str], Mapping[str, float]]


@dataclass
class PipelineResult:
    """Outcome of one end-to-end correction run."""

    success: bool
    content: Content
    prompts: list[CorrectionPrompt]
    correction: CorrectionBatchResult
    preservation: Optional[PreservationResult] = None
    effectiveness: list[dict] = field(default_factory=list)

    @property
    def rolled_back(self) -> bool:
        return bool(self.preservation and self.preservation.rolled_back)

    def to_dict(self) -> dict[str, Any]:
        validation = self.preservation.validation if self.preservation else None
        batch = self.correction.validation
        return {
            "success": self.success,
            "content": self.content.to_dict(),
            "prompts": [p.to_dict() for p in self.prompts],
            "corrections_applied": self.correction.corrections_applied,
            "failed_corrections": [
                {"issue_type": f.issue_type.value, "error": f.error} for f in self.correction.failed_corrections
            ],
            "batch_validation": (
                {"success": batch.success, "success_rate": batch.success_rate, "message": batch.message}
                if batch
                else None
            ),
            "rolled_back": self.rolled_back,
            "integrity": (
                {
                    "is_valid": validation.is_valid,
                    "violations": [
                        {
                            "type": v.type,
                            "severity": v.severity.value,
                            "tag": v.tag,
                            "original": v.original,
                            "modified": v.modified,
                        }
                        for v in validation.violations
                    ],
                    "warnings": [{"type": w.type, "detail": w.detail} for w in validation.warnings],
                }
                if validation
                else None
            ),
            "effectiveness": self.effectiveness,
            "message": self.correction.message,
        }


class ContentCorrectionPipeline:
    """
    Builds prompts, applies corrections, and guards structure for one content item.

    One pipeline instance per worker; instances share no mutable state.

    Args:
        providers: Generation backends in failover order; resolved from settings when None
        corrector_config: Orchestrator configuration
        preserver_config: Structure preserver configuration
        metric_oracle: Optional metric source for effectiveness tracking
        sleep: Delay function between attempts (patched in tests)
    """

    def __init__(
        self,
        providers: Optional[Sequence[LLMProvider]] = None,
        corrector_config: Optional[CorrectorConfig] = None,
        preserver_config: Optional[PreserverConfig] = None,
        metric_oracle: Optional[MetricOracle] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.corrector_config = corrector_config or CorrectorConfig()
        self.preserver_config = preserver_config or PreserverConfig()
        self.metric_oracle = metric_oracle

        self.builder = CorrectionPromptBuilder(
            max_attempts=self.corrector_config.max_retry_attempts,
            min_improvement_threshold_percent=self.corrector_config.min_improvement_threshold_percent,
        )
        self.orchestrator = CorrectionOrchestrator(
            providers=providers,
            config=self.corrector_config,
            sleep=sleep,
        )
        self.preserver = StructurePreserver(self.preserver_config)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        providers: Optional[Sequence[LLMProvider]] = None,
        metric_oracle: Optional[MetricOracle] = None,
    ) -> ContentCorrectionPipeline:
        if providers is None:
            from content_fix.llm import build_provider_chain

            providers = build_provider_chain(settings)
        return cls(
            providers=providers,
            corrector_config=CorrectorConfig.from_settings(settings),
            preserver_config=PreserverConfig.from_settings(settings),
            metric_oracle=metric_oracle,
        )

    def run(self, content: Content, issues: Iterable[Issue], focus_keyword: str = "") -> PipelineResult:
        """
        Correct `content` for the given issues.

        Returns:
            PipelineResult; `content` is the original when nothing applied or
            when the corrections were rolled back
        """
        prompts = self.builder.build_all(issues, focus_keyword, content)
        logger.info(f"Built {len(prompts)} correction prompts")

        before_metrics = self.metric_oracle(content, focus_keyword) if self.metric_oracle else None

        correction = self.orchestrator.apply_corrections(content, prompts, focus_keyword)

        if correction.corrections_applied == 0:
            return PipelineResult(
                success=correction.success,
                content=content,
                prompts=prompts,
                correction=correction,
            )

        preservation = self.preserver.preserve_content(content, correction.content)
        if preservation.rolled_back:
            logger.warning(
                f"Corrections rolled back: {len(preservation.validation.major_violations)} major violation(s)",
                extra={"event": "corrections_rolled_back", "snapshot_id": preservation.snapshot_id},
            )

        effectiveness = []
        if before_metrics is not None and not preservation.rolled_back:
            effectiveness = self._measure_effectiveness(
                prompts, correction, before_metrics, preservation.content, focus_keyword
            )

        return PipelineResult(
            success=correction.success and not preservation.rolled_back,
            content=preservation.content,
            prompts=prompts,
            correction=correction,
            preservation=preservation,
            effectiveness=effectiveness,
        )

    def _measure_effectiveness(
        self,
        prompts: list[CorrectionPrompt],
        correction: CorrectionBatchResult,
        before_metrics: Mapping[str, float],
        final: Content,
        focus_keyword: str,
    ) -> list[dict]:
        after_metrics = self.metric_oracle(final, focus_keyword)
        failed_prompts = {id(f.prompt) for f in correction.failed_corrections}

        results = []
        for prompt in prompts:
            if id(prompt) in failed_prompts:
                continue
            outcome = self.builder.validate_prompt_effectiveness(prompt, before_metrics, after_metrics)
            results.append({"issue_type": prompt.issue_type.value, **outcome})
        return results


def correct_content(
    content: Content,
    issues: Iterable[Issue],
    focus_keyword: str = "",
    providers: Optional[Sequence[LLMProvider]] = None,
    metric_oracle: Optional[MetricOracle] = None,
    settings: Optional[Settings] = None,
) -> PipelineResult:
    """Convenience wrapper: build a pipeline from settings and run it once."""
    pipeline = ContentCorrectionPipeline.from_settings(
        settings=settings,
        providers=providers,
        metric_oracle=metric_oracle,
    )
    return pipeline.run(content, issues, focus_keyword)
