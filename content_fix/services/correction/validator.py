"""
Correction acceptance tests.

A correction is only accepted when it changed the content and, for issue types
with a measurable effect, moved that measurement toward the target. The tests
are a registry keyed by IssueType; anything without a registered test is
accepted once it differs from the original.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from content_fix.constants import CorrectionDefaults, ValidationDefaults

from .types import BatchValidation, Content, CorrectionPrompt, IssueType, PromptValidation

logger = logging.getLogger(__name__)

AcceptanceTest = Callable[[Content, Content, CorrectionPrompt], bool]


def _meta_length_closer(original: Content, corrected: Content, prompt: CorrectionPrompt) -> bool:
    target = (
        prompt.quantitative_target.target
        if prompt.quantitative_target
        else ValidationDefaults.META_DESCRIPTION_TARGET_CHARS
    )
    before = abs(len(original.meta_description) - target)
    after = abs(len(corrected.meta_description) - target)
    return after < before


def _title_shorter(original: Content, corrected: Content, prompt: CorrectionPrompt) -> bool:
    return len(corrected.title) < len(original.title)


def _body_changed(original: Content, corrected: Content, prompt: CorrectionPrompt) -> bool:
    # Density isn't recomputed here; a changed body is necessary, not sufficient
    return corrected.body != original.body


ACCEPTANCE_TESTS: dict[IssueType, AcceptanceTest] = {
    IssueType.META_DESCRIPTION_SHORT: _meta_length_closer,
    IssueType.META_DESCRIPTION_LONG: _meta_length_closer,
    IssueType.TITLE_TOO_LONG: _title_shorter,
    IssueType.KEYWORD_DENSITY_HIGH: _body_changed,
    IssueType.KEYWORD_DENSITY_LOW: _body_changed,
}


def register_acceptance_test(issue_type: IssueType, test: AcceptanceTest) -> None:
    """Register (or replace) the acceptance test for an issue type."""
    ACCEPTANCE_TESTS[issue_type] = test


def validate_single_correction(original: Content, corrected: Content, prompt: CorrectionPrompt) -> bool:
    """
    Decide whether one correction achieved its purpose.

    A no-op (identical canonical serialization) is never valid.
    """
    if original.canonical_json() == corrected.canonical_json():
        logger.debug(f"Correction for {prompt.issue_type.value} rejected: content unchanged")
        return False

    test = ACCEPTANCE_TESTS.get(prompt.issue_type)
    if test is None:
        return True

    accepted = test(original, corrected, prompt)
    if not accepted:
        logger.debug(f"Correction for {prompt.issue_type.value} rejected by acceptance test")
    return accepted


def validate_correction_success(
    original: Content,
    corrected: Content,
    prompts: Iterable[CorrectionPrompt],
) -> BatchValidation:
    """
    Validate a whole batch: each prompt is tested against the same
    original/final pair; the batch passes when at least half validate.
    """
    validations = [
        PromptValidation(issue_type=p.issue_type, valid=validate_single_correction(original, corrected, p))
        for p in prompts
    ]
    valid_count = sum(1 for v in validations if v.valid)
    success_rate = (valid_count / len(validations) * 100) if validations else 0.0

    return BatchValidation(
        success=success_rate >= CorrectionDefaults.BATCH_SUCCESS_RATE_MIN_PCT,
        success_rate=success_rate,
        validations=validations,
        message=f"{valid_count} of {len(validations)} corrections validated",
    )


class CorrectionValidator:
    """Object wrapper so the orchestrator can take a validator as a collaborator."""

    def validate_single(self, original: Content, corrected: Content, prompt: CorrectionPrompt) -> bool:
        return validate_single_correction(original, corrected, prompt)

    def validate_batch(
        self,
        original: Content,
        corrected: Content,
        prompts: Iterable[CorrectionPrompt],
    ) -> BatchValidation:
        return validate_correction_success(original, corrected, prompts)
