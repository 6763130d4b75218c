"""
Integrity validation: compare a modified content record against its original.

Three check families, each can be switched off:
- structure: per-tag count drift beyond +/-1, any heading or image count change (major)
- formatting: paragraph count drift beyond 20%, any list count change (minor)
- intent: body length drift beyond 30%, title rewritten beyond recognition (warnings)

Warnings never affect validity.
"""

from __future__ import annotations

import difflib
import logging
from typing import Callable

from content_fix.config import PreserverConfig
from content_fix.constants import IntegrityThresholds
from content_fix.services.correction.types import Content

from .types import (
    IntegrityWarning,
    StructuralProfile,
    ValidationResult,
    Violation,
    ViolationCategory,
    ViolationSeverity,
)

logger = logging.getLogger(__name__)

# (original, modified) -> similarity percentage in [0, 100]
SimilarityScorer = Callable[[str, str], float]


def sequence_similarity(original: str, modified: str) -> float:
    """Character-level similarity as a percentage (difflib ratio)."""
    if not original and not modified:
        return 100.0
    return difflib.SequenceMatcher(None, original, modified).ratio() * 100


def _pct(value: float) -> str:
    return f"{round(value * 100, 2)}%"


class IntegrityValidator:
    """
    Structural and intent comparison of two content records.

    Args:
        preserve_structure: Run the structure checks
        preserve_formatting: Run the formatting checks
        preserve_intent: Run the intent checks
        strict: When False, only major violations make a result invalid
        similarity: Title similarity scorer
        similarity_threshold: Changed titles scoring below this are flagged
    """

    def __init__(
        self,
        preserve_structure: bool = True,
        preserve_formatting: bool = True,
        preserve_intent: bool = True,
        strict: bool = True,
        similarity: SimilarityScorer = sequence_similarity,
        similarity_threshold: float = IntegrityThresholds.TITLE_SIMILARITY_MIN_PCT,
    ):
        self.preserve_structure = preserve_structure
        self.preserve_formatting = preserve_formatting
        self.preserve_intent = preserve_intent
        self.strict = strict
        self.similarity = similarity
        self.similarity_threshold = similarity_threshold

    @classmethod
    def from_config(cls, config: PreserverConfig, similarity: SimilarityScorer = sequence_similarity):
        return cls(
            preserve_structure=config.preserve_structure,
            preserve_formatting=config.preserve_formatting,
            preserve_intent=config.preserve_intent,
            strict=config.strict_validation,
            similarity=similarity,
            similarity_threshold=config.similarity_threshold,
        )

    # -------------------------------------------------------------------------
    # Check families
    # -------------------------------------------------------------------------

    def check_structure(self, original: StructuralProfile, modified: StructuralProfile) -> list[Violation]:
        violations = []

        for tag, count in original.tag_counts.items():
            modified_count = modified.tag_counts.get(tag, 0)
            if abs(modified_count - count) > IntegrityThresholds.TAG_COUNT_TOLERANCE:
                violations.append(
                    Violation(
                        type="structure_tag_count_changed",
                        category=ViolationCategory.STRUCTURE,
                        severity=ViolationSeverity.MAJOR,
                        original=count,
                        modified=modified_count,
                        tag=tag,
                    )
                )

        if original.heading_count != modified.heading_count:
            violations.append(
                Violation(
                    type="structure_heading_count_changed",
                    category=ViolationCategory.STRUCTURE,
                    severity=ViolationSeverity.MAJOR,
                    original=original.heading_count,
                    modified=modified.heading_count,
                )
            )

        if original.image_count != modified.image_count:
            violations.append(
                Violation(
                    type="structure_image_count_changed",
                    category=ViolationCategory.STRUCTURE,
                    severity=ViolationSeverity.MAJOR,
                    original=original.image_count,
                    modified=modified.image_count,
                )
            )

        return violations

    def check_formatting(self, original: StructuralProfile, modified: StructuralProfile) -> list[Violation]:
        violations = []

        if original.paragraph_count > 0:
            variation = abs(modified.paragraph_count - original.paragraph_count) / original.paragraph_count
            if variation > IntegrityThresholds.PARAGRAPH_DRIFT_MAX:
                violations.append(
                    Violation(
                        type="formatting_paragraph_count_changed",
                        category=ViolationCategory.FORMATTING,
                        severity=ViolationSeverity.MINOR,
                        original=original.paragraph_count,
                        modified=modified.paragraph_count,
                        detail=_pct(variation),
                    )
                )

        if original.list_count != modified.list_count:
            violations.append(
                Violation(
                    type="formatting_list_count_changed",
                    category=ViolationCategory.FORMATTING,
                    severity=ViolationSeverity.MINOR,
                    original=original.list_count,
                    modified=modified.list_count,
                )
            )

        return violations

    def check_intent(self, original: Content, modified: Content) -> list[IntegrityWarning]:
        warnings = []

        original_length = len(original.body)
        if original_length > 0:
            change = abs(len(modified.body) - original_length) / original_length
            if change > IntegrityThresholds.BODY_LENGTH_DRIFT_MAX:
                warnings.append(
                    IntegrityWarning(
                        type="intent_content_length_changed",
                        original=original_length,
                        modified=len(modified.body),
                        detail=_pct(change),
                    )
                )

        if original.title != modified.title:
            similarity = self.similarity(original.title, modified.title)
            if similarity < self.similarity_threshold:
                warnings.append(
                    IntegrityWarning(
                        type="intent_title_changed_significantly",
                        original=original.title,
                        modified=modified.title,
                        detail=f"{round(similarity, 2)}%",
                    )
                )

        return warnings

    # -------------------------------------------------------------------------
    # Full validation
    # -------------------------------------------------------------------------

    def validate(
        self,
        original: Content,
        modified: Content,
        original_profile: StructuralProfile,
        modified_profile: StructuralProfile,
    ) -> ValidationResult:
        violations: list[Violation] = []
        warnings: list[IntegrityWarning] = []

        if self.preserve_structure:
            violations.extend(self.check_structure(original_profile, modified_profile))
        if self.preserve_formatting:
            violations.extend(self.check_formatting(original_profile, modified_profile))
        if self.preserve_intent:
            warnings.extend(self.check_intent(original, modified))

        if self.strict:
            is_valid = not violations
        else:
            is_valid = not any(v.is_major for v in violations)

        return ValidationResult(
            is_valid=is_valid,
            violations=violations,
            warnings=warnings,
            structure_preserved=not any(v.category is ViolationCategory.STRUCTURE for v in violations),
            formatting_preserved=not any(v.category is ViolationCategory.FORMATTING for v in violations),
            intent_preserved=not warnings,
            original_profile=original_profile,
            modified_profile=modified_profile,
        )
