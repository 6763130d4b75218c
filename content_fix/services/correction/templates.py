"""
Prompt template catalog.

One entry per IssueType: the instruction text, its base priority, whether a
quantitative target is computed, which content field supplies `{text}`, and
how many discrete edits the correction is estimated to need.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from content_fix.constants import PromptLimits
from .types import Issue, IssueType


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value >= 0:
        return int(value + 0.5)
    return -int(-value + 0.5)


# -----------------------------------------------------------------------------
# Change-count estimators (raw estimate; the builder clamps to >= 1)
# -----------------------------------------------------------------------------


def _density_changes(issue: Issue, difference: float) -> int:
    return round_half_up(difference / 100 * PromptLimits.ASSUMED_WORD_COUNT / 2)


def _transition_changes(issue: Issue, difference: float) -> int:
    return round_half_up(difference / 100 * PromptLimits.ASSUMED_SENTENCE_COUNT)


def _located_or(divisor: Optional[float]) -> Callable[[Issue, float], int]:
    """Number of locations when known, else difference / divisor (or 1)."""

    def estimate(issue: Issue, difference: float) -> int:
        if issue.locations:
            return len(issue.locations)
        if divisor is None:
            return 1
        return round_half_up(difference / divisor)

    return estimate


def _single_change(issue: Issue, difference: float) -> int:
    return 1


@dataclass(frozen=True)
class PromptTemplate:
    """
    Catalog entry for one issue type.

    Attributes:
        text: Instruction with `{placeholder}` fields
        base_priority: Priority before the severity boost (0-10)
        quantitative: Whether a QuantitativeTarget is computed
        metric_key: Metric name an oracle reports for this issue
        context_field: Content attribute rendered as `{text}`, if any
        estimate_changes: Raw estimate of discrete edits needed
    """

    text: str
    base_priority: int
    quantitative: bool
    metric_key: str
    context_field: Optional[str] = None
    estimate_changes: Callable[[Issue, float], int] = _single_change


PROMPT_TEMPLATES: dict[IssueType, PromptTemplate] = {
    IssueType.KEYWORD_DENSITY_HIGH: PromptTemplate(
        text=(
            "Reduce keyword '{keyword}' density from {current}% to {target}% by replacing "
            "{count} instances with synonyms or related terms. Focus on locations: {locations}"
        ),
        base_priority=9,
        quantitative=True,
        metric_key="keyword_density",
        estimate_changes=_density_changes,
    ),
    IssueType.KEYWORD_DENSITY_LOW: PromptTemplate(
        text=(
            "Increase keyword '{keyword}' density from {current}% to at least {target}% by "
            "naturally incorporating {count} more instances. Suggested locations: {locations}"
        ),
        base_priority=8,
        quantitative=True,
        metric_key="keyword_density",
        estimate_changes=_density_changes,
    ),
    IssueType.META_DESCRIPTION_SHORT: PromptTemplate(
        text=(
            "Expand meta description from {current} to {target} characters (add {diff} "
            "characters). Include keyword '{keyword}' and compelling call-to-action. Current: '{text}'"
        ),
        base_priority=10,
        quantitative=True,
        metric_key="meta_description_length",
        context_field="meta_description",
    ),
    IssueType.META_DESCRIPTION_LONG: PromptTemplate(
        text=(
            "Shorten meta description from {current} to {target} characters (remove {diff} "
            "characters). Keep keyword '{keyword}' and main message. Current: '{text}'"
        ),
        base_priority=7,
        quantitative=True,
        metric_key="meta_description_length",
        context_field="meta_description",
    ),
    IssueType.META_DESCRIPTION_NO_KEYWORD: PromptTemplate(
        text="Add focus keyword '{keyword}' to meta description naturally. Current: '{text}'",
        base_priority=6,
        quantitative=False,
        metric_key="meta_description_keyword",
        context_field="meta_description",
    ),
    IssueType.PASSIVE_VOICE_HIGH: PromptTemplate(
        text=(
            "Convert {count} passive voice sentences to active voice (reduce from {current}% "
            "to {target}%). Target sentences: {sentences}"
        ),
        base_priority=5,
        quantitative=True,
        metric_key="passive_voice_percentage",
        estimate_changes=_located_or(PromptLimits.PASSIVE_VOICE_DIVISOR),
    ),
    IssueType.SENTENCE_LENGTH_HIGH: PromptTemplate(
        text=(
            "Split {count} long sentences to reduce long sentence percentage from {current}% "
            "to {target}%. Target sentences: {sentences}"
        ),
        base_priority=3,
        quantitative=True,
        metric_key="long_sentence_percentage",
        estimate_changes=_located_or(PromptLimits.SENTENCE_LENGTH_DIVISOR),
    ),
    IssueType.TRANSITION_WORDS_LOW: PromptTemplate(
        text=(
            "Add transition words to increase from {current}% to {target}%. Add approximately "
            "{count} transition words like 'however', 'therefore', 'additionally', 'furthermore'."
        ),
        base_priority=2,
        quantitative=True,
        metric_key="transition_word_percentage",
        estimate_changes=_transition_changes,
    ),
    IssueType.TITLE_TOO_LONG: PromptTemplate(
        text=(
            "Shorten title from {current} to {target} characters (remove {diff} characters). "
            "Keep keyword '{keyword}' and main message. Current: '{text}'"
        ),
        base_priority=7,
        quantitative=True,
        metric_key="title_length",
        context_field="title",
    ),
    IssueType.TITLE_NO_KEYWORD: PromptTemplate(
        text="Add focus keyword '{keyword}' to title naturally. Keep under 66 characters. Current: '{text}'",
        base_priority=9,
        quantitative=False,
        metric_key="title_keyword",
        context_field="title",
    ),
    IssueType.SUBHEADING_KEYWORD_OVERUSE: PromptTemplate(
        text=(
            "Reduce keyword '{keyword}' usage in subheadings from {current}% to {target}%. "
            "Modify {count} headings: {headings}"
        ),
        base_priority=4,
        quantitative=True,
        metric_key="subheading_keyword_usage",
        estimate_changes=_located_or(PromptLimits.SUBHEADING_DIVISOR),
    ),
    IssueType.NO_IMAGES: PromptTemplate(
        text="Add at least one relevant image with descriptive alt text containing keyword '{keyword}'.",
        base_priority=6,
        quantitative=False,
        metric_key="image_count",
    ),
    IssueType.ALT_TEXT_NO_KEYWORD: PromptTemplate(
        text="Update {count} image alt text to include keyword '{keyword}'. Images: {images}",
        base_priority=3,
        quantitative=True,
        metric_key="alt_text_keyword",
        estimate_changes=_located_or(None),
    ),
}


def get_template(issue_type: IssueType | str) -> Optional[PromptTemplate]:
    """Template for an issue type, or None when none is registered."""
    parsed = IssueType.parse(issue_type)
    if parsed is None:
        return None
    return PROMPT_TEMPLATES.get(parsed)


def register_template(issue_type: IssueType, template: PromptTemplate) -> None:
    """Register (or replace) the template for an issue type."""
    if not 0 <= template.base_priority <= PromptLimits.MAX_PRIORITY:
        raise ValueError(f"base_priority must be within 0..{PromptLimits.MAX_PRIORITY}")
    PROMPT_TEMPLATES[issue_type] = template
