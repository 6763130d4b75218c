"""
Correction prompt builder.

Turns detected issues into concrete, quantitative correction prompts and
tracks how effective each issue type's prompts turn out to be.

Usage:
    builder = CorrectionPromptBuilder()
    prompts = builder.build_all(issues, "seo tips", content)  # priority order
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Optional

from content_fix.constants import CorrectionDefaults, PromptLimits

from .templates import PROMPT_TEMPLATES, PromptTemplate
from .types import (
    Content,
    CorrectionAction,
    CorrectionPrompt,
    ExpectedChanges,
    Issue,
    IssueType,
    LocationRef,
    QuantitativeTarget,
)

logger = logging.getLogger(__name__)

# Share of the expected improvement a correction must reach to count as effective
EFFECTIVE_SHARE_OF_EXPECTED = 0.5


def _excerpt(text: str, limit: int) -> str:
    """Truncate to `limit` characters, marking truncation with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def _more_suffix(locations: tuple[LocationRef, ...]) -> str:
    extra = len(locations) - PromptLimits.MAX_RENDERED_LOCATIONS
    return f", +{extra} more" if extra > 0 else ""


def _quoted(text: str, limit: int) -> str:
    return f'"{_excerpt(text, limit)}"'


def _describe(loc: LocationRef) -> Optional[str]:
    """Render whichever detail a location carries."""
    if loc.sentence:
        return _quoted(loc.sentence, PromptLimits.SENTENCE_PREVIEW_CHARS)
    if loc.heading:
        return _quoted(loc.heading, PromptLimits.HEADING_PREVIEW_CHARS)
    if loc.alt_text:
        return f'alt="{_excerpt(loc.alt_text, PromptLimits.ALT_TEXT_PREVIEW_CHARS)}"'
    if loc.context:
        return _quoted(loc.context, PromptLimits.CONTEXT_PREVIEW_CHARS)
    if loc.position is not None:
        return f"position {loc.position}"
    return None


def _join_locations(
    locations: tuple[LocationRef, ...],
    render: Callable[[LocationRef], Optional[str]],
    empty: str,
) -> str:
    """
    Render up to MAX_RENDERED_LOCATIONS locations.

    Each location uses `render` first and `_describe` when that yields
    nothing; `empty` stands in when no location renders at all.
    """
    parts = []
    for loc in locations[: PromptLimits.MAX_RENDERED_LOCATIONS]:
        part = render(loc) or _describe(loc)
        if part:
            parts.append(part)
    if not parts:
        return empty
    return ", ".join(parts) + _more_suffix(locations)


def _context_or_position(loc: LocationRef) -> Optional[str]:
    if loc.context:
        return _quoted(loc.context, PromptLimits.CONTEXT_PREVIEW_CHARS)
    if loc.position is not None:
        return f"position {loc.position}"
    return None


def _image(loc: LocationRef) -> Optional[str]:
    if loc.alt_text:
        return f'alt="{_excerpt(loc.alt_text, PromptLimits.ALT_TEXT_PREVIEW_CHARS)}"'
    if loc.position is not None:
        return f"image at position {loc.position}"
    return None


def format_locations(locations: tuple[LocationRef, ...]) -> str:
    return _join_locations(locations, _context_or_position, "throughout content")


def format_sentences(locations: tuple[LocationRef, ...]) -> str:
    return _join_locations(
        locations,
        lambda loc: _quoted(loc.sentence, PromptLimits.SENTENCE_PREVIEW_CHARS) if loc.sentence else None,
        "identified sentences",
    )


def format_headings(locations: tuple[LocationRef, ...]) -> str:
    return _join_locations(
        locations,
        lambda loc: _quoted(loc.heading, PromptLimits.HEADING_PREVIEW_CHARS) if loc.heading else None,
        "identified headings",
    )


def format_images(locations: tuple[LocationRef, ...]) -> str:
    return _join_locations(locations, _image, "identified images")


@dataclass
class EffectivenessRecord:
    """Per-issue-type effectiveness tally."""

    attempts: int = 0
    successes: int = 0
    improvements: list[float] = field(default_factory=list)


class CorrectionPromptBuilder:
    """
    Builds correction prompts from issues.

    Args:
        max_attempts: Attempts per provider written into every prompt
        min_improvement_threshold_percent: Relative metric improvement needed
            for a prompt to count as effective
        templates: Template catalog; defaults to the shared PROMPT_TEMPLATES
    """

    def __init__(
        self,
        max_attempts: int = CorrectionDefaults.MAX_ATTEMPTS_PER_PROMPT,
        min_improvement_threshold_percent: float = CorrectionDefaults.MIN_IMPROVEMENT_PERCENT,
        templates: Optional[Mapping[IssueType, PromptTemplate]] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.min_improvement_threshold_percent = min_improvement_threshold_percent
        self._templates = templates if templates is not None else PROMPT_TEMPLATES
        self._effectiveness: dict[IssueType, EffectivenessRecord] = {}

    # -------------------------------------------------------------------------
    # Building
    # -------------------------------------------------------------------------

    def build(self, issue: Issue, focus_keyword: str, content: Content) -> Optional[CorrectionPrompt]:
        """
        Build the correction prompt for one issue.

        Returns:
            CorrectionPrompt, or None when the issue type has no template
        """
        issue_type = IssueType.parse(issue.type)
        template = self._templates.get(issue_type) if issue_type else None
        if template is None:
            logger.debug(f"No correction template for issue type: {issue.type}")
            return None

        target = self._quantitative_target(issue, template) if template.quantitative else None
        text = self._render(template, issue, focus_keyword, content, target)

        boost = PromptLimits.SEVERITY_BOOST.get(issue.severity.value, 0)
        priority = min(PromptLimits.MAX_PRIORITY, template.base_priority + boost)

        return CorrectionPrompt(
            issue_type=issue_type,
            prompt_text=text,
            target_locations=tuple(issue.locations),
            expected_changes=ExpectedChanges(
                metric=template.metric_key,
                current_value=issue.current_value,
                target_value=issue.target_value,
                expected_improvement=abs(issue.target_value - issue.current_value),
                action=target.action if target else None,
                change_count=target.count if target else None,
            ),
            max_attempts=self.max_attempts,
            priority=priority,
            quantitative_target=target,
        )

    def build_all(
        self,
        issues: Iterable[Issue],
        focus_keyword: str,
        content: Content,
    ) -> list[CorrectionPrompt]:
        """Build prompts for every issue, highest priority first."""
        prompts = []
        for issue in issues:
            prompt = self.build(issue, focus_keyword, content)
            if prompt is not None:
                prompts.append(prompt)
        return sort_by_priority(prompts)

    def _quantitative_target(self, issue: Issue, template: PromptTemplate) -> QuantitativeTarget:
        if issue.current_value > issue.target_value:
            action = CorrectionAction.REDUCE
        else:
            action = CorrectionAction.INCREASE
        difference = abs(issue.current_value - issue.target_value)
        count = max(1, template.estimate_changes(issue, difference))
        return QuantitativeTarget(
            current=issue.current_value,
            target=issue.target_value,
            difference=difference,
            count=count,
            action=action,
        )

    def _render(
        self,
        template: PromptTemplate,
        issue: Issue,
        focus_keyword: str,
        content: Content,
        target: Optional[QuantitativeTarget],
    ) -> str:
        context_text = getattr(content, template.context_field) if template.context_field else ""
        values = {
            "keyword": focus_keyword,
            "current": f"{issue.current_value:,.1f}",
            "target": f"{issue.target_value:,.1f}",
            "diff": abs(int(target.difference)) if target else 0,
            "count": target.count if target else 0,
            "text": context_text,
            "locations": format_locations(issue.locations),
            "sentences": format_sentences(issue.locations),
            "headings": format_headings(issue.locations),
            "images": format_images(issue.locations),
        }
        return template.text.format_map(values)

    # -------------------------------------------------------------------------
    # Effectiveness tracking
    # -------------------------------------------------------------------------

    def validate_prompt_effectiveness(
        self,
        prompt: CorrectionPrompt,
        before_metrics: Mapping[str, float],
        after_metrics: Mapping[str, float],
    ) -> dict:
        """
        Record whether a prompt's correction moved its metric far enough.

        Effective when the improvement reaches half the expected improvement
        and the relative improvement reaches min_improvement_threshold_percent.
        Improvement is measured in the prompt's direction (reduce/increase).
        """
        record = self._effectiveness.setdefault(prompt.issue_type, EffectivenessRecord())
        record.attempts += 1

        metric = prompt.expected_changes.metric if prompt.expected_changes else prompt.issue_type.value
        before = before_metrics.get(metric)
        after = after_metrics.get(metric)
        if before is None or after is None:
            return {"success": False, "reason": "missing_metrics", "improvement": 0.0}

        action = prompt.expected_changes.action if prompt.expected_changes else None
        if action is CorrectionAction.REDUCE:
            improvement = before - after
        elif action is CorrectionAction.INCREASE:
            improvement = after - before
        else:
            improvement = abs(after - before)

        expected = prompt.expected_changes.expected_improvement if prompt.expected_changes else 0.0
        if before:
            relative_pct = improvement / abs(before) * 100
        else:
            relative_pct = 100.0 if improvement > 0 else 0.0

        success = (
            improvement > 0
            and improvement >= expected * EFFECTIVE_SHARE_OF_EXPECTED
            and relative_pct >= self.min_improvement_threshold_percent
        )
        if success:
            record.successes += 1
        record.improvements.append(improvement)

        return {
            "success": success,
            "improvement": improvement,
            "expected_improvement": expected,
            "relative_improvement_percent": round(relative_pct, 2),
            "effectiveness_rate": improvement / max(0.1, expected),
        }

    def get_effectiveness_stats(self) -> dict[str, dict]:
        stats = {}
        for issue_type, record in self._effectiveness.items():
            stats[issue_type.value] = {
                "attempts": record.attempts,
                "successes": record.successes,
                "success_rate": (record.successes / record.attempts * 100) if record.attempts else 0.0,
                "average_improvement": (
                    sum(record.improvements) / len(record.improvements) if record.improvements else 0.0
                ),
            }
        return stats

    def clear_effectiveness_tracking(self) -> None:
        self._effectiveness.clear()


def sort_by_priority(prompts: Iterable[CorrectionPrompt]) -> list[CorrectionPrompt]:
    """Highest priority first; equal priorities keep their input order."""
    return sorted(prompts, key=lambda p: p.priority, reverse=True)
