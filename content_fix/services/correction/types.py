"""
Data types for the content correction engine.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Mapping


class IssueType(str, Enum):
    """Quality issues the engine knows how to correct."""

    KEYWORD_DENSITY_HIGH = "keyword_density_high"
    KEYWORD_DENSITY_LOW = "keyword_density_low"
    META_DESCRIPTION_SHORT = "meta_description_short"
    META_DESCRIPTION_LONG = "meta_description_long"
    META_DESCRIPTION_NO_KEYWORD = "meta_description_no_keyword"
    PASSIVE_VOICE_HIGH = "passive_voice_high"
    SENTENCE_LENGTH_HIGH = "sentence_length_high"
    TRANSITION_WORDS_LOW = "transition_words_low"
    TITLE_TOO_LONG = "title_too_long"
    TITLE_NO_KEYWORD = "title_no_keyword"
    SUBHEADING_KEYWORD_OVERUSE = "subheading_keyword_overuse"
    NO_IMAGES = "no_images"
    ALT_TEXT_NO_KEYWORD = "alt_text_no_keyword"

    @classmethod
    def parse(cls, value: IssueType | str) -> IssueType | None:
        """Return the matching member, or None for an unknown type."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class Severity(str, Enum):
    """Severity of a detected issue."""

    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"

    @classmethod
    def parse(cls, value: Severity | str | None) -> Severity:
        """Return the matching member; unknown or missing values are minor."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MINOR


class CorrectionAction(str, Enum):
    """Direction a metric has to move."""

    REDUCE = "reduce"
    INCREASE = "increase"


# Wire keys of the correction response contract, mapped to Content fields
CONTENT_FIELDS = {
    "title": "title",
    "meta_description": "meta_description",
    "content": "body",
}


@dataclass(frozen=True)
class Content:
    """
    A title / meta-description / HTML body record.

    Immutable: corrections produce a new Content via `merged()`.
    """

    title: str = ""
    meta_description: str = ""
    body: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Content:
        """Build from wire keys (`title`, `meta_description`, `content`)."""
        return cls(
            title=str(data.get("title") or ""),
            meta_description=str(data.get("meta_description") or ""),
            body=str(data.get("content") or data.get("body") or ""),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "title": self.title,
            "meta_description": self.meta_description,
            "content": self.body,
        }

    def merged(self, partial: Mapping[str, Any]) -> Content:
        """
        Return a copy with the wire keys present in `partial` overridden.

        Keys absent from `partial` (and unknown keys) leave the field untouched.
        """
        updates = {attr: partial[key] for key, attr in CONTENT_FIELDS.items() if key in partial}
        if not updates:
            return self
        return replace(self, **updates)

    def canonical_json(self) -> str:
        """Exact serialization; two records are the same content iff these match."""
        return json.dumps(self.to_dict(), sort_keys=True, ensure_ascii=False)


@dataclass(frozen=True)
class LocationRef:
    """Where in the content an issue occurs. Only used to render prompt text."""

    position: int | None = None
    length: int | None = None
    context: str | None = None
    sentence: str | None = None
    heading: str | None = None
    alt_text: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LocationRef:
        return cls(
            position=data.get("position"),
            length=data.get("length"),
            context=data.get("context"),
            sentence=data.get("sentence"),
            heading=data.get("heading"),
            alt_text=data.get("alt_text"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if v is not None}


@dataclass(frozen=True)
class Issue:
    """
    A detected quality problem with a current and target numeric value.

    Attributes:
        type: Issue type; unknown strings are allowed and skipped by the builder
        current_value: Measured metric value
        target_value: Value the correction should reach
        severity: critical / major / minor
        locations: Ordered places in the content where the issue occurs
    """

    type: IssueType | str
    current_value: float = 0.0
    target_value: float = 0.0
    severity: Severity | str = Severity.MINOR
    locations: tuple[LocationRef, ...] = ()

    def __post_init__(self):
        if not isinstance(self.severity, Severity):
            object.__setattr__(self, "severity", Severity.parse(self.severity))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Issue:
        raw_type = data.get("type", "")
        return cls(
            type=IssueType.parse(raw_type) or str(raw_type),
            current_value=float(data.get("current_value", data.get("currentValue", 0)) or 0),
            target_value=float(data.get("target_value", data.get("targetValue", 0)) or 0),
            severity=data.get("severity", "minor"),
            locations=tuple(LocationRef.from_dict(loc) for loc in data.get("locations") or []),
        )


@dataclass(frozen=True)
class QuantitativeTarget:
    """Numeric goal for a quantitative correction."""

    current: float
    target: float
    difference: float
    count: int
    action: CorrectionAction


@dataclass(frozen=True)
class ExpectedChanges:
    """What a correction is expected to achieve."""

    metric: str
    current_value: float
    target_value: float
    expected_improvement: float
    action: CorrectionAction | None = None
    change_count: int | None = None


@dataclass(frozen=True)
class CorrectionPrompt:
    """
    A rendered, issue-specific instruction plus expected-outcome metadata.

    Created once per issue by CorrectionPromptBuilder and consumed by the
    orchestrator.
    """

    issue_type: IssueType
    prompt_text: str
    target_locations: tuple[LocationRef, ...] = ()
    expected_changes: ExpectedChanges | None = None
    max_attempts: int = 3
    priority: int = 5
    quantitative_target: QuantitativeTarget | None = None

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if not 0 <= self.priority <= 10:
            raise ValueError("priority must be within 0..10")

    def to_dict(self) -> dict[str, Any]:
        target = self.quantitative_target
        return {
            "issue_type": self.issue_type.value,
            "prompt_text": self.prompt_text,
            "priority": self.priority,
            "max_attempts": self.max_attempts,
            "target_locations": [loc.to_dict() for loc in self.target_locations],
            "quantitative_target": (
                {
                    "current": target.current,
                    "target": target.target,
                    "difference": target.difference,
                    "count": target.count,
                    "action": target.action.value,
                }
                if target
                else None
            ),
        }


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class CorrectionHistoryEntry:
    """One applied correction."""

    issue_type: IssueType
    success: bool
    provider: str
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class FailedCorrection:
    """A prompt for which every provider and attempt failed."""

    issue_type: IssueType
    error: str
    timestamp: datetime = field(default_factory=_utcnow)
    prompt: CorrectionPrompt | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class PromptValidation:
    """Outcome of the single-correction test for one prompt in a batch check."""

    issue_type: IssueType
    valid: bool


@dataclass(frozen=True)
class BatchValidation:
    """Result of validating a whole batch against the original content."""

    success: bool
    success_rate: float
    validations: list[PromptValidation]
    message: str


@dataclass
class CorrectionBatchResult:
    """
    Result of applying a batch of correction prompts.

    Attributes:
        success: True when at least one correction was applied
        content: Final content (the input when nothing applied)
        corrections_applied: Number of successful corrections
        failed_corrections: Prompts that exhausted every provider/attempt
        history: Snapshot of the orchestrator's correction history
        validation: Batch validation, when enabled
        message: Human-readable summary
    """

    success: bool
    content: Content
    corrections_applied: int = 0
    failed_corrections: list[FailedCorrection] = field(default_factory=list)
    history: list[CorrectionHistoryEntry] = field(default_factory=list)
    validation: BatchValidation | None = None
    message: str = ""

    @property
    def total_attempted(self) -> int:
        return self.corrections_applied + len(self.failed_corrections)
