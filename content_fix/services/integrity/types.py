"""
Data types for structure preservation and rollback.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from content_fix.services.correction.types import Content


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ViolationSeverity(str, Enum):
    """Major violations may trigger rollback; minor ones are advisory."""

    MAJOR = "major"
    MINOR = "minor"


class ViolationCategory(str, Enum):
    STRUCTURE = "structure"
    FORMATTING = "formatting"


@dataclass(frozen=True)
class HeadingEntry:
    """One heading in document order."""

    level: int
    text: str


@dataclass(frozen=True)
class StructuralProfile:
    """
    Structural fingerprint of a content record.

    A pure function of the content: identical content always yields an
    identical profile.
    """

    title_length: int
    meta_length: int
    body_length: int
    tag_counts: Mapping[str, int]
    heading_hierarchy: tuple[HeadingEntry, ...]
    paragraph_count: int
    heading_counts: Mapping[str, int]
    image_count: int
    list_count: int
    link_count: int
    checksum: str

    def __post_init__(self):
        # Read-only views so a cached profile can't be altered by a caller
        object.__setattr__(self, "tag_counts", MappingProxyType(dict(self.tag_counts)))
        object.__setattr__(self, "heading_counts", MappingProxyType(dict(self.heading_counts)))

    @property
    def heading_count(self) -> int:
        return sum(self.heading_counts.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "title_length": self.title_length,
            "meta_length": self.meta_length,
            "body_length": self.body_length,
            "tag_counts": dict(self.tag_counts),
            "heading_hierarchy": [{"level": h.level, "text": h.text} for h in self.heading_hierarchy],
            "paragraph_count": self.paragraph_count,
            "heading_counts": dict(self.heading_counts),
            "image_count": self.image_count,
            "list_count": self.list_count,
            "link_count": self.link_count,
            "checksum": self.checksum,
        }


@dataclass(frozen=True)
class Snapshot:
    """Immutable saved copy of content; a rollback target."""

    id: str
    label: str
    content: Content
    profile: StructuralProfile
    checksum: str
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class Violation:
    """
    A structural-integrity breach.

    Attributes:
        type: Machine-readable kind (e.g. structure_tag_count_changed)
        category: structure or formatting
        severity: major or minor
        original: Value in the original content
        modified: Value in the modified content
        tag: Tag name, for per-tag violations
        detail: Extra context (e.g. "66.67%")
    """

    type: str
    category: ViolationCategory
    severity: ViolationSeverity
    original: Any = None
    modified: Any = None
    tag: Optional[str] = None
    detail: Optional[str] = None

    @property
    def is_major(self) -> bool:
        return self.severity is ViolationSeverity.MAJOR


@dataclass(frozen=True)
class IntegrityWarning:
    """An intent drift that is reported but never blocks validity."""

    type: str
    original: Any = None
    modified: Any = None
    detail: Optional[str] = None


@dataclass
class ValidationResult:
    """Result of comparing a modified content record against its original."""

    is_valid: bool
    violations: list[Violation] = field(default_factory=list)
    warnings: list[IntegrityWarning] = field(default_factory=list)
    structure_preserved: bool = True
    formatting_preserved: bool = True
    intent_preserved: bool = True
    original_profile: Optional[StructuralProfile] = None
    modified_profile: Optional[StructuralProfile] = None

    @property
    def major_violations(self) -> list[Violation]:
        return [v for v in self.violations if v.is_major]


@dataclass
class PreservationResult:
    """Outcome of wrapping a content mutation in preserve-or-rollback."""

    success: bool
    rolled_back: bool
    content: Content
    validation: ValidationResult
    snapshot_id: str


@dataclass(frozen=True)
class CorruptionReport:
    is_corrupted: bool
    expected_checksum: str
    actual_checksum: str
    checked_at: datetime = field(default_factory=_utcnow)
