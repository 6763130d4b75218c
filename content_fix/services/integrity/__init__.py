# content_fix/services/integrity/__init__.py
"""
Structural integrity and rollback.

Fingerprints content (checksum + structural profile), keeps a bounded set of
snapshots, and decides whether a mutated document kept its shape.

Components:
- StructureAnalyzer: Memoized structural profiles (LRU bounded)
- SnapshotStore: FIFO-bounded rollback targets
- IntegrityValidator: Structure / formatting / intent checks
- StructurePreserver: Preserve-or-rollback around a mutation

Usage:
    from content_fix.services.integrity import StructurePreserver

    preserver = StructurePreserver()
    result = preserver.preserve_content(original, corrected)
    content = result.content  # the original again if rolled back
"""

from .fingerprint import (
    StructureAnalyzer,
    build_profile,
    generate_checksum,
    normalize_html,
)
from .preserver import StructurePreserver
from .snapshots import SnapshotStore
from .types import (
    CorruptionReport,
    HeadingEntry,
    IntegrityWarning,
    PreservationResult,
    Snapshot,
    StructuralProfile,
    ValidationResult,
    Violation,
    ViolationCategory,
    ViolationSeverity,
)
from .validator import IntegrityValidator, SimilarityScorer, sequence_similarity

__all__ = [
    "StructureAnalyzer",
    "StructurePreserver",
    "SnapshotStore",
    "IntegrityValidator",
    "SimilarityScorer",
    "build_profile",
    "generate_checksum",
    "normalize_html",
    "sequence_similarity",
    # Types
    "CorruptionReport",
    "HeadingEntry",
    "IntegrityWarning",
    "PreservationResult",
    "Snapshot",
    "StructuralProfile",
    "ValidationResult",
    "Violation",
    "ViolationCategory",
    "ViolationSeverity",
]
