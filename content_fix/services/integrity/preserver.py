"""
Structure preserver: preserve-or-rollback around a content mutation.

Snapshots the original, validates the mutated content against it, and
restores the original when the mutation broke the document structure.
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import UTC, datetime
from typing import Optional

from content_fix.config import PreserverConfig
from content_fix.logging_config import AuditLog
from content_fix.services.correction.types import Content

from .fingerprint import StructureAnalyzer, generate_checksum
from .snapshots import SnapshotStore
from .types import CorruptionReport, PreservationResult, Snapshot, StructuralProfile, ValidationResult
from .validator import IntegrityValidator, SimilarityScorer, sequence_similarity

logger = logging.getLogger(__name__)

PRE_OPTIMIZATION_LABEL = "pre_optimization"


class StructurePreserver:
    """
    Content integrity guard with snapshot-based rollback.

    Usage:
        preserver = StructurePreserver(PreserverConfig(max_snapshots=5))
        result = preserver.preserve_content(original, corrected)
        if result.rolled_back:
            print(result.validation.major_violations)

    Args:
        config: Preserver configuration
        similarity: Title similarity scorer for the intent check
    """

    def __init__(
        self,
        config: Optional[PreserverConfig] = None,
        similarity: SimilarityScorer = sequence_similarity,
    ):
        self.config = config or PreserverConfig()
        self.analyzer = StructureAnalyzer(cache_size=self.config.structure_cache_size)
        self.snapshots = SnapshotStore(max_snapshots=self.config.max_snapshots, analyzer=self.analyzer)
        self.validator = IntegrityValidator.from_config(self.config, similarity=similarity)
        self.audit = AuditLog(logger, level=self.config.log_level, capacity=self.config.history_capacity)
        self._checksums: deque[dict] = deque(maxlen=self.config.history_capacity)

    # -------------------------------------------------------------------------
    # Fingerprints and snapshots
    # -------------------------------------------------------------------------

    def analyze_structure(self, content: Content) -> StructuralProfile:
        return self.analyzer.analyze(content)

    def generate_checksum(self, content: Content) -> str:
        return generate_checksum(content)

    def create_snapshot(self, content: Content, label: str = "") -> str:
        """Snapshot content and return the snapshot id."""
        snapshot = self.snapshots.create(content, label)
        self.audit.record(
            "info",
            f"Created snapshot: {snapshot.id} ({label})",
            snapshot_id=snapshot.id,
        )
        return snapshot.id

    # -------------------------------------------------------------------------
    # Validation and rollback
    # -------------------------------------------------------------------------

    def validate_integrity(self, original: Content, modified: Content) -> ValidationResult:
        """Compare modified content against the original."""
        result = self.validator.validate(
            original,
            modified,
            self.analyze_structure(original),
            self.analyze_structure(modified),
        )

        if self.config.enable_checksums:
            self._checksums.append(
                {
                    "original": result.original_profile.checksum,
                    "modified": result.modified_profile.checksum,
                    "timestamp": datetime.now(UTC).isoformat(),
                }
            )

        if not result.is_valid:
            self.audit.record(
                "warning",
                f"Integrity validation failed: {len(result.violations)} violation(s)",
            )
        return result

    def preserve_content(self, original: Content, optimized: Content) -> PreservationResult:
        """
        Accept `optimized` unless it broke the structure.

        The original is always snapshotted first. When validation fails,
        rollback is enabled, and at least one violation is major, the
        original is returned unchanged with `rolled_back=True`.
        """
        snapshot_id = self.create_snapshot(original, PRE_OPTIMIZATION_LABEL)
        validation = self.validate_integrity(original, optimized)

        if not validation.is_valid and self.config.enable_rollback and validation.major_violations:
            self.audit.record(
                "error",
                f"Major integrity violations detected, rolling back to {snapshot_id}",
                snapshot_id=snapshot_id,
            )
            snapshot = self.rollback(snapshot_id)
            return PreservationResult(
                success=False,
                rolled_back=True,
                content=snapshot.content if snapshot else original,
                validation=validation,
                snapshot_id=snapshot_id,
            )

        return PreservationResult(
            success=validation.is_valid,
            rolled_back=False,
            content=optimized,
            validation=validation,
            snapshot_id=snapshot_id,
        )

    def rollback(self, snapshot_id: str) -> Optional[Snapshot]:
        """Return the snapshot to restore, or None (rollback disabled / unknown id)."""
        if not self.config.enable_rollback:
            self.audit.record("warning", "Rollback disabled in configuration")
            return None

        snapshot = self.snapshots.get(snapshot_id)
        if snapshot is None:
            self.audit.record("error", f"Snapshot not found: {snapshot_id}", snapshot_id=snapshot_id)
            return None

        self.audit.record(
            "info",
            f"Rolling back to snapshot: {snapshot_id} ({snapshot.label})",
            snapshot_id=snapshot_id,
        )
        return snapshot

    def detect_corruption(self, content: Content, expected_checksum: str) -> CorruptionReport:
        """Compare a freshly computed checksum against an expected one."""
        actual = generate_checksum(content)
        report = CorruptionReport(
            is_corrupted=actual != expected_checksum,
            expected_checksum=expected_checksum,
            actual_checksum=actual,
        )
        if report.is_corrupted:
            self.audit.record("error", "Content corruption detected")
        return report

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def get_snapshots(self) -> list[Snapshot]:
        return self.snapshots.all()

    def get_latest_snapshot(self) -> Optional[Snapshot]:
        return self.snapshots.latest()

    def clear_snapshots(self) -> None:
        """Drop snapshots, the structure cache and the checksum log."""
        self.snapshots.clear()
        self.analyzer.reset()
        self._checksums.clear()
        self.audit.record("info", "All snapshots cleared")

    def reset_cache(self) -> None:
        self.analyzer.reset()

    def get_checksums(self) -> list[dict]:
        return list(self._checksums)

    def get_error_log(self) -> list[dict]:
        return self.audit.entries()

    def get_preservation_stats(self) -> dict:
        return {
            "total_snapshots": len(self.snapshots),
            "total_checksums": len(self._checksums),
            "cache_size": self.analyzer.cache_size,
            "cache_capacity": self.analyzer.cache_capacity,
            "config": {
                "enable_rollback": self.config.enable_rollback,
                "max_snapshots": self.config.max_snapshots,
                "enable_checksums": self.config.enable_checksums,
                "strict_validation": self.config.strict_validation,
            },
        }
