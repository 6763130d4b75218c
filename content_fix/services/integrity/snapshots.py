"""
Bounded snapshot store.

Snapshots are kept in insertion order; when the store is full the oldest
snapshot is evicted (FIFO), regardless of how recently it was read.
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from typing import Optional

from content_fix.constants import IntegrityThresholds
from content_fix.services.correction.types import Content

from .fingerprint import StructureAnalyzer, generate_checksum
from .types import Snapshot

logger = logging.getLogger(__name__)


def new_snapshot_id() -> str:
    return f"snapshot_{uuid.uuid4().hex}"


class SnapshotStore:
    """
    Ordered, bounded collection of content snapshots.

    Args:
        max_snapshots: Maximum population; the oldest is evicted past it
        analyzer: Structure analyzer used to profile snapshotted content
    """

    def __init__(
        self,
        max_snapshots: int = IntegrityThresholds.MAX_SNAPSHOTS,
        analyzer: Optional[StructureAnalyzer] = None,
    ):
        if max_snapshots < 1:
            raise ValueError("max_snapshots must be at least 1")
        self.max_snapshots = max_snapshots
        self._analyzer = analyzer or StructureAnalyzer()
        self._snapshots: OrderedDict[str, Snapshot] = OrderedDict()

    def create(self, content: Content, label: str = "") -> Snapshot:
        """Snapshot `content`, evicting the oldest snapshot if over capacity."""
        snapshot = Snapshot(
            id=new_snapshot_id(),
            label=label,
            content=content,
            profile=self._analyzer.analyze(content),
            checksum=generate_checksum(content),
        )
        self._snapshots[snapshot.id] = snapshot

        while len(self._snapshots) > self.max_snapshots:
            evicted_id, _ = self._snapshots.popitem(last=False)
            logger.debug(f"Evicted snapshot {evicted_id}")

        return snapshot

    def get(self, snapshot_id: str) -> Optional[Snapshot]:
        # Plain lookup; reading never changes eviction order
        return self._snapshots.get(snapshot_id)

    def latest(self) -> Optional[Snapshot]:
        if not self._snapshots:
            return None
        return next(reversed(self._snapshots.values()))

    def all(self) -> list[Snapshot]:
        """Snapshots, oldest first."""
        return list(self._snapshots.values())

    def clear(self) -> None:
        self._snapshots.clear()

    def __contains__(self, snapshot_id: object) -> bool:
        return snapshot_id in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)
