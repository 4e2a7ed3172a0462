"""Repository infrastructure for snapshot-plus-event-log persistence.

This package provides:
- Repository: Loads entities from snapshots and events, commits new events
- ReadinessSignal: One-shot gate awaited before storage is touched
- Snapshot strategies deciding when a commit writes a snapshot
"""

from .readiness import ReadinessSignal
from .repository import Repository
from .snapshot import SNAPSHOT_FREQUENCY, NeverSnapshot, SnapshotEveryN, SnapshotStrategy

__all__ = [
    "Repository",
    "ReadinessSignal",
    "SNAPSHOT_FREQUENCY",
    "SnapshotStrategy",
    "SnapshotEveryN",
    "NeverSnapshot",
]
