from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain import Entity

SNAPSHOT_FREQUENCY = 10
"""Number of versions between two snapshots of the same entity."""


class SnapshotStrategy(ABC):
    """Decides whether a commit should write a snapshot of the entity."""

    @staticmethod
    def never() -> "SnapshotStrategy":
        return NeverSnapshot()

    @staticmethod
    def default() -> "SnapshotStrategy":
        return SnapshotEveryN(SNAPSHOT_FREQUENCY)

    @abstractmethod
    def should_snapshot(self, entity: "Entity") -> bool:
        pass


class NeverSnapshot(SnapshotStrategy):
    def should_snapshot(self, _: "Entity") -> bool:
        return False


class SnapshotEveryN(SnapshotStrategy):
    """Snapshot once the entity is ``frequency`` versions past its last snapshot."""

    def __init__(self, frequency: int):
        if frequency < 1:
            raise ValueError("Snapshot frequency must be at least 1")
        self.frequency = frequency

    def should_snapshot(self, entity: "Entity") -> bool:
        return entity.version >= entity.snapshot_version + self.frequency
