import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Generic, TypeVar

from ..domain import Entity, Event
from ..exceptions import ConfigurationError
from ..storage import Document, DocumentStore, SortDirection
from .readiness import ReadinessSignal
from .snapshot import SnapshotStrategy

LOGGER = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)

ID_FIELD = "id"

# Keys every stored event carries itself
EVENT_FIELDS = frozenset(Event.model_fields) - {ID_FIELD}


def _index_fields(entity_type: type[Entity], indices: Iterable[str]) -> tuple[str, ...]:
    fields = [ID_FIELD]
    for field in indices:
        if field not in fields:
            fields.append(field)

    unknown = [field for field in fields if field not in entity_type.model_fields]
    if unknown:
        raise ConfigurationError(
            f"{entity_type.__name__} has no field(s) {', '.join(unknown)} to index"
        )

    reserved = [field for field in fields if field in EVENT_FIELDS]
    if reserved:
        raise ConfigurationError(
            f"Cannot index {entity_type.__name__} on {', '.join(reserved)}: "
            "the name is already used by stored events"
        )
    return tuple(fields)


class Repository(Generic[E]):
    """Loads and commits entities using a snapshot plus an event log.

    Every entity type gets two collections, ``<Type>.snapshots`` and
    ``<Type>.events``. Loading folds the latest snapshot with every newer
    event in ascending version order. Committing writes, in this order:

    1. a snapshot, when the snapshot strategy says one is due,
    2. the pending events as a single batch, each stamped with the entity's
       current value for every index field,
    3. nothing to storage, but the queued local notifications are emitted
       on the entity.

    A snapshot is never written after the events it depends on, so a crash
    between steps can only cost a redundant replay on the next load, and
    listeners only ever hear about events that are already durable.

    The repository does not serialize concurrent commits of the same id.
    Callers must keep a single in-process owner per entity between `get` and
    `commit`; two writers racing on one id can store duplicate versions.

    Example:
        >>> store = InMemoryDocumentStore()
        >>> repository = Repository(BankAccount, store, indices=["owner"])
        >>> account = await repository.get("account-1")
        >>> account.deposit(Decimal("10.00"))
        >>> await repository.commit(account)
    """

    __slots__ = (
        "entity_type",
        "indices",
        "snapshot_strategy",
        "snapshots",
        "events",
        "initialized",
    )

    def __init__(
        self,
        entity_type: type[E],
        store: DocumentStore | None,
        indices: Iterable[str] = (),
        snapshot_strategy: SnapshotStrategy | None = None,
    ):
        """Initialize the repository and request its indexes.

        Args:
            entity_type: The entity class this repository persists.
            store: A connected document store handle.
            indices: Entity fields to index and to mirror onto every event.
                ``id`` is always included.
            snapshot_strategy: When to write snapshots. Defaults to every
                10 versions.

        Raises:
            ConfigurationError: If the store is missing or not connected, or
                an index field is not a field of the entity type or clashes
                with a key of the stored event documents.
        """
        if store is None or not store.connected:
            raise ConfigurationError(
                "A connected document store is required to create a "
                f"{entity_type.__name__} repository"
            )

        self.entity_type = entity_type
        self.indices = _index_fields(entity_type, indices)
        self.snapshot_strategy = snapshot_strategy or SnapshotStrategy.default()
        self.snapshots = store.collection(f"{entity_type.__name__}.snapshots")
        self.events = store.collection(f"{entity_type.__name__}.events")
        self.initialized = ReadinessSignal(self._ensure_indexes)

        LOGGER.debug("connecting to %s entity store", entity_type.__name__)

    async def _ensure_indexes(self) -> None:
        for field in self.indices:
            await self.snapshots.ensure_index(field)
            await self.events.ensure_index(field)

        LOGGER.info(
            "initialized %s entity store",
            self.entity_type.__name__,
            extra={"entity_type": self.entity_type.__name__, "indices": list(self.indices)},
        )

    async def get(self, id: str) -> E:
        """Load an entity, or a fresh one at version 0 if nothing is stored.

        Args:
            id: The entity id.

        Returns:
            The entity rebuilt from its latest snapshot and newer events.

        Raises:
            StorageReadError: If a query fails.
            ReplayError: If the stored data cannot be replayed.
        """
        await self.initialized
        LOGGER.debug("getting %s for id %s", self.entity_type.__name__, id)

        latest = await self.snapshots.find(
            {ID_FIELD: id}, sort=("version", SortDirection.DESC), limit=1
        )
        snapshot = latest[0] if latest else None

        criteria: dict[str, Any] = {ID_FIELD: id}
        if snapshot is not None:
            criteria["version"] = {"$gt": snapshot["version"]}

        events = await self.events.find(criteria, sort=("version", SortDirection.ASC))

        return self.deserialize(id, snapshot, events)

    async def commit(self, entity: E) -> None:
        """Persist an entity's pending events and emit its local notifications.

        Args:
            entity: The entity to commit.

        Raises:
            StorageWriteError: If the snapshot or the event batch cannot be
                written. A failed snapshot write leaves the events unwritten;
                a failed event write leaves the notifications queued.
        """
        await self.initialized
        LOGGER.debug("committing %s for id %s", self.entity_type.__name__, entity.id)

        # Snapshots are saved before events
        await self._commit_snapshot(entity)
        await self._commit_events(entity)
        self._emit_local_events(entity)

    def deserialize(
        self,
        id: str,
        snapshot: Mapping[str, Any] | None,
        events: Sequence[Mapping[str, Any]],
    ) -> E:
        """Build an entity from a stored snapshot and its newer events.

        Performs no I/O. Override to customize reconstruction.

        Raises:
            ReplayError: If the snapshot or events cannot be replayed.
        """
        LOGGER.debug(
            "deserializing %s entity",
            self.entity_type.__name__,
            extra={"entity_id": id, "replayed_events": len(events)},
        )

        if snapshot is not None:
            snapshot = {key: value for key, value in snapshot.items() if key != "_id"}

        entity = self.entity_type.from_history(snapshot, events)
        entity.id = id
        return entity

    async def _commit_snapshot(self, entity: E) -> None:
        if not self.snapshot_strategy.should_snapshot(entity):
            return

        snapshot = entity.snapshot()
        snapshot.pop("_id", None)
        await self.snapshots.insert_one(snapshot)
        entity.snapshot_version = snapshot["version"]

        LOGGER.debug(
            "committed %s.snapshot for id %s",
            self.entity_type.__name__,
            entity.id,
            extra={"version": snapshot["version"]},
        )

    async def _commit_events(self, entity: E) -> None:
        if not entity.new_events:
            return

        index_values = entity.model_dump(mode="json", include=set(self.indices))
        documents: list[Document] = []
        for event in entity.new_events:
            document = event.to_document()
            document.update(index_values)
            documents.append(document)

        await self.events.insert_many(documents)
        entity.clear_new_events()

        LOGGER.debug(
            "committed %s.events for id %s",
            self.entity_type.__name__,
            entity.id,
            extra={"count": len(documents), "version": entity.version},
        )

    def _emit_local_events(self, entity: E) -> None:
        for notification in entity.drain_events_to_emit():
            entity.notify(notification.name, *notification.args)

        LOGGER.debug("emitted local events for id %s", entity.id)
