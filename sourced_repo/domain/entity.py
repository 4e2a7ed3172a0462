from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from pydantic import BaseModel, Field, PrivateAttr, ValidationError
from ulid import ULID

from ..exceptions import ReplayError
from ..routing import setup_event_applying
from .event import Event, Notification, utc_now

if TYPE_CHECKING:
    from ..routing import MessageRouter

E = TypeVar("E", bound="Entity")

Listener = Callable[..., Any]


def new_entity_id() -> str:
    return str(ULID())


class Entity(BaseModel):
    """Base class for event-sourced entities persisted by a Repository.

    An entity's state is the fold of an optional snapshot and the ordered
    events recorded after it. Domain methods validate their input and call
    `emit` with a payload model; the payload is recorded as a new event and
    routed to the `@applies_event` method annotated with its type. Local
    notifications queued with `enqueue` are delivered to listeners by the
    repository once the entity's events have been committed.

    Examples:
        >>> from decimal import Decimal
        >>> from sourced_repo.routing import applies_event
        >>>
        >>> class MoneyDeposited(BaseModel):
        ...     amount: Decimal
        >>>
        >>> class Account(Entity):
        ...     balance: Decimal = Decimal("0.00")
        ...
        ...     def deposit(self, amount: Decimal) -> None:
        ...         if amount <= 0:
        ...             raise ValueError("Amount must be positive")
        ...         self.emit(MoneyDeposited(amount=amount))
        ...         self.enqueue("deposited", amount)
        ...
        ...     @applies_event
        ...     def apply_deposited(self, evt: MoneyDeposited) -> None:
        ...         self.balance += evt.amount
        >>>
        >>> account = Account(id="account-1")
        >>> account.deposit(Decimal("100.00"))
        >>> account.version
        1

    Attributes:
        id: Identifier of the entity, stable for its whole lifetime.
        version: Number of events applied so far.
        snapshot_version: Version at which the last snapshot was taken,
            0 if the entity was never snapshotted.
        timestamp: When the most recent event occurred.
        new_events: Events recorded since the last commit. Excluded from
            serialization.
        events_to_emit: Local notifications waiting for the next commit.
            Excluded from serialization.
    """

    id: str = Field(default_factory=new_entity_id)
    version: int = Field(default=0, ge=0)
    snapshot_version: int = Field(default=0, ge=0)
    timestamp: datetime = Field(default_factory=utc_now)
    new_events: list[Event] = Field(default_factory=list, exclude=True)
    events_to_emit: list[Notification] = Field(default_factory=list, exclude=True)

    _listeners: dict[str, list[Listener]] = PrivateAttr(default_factory=dict)

    _event_router: ClassVar["MessageRouter"]

    def __init_subclass__(cls, **kwargs: object) -> None:
        """Set up event routing when a subclass is defined."""
        super().__init_subclass__(**kwargs)  # type: ignore[arg-type]
        cls._event_router = setup_event_applying(cls)

    @classmethod
    def from_history(
        cls: type[E],
        snapshot: Mapping[str, Any] | None,
        events: Iterable[Event | Mapping[str, Any]],
    ) -> E:
        """Rebuild an entity from a snapshot and the events recorded after it.

        Args:
            snapshot: Snapshot state as produced by `snapshot()`, or None to
                start from a fresh entity.
            events: Events in ascending version order, either as Event
                instances or as stored documents.

        Returns:
            The reconstructed entity, with no pending events or notifications.

        Raises:
            ReplayError: If the snapshot or an event cannot be validated, an
                event type is unknown, or an applier fails.
        """
        try:
            entity = cls.model_validate(dict(snapshot)) if snapshot is not None else cls()
        except ValidationError as err:
            raise ReplayError(f"Invalid {cls.__name__} snapshot: {err}") from err

        entity.replay(events)
        return entity

    def emit(self, data: BaseModel) -> None:
        """Record a new event and apply it to the entity state.

        Args:
            data: The event payload, a pydantic model describing what happened.

        Raises:
            TypeError: If the entity has no applier for the payload type, since
                such an event could never be replayed.
        """
        payload_type = type(data)
        if self._event_router.resolve(payload_type.__name__) is not payload_type:
            raise TypeError(
                f"{type(self).__name__} has no applier for event type {payload_type.__name__!r}"
            )

        self.version += 1
        event = Event(
            id=self.id,
            version=self.version,
            type=type(data).__name__,
            data=data.model_dump(mode="json"),
        )
        self.timestamp = event.timestamp
        self.new_events.append(event)
        self.apply(data)

    def apply(self, data: BaseModel) -> object:
        """Route an event payload to its registered applier method.

        Payload types without an applier are ignored.
        """
        return self._event_router.route(self, data)

    def replay(self, events: Iterable[Event | Mapping[str, Any]]) -> None:
        """Apply already-recorded events in the given order.

        Unlike `emit`, replayed events are not added to `new_events`.

        Raises:
            ReplayError: If an event cannot be reconstructed or applied.
        """
        for item in events:
            try:
                event = item if isinstance(item, Event) else Event.model_validate(item)
            except ValidationError as err:
                raise ReplayError(f"Invalid {type(self).__name__} event: {err}") from err

            payload_type = self._event_router.resolve(event.type)
            if payload_type is None:
                raise ReplayError(
                    f"{type(self).__name__} has no applier for event type {event.type!r}"
                )

            try:
                self.apply(payload_type.model_validate(event.data))
            except Exception as err:
                raise ReplayError(
                    f"Failed to replay {event.type} at version {event.version} "
                    f"for {type(self).__name__} {self.id}: {err}"
                ) from err

            self.version = event.version
            self.timestamp = event.timestamp

    def snapshot(self) -> dict[str, Any]:
        """Capture the serializable state of the entity at its current version.

        The returned state records ``snapshot_version`` equal to ``version``.
        The entity itself is not modified; the repository updates
        ``snapshot_version`` once the snapshot has been stored.
        """
        state = self.model_dump(mode="json")
        state["snapshot_version"] = self.version
        return state

    def enqueue(self, name: str, *args: Any) -> None:
        """Queue a local notification to be emitted after the next commit."""
        self.events_to_emit.append(Notification(name=name, args=args))

    def on(self, name: str, listener: Listener) -> None:
        """Register a listener for a local notification name."""
        self._listeners.setdefault(name, []).append(listener)

    def off(self, name: str, listener: Listener) -> None:
        """Remove a previously registered listener."""
        listeners = self._listeners.get(name, [])
        if listener in listeners:
            listeners.remove(listener)

    def notify(self, name: str, *args: Any) -> None:
        """Call every listener registered for ``name`` with ``args``."""
        for listener in list(self._listeners.get(name, [])):
            listener(*args)

    def clear_new_events(self) -> None:
        """Clear the events recorded since the last commit.

        Called by the repository after the events have been persisted.
        """
        self.new_events.clear()

    def drain_events_to_emit(self) -> list[Notification]:
        """Remove and return the queued local notifications, in order."""
        notifications = list(self.events_to_emit)
        self.events_to_emit.clear()
        return notifications
