from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Get the current UTC timestamp.

    Returns:
        Current datetime with UTC timezone information
    """
    return datetime.now(tz=timezone.utc)


class Event(BaseModel):
    """Immutable record of one state change of an entity.

    Events are created by entities via ``Entity.emit()`` and written to the
    event collection exactly once by ``Repository.commit()``. When read back,
    any extra document keys (mirrored index fields, the storage ``_id``) are
    ignored.

    Attributes:
        id: ID of the entity that produced this event.
        version: The version the entity reached by applying this event
            (1-indexed, contiguous per entity).
        type: Name of the payload type, used to route the payload on replay.
        data: JSON-compatible payload.
        timestamp: When the event occurred (UTC timezone).

    Examples:
        >>> event = Event(
        ...     id="account-1",
        ...     version=3,
        ...     type="MoneyDeposited",
        ...     data={"amount": "10.00"},
        ... )
        >>> event.to_document()["version"]
        3
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="ID of the entity that produced this event")
    version: int = Field(ge=1, description="Entity version reached by applying this event")
    type: str = Field(description="Payload type name")
    data: dict[str, Any] = Field(default_factory=dict, description="Serialized payload")
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC timezone)",
    )

    def to_document(self) -> dict[str, Any]:
        """Serialize the event into the document shape stored by the repository."""
        return self.model_dump(mode="json")


class Notification(BaseModel):
    """A local, in-process notification queued on an entity.

    Notifications are never persisted. The repository emits them on the
    entity only after the entity's events have been durably written.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    args: tuple[Any, ...] = ()
