"""Domain primitives for event-sourced entities.

- Entity: Base class for entities rebuilt from snapshots and events
- Event: Immutable record of one state change, as stored
- Notification: Local notification emitted after a successful commit
"""

from .entity import Entity
from .event import Event, Notification, utc_now

__all__ = [
    "Entity",
    "Event",
    "Notification",
    "utc_now",
]
