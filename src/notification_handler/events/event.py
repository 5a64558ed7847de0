"""
Events - Notification records dispatched by the handler.

Every event carries an identifier, a severity level and an opaque payload.
Generic, error and exception events share one frozen record type and are
told apart by their ``kind``.
"""

import json
import traceback
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Union


DEFAULT_EVENT_ID = "notification.Event"
DEFAULT_ERROR_ID = "notification.Error"
DEFAULT_EXCEPTION_ID = "notification.Exception"


class EventLevel(IntEnum):
    """Severity levels for events."""
    DEBUG = 1
    INFO = 2
    WARNING = 3
    ERROR = 4
    EXCEPTION = 5


class EventKind(Enum):
    """Discriminant for the event variants."""
    GENERIC = "Event"
    ERROR = "ErrorEvent"
    EXCEPTION = "ExceptionEvent"


def coerce_level(level: Union[EventLevel, int, None]) -> Optional[EventLevel]:
    """Convert an int (1..5) to an EventLevel, passing None through."""
    if level is None:
        return None
    return EventLevel(level)


def _describe_cause(cause: Any) -> Dict[str, Any]:
    """Build the payload for an error or exception event."""
    if isinstance(cause, BaseException):
        return {
            "message": str(cause),
            "stack": "".join(
                traceback.format_exception(type(cause), cause, cause.__traceback__)
            ),
        }
    return {"message": cause}


@dataclass(frozen=True)
class Event:
    """An immutable notification record."""
    id: str = DEFAULT_EVENT_ID
    data: Any = None
    level: EventLevel = EventLevel.INFO
    kind: EventKind = EventKind.GENERIC
    cause: Optional[BaseException] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        """Normalise the level given as a plain int."""
        object.__setattr__(self, "level", coerce_level(self.level))

    @classmethod
    def generic(
        cls,
        id: Optional[str] = None,
        data: Any = None,
        level: Union[EventLevel, int, None] = None,
        default_id: str = DEFAULT_EVENT_ID,
    ) -> "Event":
        """Create a generic event, defaulting to INFO level."""
        return cls(
            id=id or default_id,
            data=data,
            level=coerce_level(level) or EventLevel.INFO,
        )

    @classmethod
    def from_error(
        cls,
        cause: Any = None,
        id: Optional[str] = None,
        level: Union[EventLevel, int, None] = None,
        default_id: str = DEFAULT_ERROR_ID,
    ) -> "Event":
        """
        Create an error event.

        Args:
            cause: Exception instance or message
            id: Event ID; defaults to the exception's class name, or
                ``default_id`` when the cause is not an exception
            level: Event level, ERROR unless given
            default_id: Fallback ID for causes that are not exceptions
        """
        return cls._from_cause(
            EventKind.ERROR, cause, id, coerce_level(level) or EventLevel.ERROR, default_id
        )

    @classmethod
    def from_exception(
        cls,
        cause: Any = None,
        id: Optional[str] = None,
        level: Union[EventLevel, int, None] = None,
        default_id: str = DEFAULT_EXCEPTION_ID,
    ) -> "Event":
        """Create an exception event; same rules as from_error at EXCEPTION level."""
        return cls._from_cause(
            EventKind.EXCEPTION, cause, id, coerce_level(level) or EventLevel.EXCEPTION, default_id
        )

    @classmethod
    def _from_cause(
        cls,
        kind: EventKind,
        cause: Any,
        id: Optional[str],
        level: EventLevel,
        default_id: str,
    ) -> "Event":
        exception = cause if isinstance(cause, BaseException) else None

        if not id:
            id = type(exception).__name__ if exception is not None else default_id

        return cls(
            id=id,
            data=_describe_cause(cause),
            level=level,
            kind=kind,
            cause=exception,
        )

    @property
    def message(self) -> Optional[str]:
        """Message of an error or exception event."""
        if isinstance(self.data, dict):
            return self.data.get("message")
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "kind": self.kind.value,
            "id": self.id,
            "level": int(self.level),
            "data": self.data,
        }

    def __str__(self) -> str:
        text = f"notification_handler.{self.kind.value}: {self.id} (Level {int(self.level)})"

        if self.data is not None:
            text += " with data " + json.dumps(self.data, default=str)

        return text
