"""
Event System - Notification events.

Events are immutable records with an identifier, a severity level and a
payload; the handler dispatches them to matching listeners.
"""

from .event import (
    DEFAULT_ERROR_ID,
    DEFAULT_EVENT_ID,
    DEFAULT_EXCEPTION_ID,
    Event,
    EventKind,
    EventLevel,
    coerce_level,
)

__all__ = [
    "Event",
    "EventKind",
    "EventLevel",
    "coerce_level",
    "DEFAULT_EVENT_ID",
    "DEFAULT_ERROR_ID",
    "DEFAULT_EXCEPTION_ID",
]
