"""Listener forwarding events to a standard library logger."""

import logging
from typing import Optional

from ..events.event import Event, EventLevel
from .base import Listener


LOGGING_LEVELS = {
    EventLevel.DEBUG: logging.DEBUG,
    EventLevel.INFO: logging.INFO,
    EventLevel.WARNING: logging.WARNING,
    EventLevel.ERROR: logging.ERROR,
    EventLevel.EXCEPTION: logging.ERROR,
}


class LoggingListener(Listener):
    """Logs every received event at the matching logging level."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("notification_handler.events")

    async def receive(self, event: Event) -> None:
        log_level = LOGGING_LEVELS.get(event.level, logging.INFO)
        cause = getattr(event, "cause", None)

        self.logger.log(
            log_level,
            "%s",
            event,
            exc_info=(type(cause), cause, cause.__traceback__) if cause is not None else None,
        )
