"""Custom exceptions for the notification handler."""


class NotificationHandlerError(Exception):
    """Base exception for notification handler errors."""
    pass


class ListenerDispatchError(NotificationHandlerError):
    """Raised when one or more listeners failed while handling a fired event.

    Every matching listener has already run to completion when this is
    raised; ``errors`` holds the failures in registration order.
    """

    def __init__(self, event, errors):
        self.event = event
        self.errors = list(errors)
        super().__init__(
            f"{len(self.errors)} listener(s) failed for event {event.id!r}"
        )


class WrapperUsageError(NotificationHandlerError, TypeError):
    """Raised when an exception-capture wrapper is called without a callback."""
    pass


class ConfigurationError(NotificationHandlerError):
    """Raised when there's an error in configuration."""
    pass
