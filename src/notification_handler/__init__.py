"""Notification Handler

In-process event dispatch: producers fire events, registered listeners
receive the matching ones asynchronously.
"""

__version__ = "0.1.0"

from .events import Event, EventKind, EventLevel
from .exceptions import (
    ConfigurationError,
    ListenerDispatchError,
    NotificationHandlerError,
    WrapperUsageError,
)
from .handler import (
    Handler,
    Registration,
    emit,
    fire,
    get_handler,
    on_event,
    register,
    register_as_global_error_handler,
    set_handler,
)
from .listeners import CallbackListener, ConsoleOutputListener, Listener, LoggingListener
from .models.config import HandlerConfig, load_config

__all__ = [
    # Core components
    "Handler",
    "Registration",
    "Event",
    "Listener",

    # Listeners
    "CallbackListener",
    "ConsoleOutputListener",
    "LoggingListener",

    # Types and enums
    "EventKind",
    "EventLevel",
    "HandlerConfig",

    # Errors
    "NotificationHandlerError",
    "ListenerDispatchError",
    "WrapperUsageError",
    "ConfigurationError",

    # Utilities
    "get_handler",
    "set_handler",
    "register",
    "fire",
    "emit",
    "on_event",
    "register_as_global_error_handler",
    "load_config",
]
