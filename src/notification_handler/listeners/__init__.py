"""Listeners receiving dispatched events."""

from .base import CallbackListener, Listener
from .console_output import ConsoleOutputListener
from .logging_listener import LoggingListener

__all__ = [
    "Listener",
    "CallbackListener",
    "ConsoleOutputListener",
    "LoggingListener",
]
