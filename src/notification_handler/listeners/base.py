"""Listener contract and the callable adapter."""

import inspect
from abc import ABC, abstractmethod
from typing import Any, Callable

from ..events.event import Event


class Listener(ABC):
    """Base class for notification listeners."""

    @abstractmethod
    async def receive(self, event: Event) -> None:
        """Handle the event."""
        pass


class CallbackListener(Listener):
    """
    Adapts a plain or async function to the listener contract.

    Two adapters around the same function compare equal, so registering a
    function twice with the same filter stays a no-op.
    """

    def __init__(self, callback: Callable[[Event], Any]):
        if not callable(callback):
            raise TypeError(f"Listener callback must be callable, got {callback!r}")
        self.callback = callback

    async def receive(self, event: Event) -> None:
        result = self.callback(event)
        if inspect.isawaitable(result):
            await result

    def __eq__(self, other):
        if isinstance(other, CallbackListener):
            return self.callback == other.callback
        return NotImplemented

    def __hash__(self):
        return hash(self.callback)

    def __repr__(self) -> str:
        name = getattr(self.callback, "__qualname__", repr(self.callback))
        return f"CallbackListener({name})"
