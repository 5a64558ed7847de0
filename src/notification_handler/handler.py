"""
Handler - Listener registry and event dispatch.

This module provides the handler shared by a process: listeners register
with optional ID and level filters, fired events are dispatched to every
matching listener concurrently, and failures of wrapped operations are
routed into the same pipeline as exception events.
"""

import asyncio
import inspect
import logging
import sys
import threading
import weakref
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Set, Tuple, TypeVar, Union

from .events.event import Event, EventLevel, coerce_level
from .exceptions import ListenerDispatchError, WrapperUsageError
from .listeners.base import CallbackListener, Listener
from .models.config import HandlerConfig

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class Registration:
    """A listener paired with its optional event ID and level filters."""
    listener: Listener
    event_id: Optional[str] = None
    event_level: Optional[EventLevel] = None

    def matches(self, event: Event) -> bool:
        """Unset filters match anything."""
        return (
            (self.event_id is None or self.event_id == event.id)
            and (self.event_level is None or self.event_level == event.level)
        )

    def is_same(self, other: "Registration") -> bool:
        """Same listener reference and same filters."""
        if self.event_id != other.event_id or self.event_level != other.event_level:
            return False
        if isinstance(self.listener, CallbackListener) and isinstance(other.listener, CallbackListener):
            return self.listener.callback is other.listener.callback
        return self.listener is other.listener


def _as_exception(value: Any) -> BaseException:
    """Return value if it is an exception, otherwise wrap it in RuntimeError."""
    if isinstance(value, BaseException):
        return value
    if isinstance(value, type) and issubclass(value, BaseException):
        return value()
    return RuntimeError(str(value))


class Handler:
    """
    Registry of listeners and dispatcher of events.

    One instance is meant to be shared by the whole process; create it at
    startup and install it with ``set_handler()``, or let ``get_handler()``
    create it on first use.
    """

    def __init__(self, config: Optional[HandlerConfig] = None):
        self.config = config or HandlerConfig.default()
        self._registrations: List[Registration] = []
        self._pending: Set[asyncio.Task] = set()
        self._hooks_installed = False
        self._trapped_loops: "weakref.WeakSet[asyncio.AbstractEventLoop]" = weakref.WeakSet()

    @property
    def registrations(self) -> Tuple[Registration, ...]:
        """Snapshot of the registrations in registration order."""
        return tuple(self._registrations)

    def register(
        self,
        listener: Listener,
        event_id: Optional[str] = None,
        event_level: Union[EventLevel, int, None] = None,
    ) -> None:
        """
        Register a listener to be triggered for matching events.

        Registering the same listener with the same filters again is a no-op.

        Args:
            listener: Object exposing ``async receive(event)``
            event_id: Only events with exactly this ID match
            event_level: Only events with exactly this level match
        """
        registration = Registration(listener, event_id, coerce_level(event_level))

        if any(existing.is_same(registration) for existing in self._registrations):
            logger.debug("Listener %r already registered for id=%s level=%s",
                         listener, event_id, registration.event_level)
            return

        self._registrations.append(registration)
        logger.debug("Registered listener %r for id=%s level=%s",
                     listener, event_id, registration.event_level)

    def matching(self, event: Event) -> List[Registration]:
        """Registrations matching the event, in registration order."""
        return [registration for registration in self._registrations if registration.matches(event)]

    def fire(self, event: Event) -> Optional["asyncio.Task[int]"]:
        """
        Fire the event to every matching listener.

        Inside a running event loop the listeners are started right away and
        a task settling all of them is returned. Awaiting it yields the number
        of listeners invoked, or raises ListenerDispatchError once every
        listener has finished if any of them failed. Not awaiting it is fine;
        failures are logged either way.

        Without a running event loop the dispatch runs to completion before
        returning None.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is None:
            self._fire_on_private_loop(event)
            return None

        task = loop.create_task(self._settle(event, self._start(event)))
        self._pending.add(task)
        task.add_done_callback(self._on_dispatch_done)
        return task

    def emit(
        self,
        event_id: Optional[str] = None,
        data: Any = None,
        level: Union[EventLevel, int, None] = None,
    ) -> Event:
        """Create a generic event, fire it and return it."""
        event = Event.generic(event_id, data, level, default_id=self.config.default_ids.generic)
        self.fire(event)
        return event

    async def join(self) -> None:
        """Wait until every dispatch started by fire() has settled."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _fire_on_private_loop(self, event: Event) -> None:
        # Never installed as the thread's current loop
        loop = asyncio.new_event_loop()
        try:
            loop.run_until_complete(self._dispatch(event))
        except ListenerDispatchError as e:
            self._log_dispatch_error(e)
        finally:
            try:
                loop.run_until_complete(loop.shutdown_asyncgens())
            finally:
                loop.close()

    async def _dispatch(self, event: Event) -> int:
        return await self._settle(event, self._start(event))

    def _start(self, event: Event) -> List["asyncio.Task[None]"]:
        registrations = self.matching(event)
        logger.debug("Dispatching %s to %d listener(s)", event.id, len(registrations))
        return [
            asyncio.create_task(self._invoke(registration.listener, event))
            for registration in registrations
        ]

    @staticmethod
    async def _invoke(listener: Listener, event: Event) -> None:
        result = listener.receive(event)
        if inspect.isawaitable(result):
            await result

    @staticmethod
    async def _settle(event: Event, tasks: List["asyncio.Task[None]"]) -> int:
        if not tasks:
            return 0

        results = await asyncio.gather(*tasks, return_exceptions=True)
        errors = [result for result in results if isinstance(result, BaseException)]
        if errors:
            raise ListenerDispatchError(event, errors)

        return len(tasks)

    def _on_dispatch_done(self, task: "asyncio.Task[int]") -> None:
        self._pending.discard(task)

        if task.cancelled():
            logger.debug("Dispatch task was cancelled")
            return

        error = task.exception()
        if isinstance(error, ListenerDispatchError):
            self._log_dispatch_error(error)
        elif error is not None:
            logger.error("Dispatch task crashed: %s", error, exc_info=error)

    @staticmethod
    def _log_dispatch_error(error: ListenerDispatchError) -> None:
        for listener_error in error.errors:
            logger.warning("Listener failed while handling %s: %s",
                           error.event.id, listener_error, exc_info=listener_error)

    # Exception capture

    def capture(self, error: Any) -> Event:
        """Convert a failure into an exception event and fire it."""
        event = Event.from_exception(error, default_id=self.config.default_ids.exception)
        logger.debug("Captured failure as %s", event.id)
        self.fire(event)
        return event

    def capture_error(
        self,
        error: Any,
        event_id: Optional[str] = None,
        level: Union[EventLevel, int, None] = None,
    ) -> Event:
        """Report an expected failure as an error event and fire it."""
        event = Event.from_error(error, event_id, level, default_id=self.config.default_ids.error)
        self.fire(event)
        return event

    @staticmethod
    def _split_callback(args: Tuple[Any, ...]) -> Tuple[Callable[..., Any], Tuple[Any, ...]]:
        if not args:
            raise WrapperUsageError("A callback to wrap is required")
        if not callable(args[0]):
            raise WrapperUsageError(f"Expected a callable to wrap, got {args[0]!r}")
        return args[0], args[1:]

    def call(self, *args: Any, **kwargs: Any) -> Any:
        """
        Run ``callback(*args, **kwargs)`` and return its result.

        An exception raised by the callback is fired as an exception event
        and then re-raised unchanged.
        """
        callback, args = self._split_callback(args)
        try:
            return callback(*args, **kwargs)
        except Exception as error:
            self.capture(error)
            raise

    def call_quietly(self, *args: Any, **kwargs: Any) -> Any:
        """Like call(), but returns the exception instead of raising it."""
        callback, args = self._split_callback(args)
        try:
            return callback(*args, **kwargs)
        except Exception as error:
            self.capture(error)
            return error

    async def call_async(self, *args: Any, **kwargs: Any) -> Any:
        """Async variant of call(); awaits the callback's result when awaitable."""
        callback, args = self._split_callback(args)
        try:
            result = callback(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as error:
            self.capture(error)
            raise

    async def call_async_quietly(self, *args: Any, **kwargs: Any) -> Any:
        """Async variant of call_quietly(); resolves with the exception on failure."""
        callback, args = self._split_callback(args)
        try:
            result = callback(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as error:
            self.capture(error)
            return error

    def observe(self, awaitable: Awaitable[T]) -> "asyncio.Future[T]":
        """
        Fire an exception event if the awaitable fails.

        Returns the future wrapping the awaitable; its result or exception is
        left untouched for everyone awaiting it. Cancellation is not reported.
        """
        future = asyncio.ensure_future(awaitable)
        future.add_done_callback(self._on_observed_done)
        return future

    def _on_observed_done(self, future: "asyncio.Future[Any]") -> None:
        if future.cancelled():
            return

        error = future.exception()
        if error is not None:
            self.capture(error)

    def register_as_global_error_handler(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """
        Route uncaught errors of the process into the event pipeline.

        Installs ``sys.excepthook`` and ``threading.excepthook`` once, plus
        the exception handler of the given or currently running event loop.
        Previously installed hooks still run afterwards unless
        ``chain_global_hooks`` is disabled.
        """
        if not self._hooks_installed:
            self._install_excepthooks()
            self._hooks_installed = True

        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None

        if loop is not None and loop not in self._trapped_loops:
            self._install_loop_handler(loop)
            self._trapped_loops.add(loop)

    def _install_excepthooks(self) -> None:
        previous_excepthook = sys.excepthook
        previous_thread_hook = threading.excepthook

        def excepthook(exc_type, exc_value, exc_traceback):
            self.capture(_as_exception(exc_value if exc_value is not None else exc_type))
            if self.config.chain_global_hooks:
                previous_excepthook(exc_type, exc_value, exc_traceback)

        def thread_excepthook(args):
            self.capture(_as_exception(args.exc_value if args.exc_value is not None else args.exc_type))
            if self.config.chain_global_hooks:
                previous_thread_hook(args)

        sys.excepthook = excepthook
        threading.excepthook = thread_excepthook
        logger.debug("Installed global exception hooks")

    def _install_loop_handler(self, loop: asyncio.AbstractEventLoop) -> None:
        previous_handler = loop.get_exception_handler()

        def exception_handler(loop, context):
            error = context.get("exception")
            if error is None:
                error = RuntimeError(context.get("message", "Unhandled error in event loop"))
            self.capture(error)

            if self.config.chain_global_hooks:
                if previous_handler is not None:
                    previous_handler(loop, context)
                else:
                    loop.default_exception_handler(context)

        loop.set_exception_handler(exception_handler)
        logger.debug("Installed exception handler on event loop %r", loop)


# Handler shared by the process
_shared_handler: Optional[Handler] = None


def get_handler() -> Handler:
    """Return the shared handler, creating it on first use."""
    global _shared_handler
    if _shared_handler is None:
        _shared_handler = Handler()
    return _shared_handler


def set_handler(handler: Handler) -> Handler:
    """Install an explicitly constructed handler as the shared one."""
    global _shared_handler
    _shared_handler = handler
    return handler


def register(
    listener: Listener,
    event_id: Optional[str] = None,
    event_level: Union[EventLevel, int, None] = None,
) -> None:
    """Register a listener with the shared handler."""
    get_handler().register(listener, event_id, event_level)


def fire(event: Event) -> Optional["asyncio.Task[int]"]:
    """Fire an event through the shared handler."""
    return get_handler().fire(event)


def emit(
    event_id: Optional[str] = None,
    data: Any = None,
    level: Union[EventLevel, int, None] = None,
) -> Event:
    """Create and fire a generic event through the shared handler."""
    return get_handler().emit(event_id, data, level)


def register_as_global_error_handler(loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
    """Trap uncaught errors with the shared handler."""
    get_handler().register_as_global_error_handler(loop)


# Decorator for easy registration
def on_event(
    event_id: Optional[str] = None,
    event_level: Union[EventLevel, int, None] = None,
    handler: Optional[Handler] = None,
):
    """Decorator registering a plain or async function as a listener."""
    def decorator(callback):
        (handler or get_handler()).register(CallbackListener(callback), event_id, event_level)
        return callback
    return decorator
