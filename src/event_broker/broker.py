"""Synchronous in-process publish/subscribe broker.

Usage:
    broker = Broker()

    def on_saved(path):
        print(f"Saved: {path}")

    off = broker.subscribe("document.saved", on_saved)
    broker.emit("document.saved", "/tmp/notes.txt")
    off()

Failures raised by listeners never escape ``emit``; subscribe to
``Broker.Events.ERROR`` to observe them:

    broker.subscribe(Broker.Events.ERROR, lambda data: log.error(data.error))
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from functools import partial, wraps
import inspect
import logging
from typing import Any

from .config import BrokerConfig, coerce_broker_config
from .exceptions import InvalidArgumentError, ListenerInvocationError

LOGGER = logging.getLogger(__name__)

Listener = Callable[..., Any]
Unsubscribe = Callable[[], None]

EVENT_NAME_ERROR = "Parameter `event_name` must be a non-empty string."
LISTENER_ERROR = "Parameter `listener` must be callable."


class BrokerEvent(str, Enum):
    """Event names the broker emits about its own state changes.

    Members compare equal to their plain string names, so ``"error"`` and
    ``BrokerEvent.ERROR`` address the same listeners.
    """

    ERROR = "error"
    ADDED = "listenerAdded"
    REMOVED = "listenerRemoved"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ListenerEvent:
    """Payload of ``listenerAdded`` and ``listenerRemoved``."""

    event_name: str
    listener: Listener


@dataclass(frozen=True)
class ListenerErrorEvent:
    """Payload of ``error``."""

    event_name: str
    listener: Listener
    error: Exception


def _require_event_name(event_name: Any) -> None:
    if not isinstance(event_name, str) or not event_name.strip():
        raise InvalidArgumentError("event_name", EVENT_NAME_ERROR)


def _require_listener(listener: Any) -> None:
    if not callable(listener):
        raise InvalidArgumentError("listener", LISTENER_ERROR)


def _describe(listener: Listener) -> str:
    return getattr(listener, "__qualname__", None) or repr(listener)


def _same_listener(registered: Listener, candidate: Listener) -> bool:
    # Bound methods are created anew on every attribute access, so they match on
    # receiver and function; everything else matches on identity only.
    if registered is candidate:
        return True
    if inspect.ismethod(registered) and inspect.ismethod(candidate):
        return (
            registered.__self__ is candidate.__self__
            and registered.__func__ is candidate.__func__
        )
    if inspect.isbuiltin(registered) and inspect.isbuiltin(candidate):
        return (
            registered.__self__ is candidate.__self__
            and registered.__name__ == candidate.__name__
        )
    return False


def _index_of(listeners: list[Listener], listener: Listener) -> int | None:
    for index, registered in enumerate(listeners):
        if _same_listener(registered, listener):
            return index
    return None


class Broker:
    """Registry of named-event listeners with synchronous, ordered dispatch.

    Each event name maps to listeners in registration order; a listener is held
    at most once per event. ``emit`` calls a snapshot of that list taken when the
    emission starts, so listeners added during the round wait for the next one and
    listeners removed during the round still run in it.

    Objects that need pub/sub behaviour should own a ``Broker`` and forward to it
    rather than inherit from it.
    """

    Events = BrokerEvent

    def __init__(self, config: BrokerConfig | Mapping[str, Any] | None = None) -> None:
        self._config = coerce_broker_config(config)
        self._error_log_level: int = getattr(
            logging, self._config.listener_error_log_level, logging.DEBUG
        )
        self._listeners: dict[str, list[Listener]] = {}

    def subscribe(self, event_name: str, listener: Listener) -> Unsubscribe:
        """Register a listener for an event.

        Args:
            event_name: Event to listen for (e.g., "document.saved").
            listener: Callable invoked with the emitted arguments.

        Returns:
            A zero-argument callable that removes this listener from the event.

        Raises:
            InvalidArgumentError: ``event_name`` is not a non-empty string or
                ``listener`` is not callable.
        """
        _require_event_name(event_name)
        _require_listener(listener)
        listeners = self._listeners.setdefault(event_name, [])
        if _index_of(listeners, listener) is None:
            listeners.append(listener)
            LOGGER.debug(
                "broker.listener.added",
                extra={"event_name": str(event_name), "listener": _describe(listener)},
            )
        self.emit(BrokerEvent.ADDED, ListenerEvent(event_name, listener))
        return partial(self.unsubscribe, event_name, listener)

    def subscribe_once(self, event_name: str, listener: Listener) -> Unsubscribe:
        """Register a listener that removes itself after its first invocation.

        The broker stores a wrapper around ``listener``, so the wrapper (not
        ``listener``) is what ``listenerAdded`` reports and what the returned
        callable removes. The wrapper is removed even when ``listener`` raises,
        so a failing fire-once listener does not run a second time.
        """
        _require_event_name(event_name)
        _require_listener(listener)

        @wraps(listener)
        def single(*args: Any) -> None:
            try:
                listener(*args)
            finally:
                self.unsubscribe(event_name, single)

        return self.subscribe(event_name, single)

    def unsubscribe(self, event_name: str, listener: Listener) -> None:
        """Remove a listener from an event; a no-op when it is not registered."""
        _require_event_name(event_name)
        _require_listener(listener)
        listeners = self._listeners.get(event_name)
        index = _index_of(listeners, listener) if listeners else None
        if index is None:
            return
        removed = listeners.pop(index)
        if not listeners:
            del self._listeners[event_name]
        LOGGER.debug(
            "broker.listener.removed",
            extra={"event_name": str(event_name), "listener": _describe(removed)},
        )
        self.emit(BrokerEvent.REMOVED, ListenerEvent(event_name, removed))

    def unsubscribe_all(self, event_name: str) -> None:
        """Remove every listener of an event, announcing each removal separately."""
        _require_event_name(event_name)
        for listener in list(self._listeners.get(event_name, ())):
            self.unsubscribe(event_name, listener)

    def emit(self, event_name: str, *args: Any) -> None:
        """Invoke the event's listeners in registration order with ``args``.

        A listener that raises does not stop the round: its exception is emitted
        as ``error`` and logged as a ``ListenerInvocationError``, then the next
        listener runs.
        """
        _require_event_name(event_name)
        listeners = list(self._listeners.get(event_name, ()))
        if self._config.trace_emissions:
            LOGGER.debug(
                "broker.emit",
                extra={"event_name": str(event_name), "listener_count": len(listeners)},
            )
        for listener in listeners:
            self._invoke(event_name, listener, args)

    def _invoke(self, event_name: str, listener: Listener, args: tuple[Any, ...]) -> None:
        try:
            listener(*args)
        except Exception as exc:
            failure = ListenerInvocationError(event_name, listener)
            failure.__cause__ = exc
            LOGGER.log(
                self._error_log_level,
                "broker.listener.failed",
                extra={"event_name": str(event_name), "listener": _describe(listener)},
                exc_info=failure,
            )
            self.emit(BrokerEvent.ERROR, ListenerErrorEvent(event_name, listener, exc))

    on = add_listener = subscribe
    once = subscribe_once
    off = remove_listener = unsubscribe
    remove_all_listeners = unsubscribe_all
    fire = announce = emit
