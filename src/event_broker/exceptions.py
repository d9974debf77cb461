"""Domain exception hierarchy for the event broker."""

from __future__ import annotations

from typing import Any


class EventBrokerError(Exception):
    """Base class for all event broker errors."""


class InvalidArgumentError(EventBrokerError, TypeError):
    """Raised when an event name or listener argument fails validation."""

    def __init__(self, parameter: str, message: str) -> None:
        super().__init__(message)
        self.parameter = parameter


class ListenerInvocationError(EventBrokerError):
    """Wraps an exception raised by a listener while an event was emitted.

    Never raised out of ``Broker.emit``; it is the ``exc_info`` of the
    ``broker.listener.failed`` log record, with the listener's exception as
    ``__cause__``. The ``error`` event carries the listener's exception itself.
    """

    def __init__(self, event_name: str, listener: Any) -> None:
        name = getattr(listener, "__qualname__", repr(listener))
        super().__init__(f"Listener {name} failed while handling '{event_name}'.")
        self.event_name = event_name
        self.listener = listener


class ConfigValidationError(EventBrokerError):
    """Raised when broker configuration cannot be validated."""
