"""Top-level package for event-broker."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .broker import Broker, BrokerEvent, ListenerErrorEvent, ListenerEvent
    from .config import BrokerConfig, load_config
    from .exceptions import (
        ConfigValidationError,
        EventBrokerError,
        InvalidArgumentError,
        ListenerInvocationError,
    )
    from .logging_utils import configure_logging

__all__ = [
    "Broker",
    "BrokerConfig",
    "BrokerEvent",
    "ConfigValidationError",
    "EventBrokerError",
    "InvalidArgumentError",
    "ListenerErrorEvent",
    "ListenerEvent",
    "ListenerInvocationError",
    "configure_logging",
    "load_config",
]

_EXPORTS = {
    "Broker": ".broker",
    "BrokerEvent": ".broker",
    "ListenerErrorEvent": ".broker",
    "ListenerEvent": ".broker",
    "BrokerConfig": ".config",
    "load_config": ".config",
    "ConfigValidationError": ".exceptions",
    "EventBrokerError": ".exceptions",
    "InvalidArgumentError": ".exceptions",
    "ListenerInvocationError": ".exceptions",
    "configure_logging": ".logging_utils",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols so ``import event_broker`` stays cheap."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return getattr(import_module(module_name, __name__), name)
