"""Tests for domain exception hierarchy."""

from __future__ import annotations

import unittest

from event_broker.exceptions import (
    ConfigValidationError,
    EventBrokerError,
    InvalidArgumentError,
    ListenerInvocationError,
)


class ExceptionHierarchyTests(unittest.TestCase):
    """Validate exception inheritance contract."""

    def test_exception_hierarchy(self) -> None:
        self.assertTrue(issubclass(InvalidArgumentError, EventBrokerError))
        self.assertTrue(issubclass(InvalidArgumentError, TypeError))
        self.assertTrue(issubclass(ListenerInvocationError, EventBrokerError))
        self.assertTrue(issubclass(ConfigValidationError, EventBrokerError))

    def test_invalid_argument_names_parameter(self) -> None:
        error = InvalidArgumentError("listener", "Parameter `listener` must be callable.")
        self.assertEqual(error.parameter, "listener")
        self.assertEqual(str(error), "Parameter `listener` must be callable.")

    def test_listener_invocation_error_describes_listener(self) -> None:
        def on_saved() -> None:
            pass

        error = ListenerInvocationError("document.saved", on_saved)
        self.assertIs(error.listener, on_saved)
        self.assertEqual(error.event_name, "document.saved")
        self.assertIn("on_saved", str(error))
        self.assertIn("'document.saved'", str(error))


if __name__ == "__main__":
    unittest.main()
