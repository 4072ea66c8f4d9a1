"""
Event dispatch between the execution layer, the tracker and reporters.
"""

from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from steptree.monitoring.logger import get_logger

logger = get_logger(__name__)


class StepEvent(str, Enum):
    """Events raised around every step execution."""

    BEFORE = "step.before"
    STARTED = "step.start"
    PASSED = "step.passed"
    FAILED = "step.failed"
    FINISHED = "step.finish"
    COMMENT = "step.comment"


class LifecycleEvent(str, Enum):
    """Events raised by the test runner integration."""

    SUITE_STARTED = "suite.before"
    TEST_STARTED = "test.before"
    TEST_PASSED = "test.passed"
    TEST_FAILED = "test.failed"
    TEST_PENDING = "test.skipped"
    RUN_ENDED = "all.result"


class EventDispatcher:
    """
    Synchronous publish-subscribe channel for named lifecycle events.

    Listeners run in registration order on the emitting thread. A listener
    that raises is logged and skipped so the remaining listeners still see
    the event.
    """

    def __init__(self):
        """Initialize the dispatcher."""
        # Listeners mapped by event name
        self._listeners: Dict[str, List[Callable[..., Any]]] = defaultdict(list)

        # Event history for debugging and analysis
        self._event_history: List[Tuple[str, datetime]] = []
        self._history_limit = 1000

        # Statistics
        self._event_count: Dict[str, int] = defaultdict(int)

        logger.debug("Event dispatcher initialized")

    def subscribe(self, event: str, handler: Callable[..., Any]) -> None:
        """
        Subscribe to an event.

        Args:
            event: Event name to subscribe to
            handler: Callback invoked with the event payload
        """
        self._listeners[self._key(event)].append(handler)
        logger.debug(f"Subscription added for {self._key(event)}")

    def unsubscribe(self, event: str, handler: Callable[..., Any]) -> None:
        """
        Unsubscribe from an event.

        Args:
            event: Event name to unsubscribe from
            handler: Callback to remove
        """
        listeners = self._listeners[self._key(event)]
        if handler in listeners:
            listeners.remove(handler)
            logger.debug(f"Subscription removed for {self._key(event)}")

    @contextmanager
    def subscription(
        self, event: str, handler: Callable[..., Any]
    ) -> Iterator[Callable[..., Any]]:
        """
        Keep ``handler`` subscribed for the duration of a ``with`` block.

        The handler is removed on every exit path, including exceptions.
        """
        self.subscribe(event, handler)
        try:
            yield handler
        finally:
            self.unsubscribe(event, handler)

    def emit(self, event: str, *payload: Any) -> None:
        """
        Deliver an event to all current listeners.

        Args:
            event: Event name
            *payload: Positional arguments passed to every listener
        """
        key = self._key(event)
        self._add_to_history(key)
        self._event_count[key] += 1

        # Copy so listeners may unsubscribe while being notified
        for handler in list(self._listeners.get(key, [])):
            try:
                handler(*payload)
            except Exception:
                logger.exception(f"Listener for {key} failed")

    def listener_count(self, event: str) -> int:
        """Number of listeners currently attached to ``event``."""
        return len(self._listeners.get(self._key(event), []))

    def _add_to_history(self, event: str) -> None:
        """Add event to history with size limit."""
        self._event_history.append((event, datetime.now(timezone.utc)))

        # Trim history if needed
        if len(self._event_history) > self._history_limit:
            self._event_history = self._event_history[-self._history_limit:]

    def get_event_history(
        self, event: Optional[str] = None, limit: int = 100
    ) -> List[Tuple[str, datetime]]:
        """
        Get emitted event names, optionally filtered.

        Args:
            event: Filter by event name
            limit: Maximum number of entries to return

        Returns:
            Most recent matching entries
        """
        history = self._event_history
        if event:
            key = self._key(event)
            history = [entry for entry in history if entry[0] == key]
        return history[-limit:]

    def get_statistics(self) -> Dict[str, Any]:
        """Get dispatcher statistics."""
        return {
            "total_events": sum(self._event_count.values()),
            "event_counts": dict(self._event_count),
            "history_size": len(self._event_history),
            "active_subscriptions": {
                event: len(handlers)
                for event, handlers in self._listeners.items()
            }
        }

    def clear(self) -> None:
        """Remove all listeners and history."""
        self._listeners.clear()
        self._event_history.clear()
        self._event_count.clear()
        logger.debug("Event dispatcher cleared")

    @staticmethod
    def _key(event: str) -> str:
        return event.value if isinstance(event, Enum) else str(event)
