"""
Tests for the event dispatcher.
"""

from unittest.mock import Mock

import pytest

from steptree.orchestration.communication import EventDispatcher, LifecycleEvent, StepEvent


@pytest.fixture
def dispatcher():
    """Create an EventDispatcher instance for testing."""
    return EventDispatcher()


class TestEventDispatcher:
    """Test cases for EventDispatcher."""

    def test_subscribe_and_emit(self, dispatcher):
        """Listeners receive the payload in registration order."""
        calls = []
        dispatcher.subscribe(StepEvent.STARTED, lambda step: calls.append(("first", step)))
        dispatcher.subscribe(StepEvent.STARTED, lambda step: calls.append(("second", step)))

        dispatcher.emit(StepEvent.STARTED, "step-1")

        assert calls == [("first", "step-1"), ("second", "step-1")]

    def test_enum_and_string_keys_match(self, dispatcher):
        """Enum members and their values name the same event."""
        handler = Mock()
        dispatcher.subscribe("step.start", handler)

        dispatcher.emit(StepEvent.STARTED, "step-1")

        handler.assert_called_once_with("step-1")
        assert dispatcher.listener_count(StepEvent.STARTED) == 1

    def test_unsubscribe(self, dispatcher):
        """Removed listeners are no longer called."""
        handler = Mock()
        dispatcher.subscribe(StepEvent.FINISHED, handler)
        dispatcher.unsubscribe(StepEvent.FINISHED, handler)
        dispatcher.unsubscribe(StepEvent.FINISHED, handler)  # Should not raise

        dispatcher.emit(StepEvent.FINISHED, "step-1")

        handler.assert_not_called()

    def test_subscription_released_on_error(self, dispatcher):
        """Scoped subscriptions are removed even when the block raises."""
        handler = Mock()

        with pytest.raises(ValueError):
            with dispatcher.subscription(StepEvent.BEFORE, handler):
                assert dispatcher.listener_count(StepEvent.BEFORE) == 1
                raise ValueError("boom")

        assert dispatcher.listener_count(StepEvent.BEFORE) == 0

    def test_failing_listener_does_not_stop_others(self, dispatcher):
        """A raising listener is logged and skipped."""
        handler = Mock()
        dispatcher.subscribe(LifecycleEvent.TEST_PASSED, Mock(side_effect=RuntimeError("bad")))
        dispatcher.subscribe(LifecycleEvent.TEST_PASSED, handler)

        dispatcher.emit(LifecycleEvent.TEST_PASSED, "test")

        handler.assert_called_once_with("test")

    def test_listener_may_unsubscribe_itself(self, dispatcher):
        """Unsubscribing during delivery does not skip other listeners."""
        second = Mock()

        def once(payload):
            dispatcher.unsubscribe(StepEvent.COMMENT, once)

        dispatcher.subscribe(StepEvent.COMMENT, once)
        dispatcher.subscribe(StepEvent.COMMENT, second)

        dispatcher.emit(StepEvent.COMMENT, "hello")
        dispatcher.emit(StepEvent.COMMENT, "again")

        assert second.call_count == 2
        assert dispatcher.listener_count(StepEvent.COMMENT) == 1

    def test_history_and_statistics(self, dispatcher):
        """Emitted events are counted and kept in history."""
        dispatcher.subscribe(StepEvent.STARTED, Mock())
        dispatcher.emit(StepEvent.STARTED, 1)
        dispatcher.emit(StepEvent.STARTED, 2)
        dispatcher.emit(LifecycleEvent.RUN_ENDED)

        stats = dispatcher.get_statistics()
        assert stats["total_events"] == 3
        assert stats["event_counts"] == {"step.start": 2, "all.result": 1}
        assert stats["active_subscriptions"]["step.start"] == 1

        history = dispatcher.get_event_history(StepEvent.STARTED)
        assert [name for name, _ in history] == ["step.start", "step.start"]
        assert len(dispatcher.get_event_history(limit=1)) == 1

    def test_clear(self, dispatcher):
        """Clearing removes listeners and history."""
        dispatcher.subscribe(StepEvent.STARTED, Mock())
        dispatcher.emit(StepEvent.STARTED, 1)

        dispatcher.clear()

        assert dispatcher.listener_count(StepEvent.STARTED) == 0
        assert dispatcher.get_event_history() == []
