"""
Tests for notification events.
"""

import dataclasses

import pytest

from notification_handler.events import (
    DEFAULT_ERROR_ID,
    DEFAULT_EVENT_ID,
    DEFAULT_EXCEPTION_ID,
    Event,
    EventKind,
    EventLevel,
    coerce_level,
)


def raise_and_catch(error):
    try:
        raise error
    except Exception as e:
        return e


class TestEventLevel:
    """Test EventLevel enum."""

    def test_level_values(self):
        """Levels are ordered 1..5."""
        assert [level.value for level in EventLevel] == [1, 2, 3, 4, 5]
        assert EventLevel.DEBUG < EventLevel.EXCEPTION

    def test_coerce_level(self):
        """Plain ints become EventLevel members."""
        assert coerce_level(4) is EventLevel.ERROR
        assert coerce_level(None) is None

    def test_coerce_invalid_level(self):
        """Values outside 1..5 are rejected."""
        with pytest.raises(ValueError):
            coerce_level(6)


class TestGenericEvent:
    """Test generic events."""

    def test_defaults(self):
        """A bare event has the default ID and INFO level."""
        event = Event.generic()
        assert event.id == DEFAULT_EVENT_ID
        assert event.level is EventLevel.INFO
        assert event.kind is EventKind.GENERIC
        assert event.data is None

    def test_level_given_as_int(self):
        """The level is normalised at construction."""
        event = Event(id="job.done", level=3)
        assert event.level is EventLevel.WARNING

    def test_custom_default_id(self):
        """Factories accept a different fallback ID."""
        assert Event.generic(default_id="app.Event").id == "app.Event"

    def test_read_only(self):
        """ID and level cannot change after creation."""
        event = Event.generic("job.done")
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.id = "job.failed"
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.level = EventLevel.ERROR

    def test_str_with_data(self):
        """String form includes the JSON payload."""
        event = Event.generic("job.done", {"count": 3})
        assert str(event) == 'notification_handler.Event: job.done (Level 2) with data {"count": 3}'

    def test_str_without_data(self):
        event = Event.generic("job.done", level=EventLevel.DEBUG)
        assert str(event) == "notification_handler.Event: job.done (Level 1)"

    def test_to_dict(self):
        """Event serialization to dict."""
        event = Event.generic("job.done", {"count": 3}, EventLevel.WARNING)
        assert event.to_dict() == {
            "kind": "Event",
            "id": "job.done",
            "level": 3,
            "data": {"count": 3},
        }


class TestErrorEvents:
    """Test error and exception events."""

    def test_error_from_exception_instance(self):
        """The ID is the exception class name; message and stack are kept."""
        error = raise_and_catch(ValueError("boom"))
        event = Event.from_error(error)

        assert event.id == "ValueError"
        assert event.level is EventLevel.ERROR
        assert event.kind is EventKind.ERROR
        assert event.cause is error
        assert event.message == "boom"
        assert "raise_and_catch" in event.data["stack"]
        assert "ValueError: boom" in event.data["stack"]

    def test_error_from_message(self):
        """A plain message falls back to the default error ID."""
        event = Event.from_error("disk full")
        assert event.id == DEFAULT_ERROR_ID
        assert event.data == {"message": "disk full"}
        assert event.cause is None

    def test_exception_defaults(self):
        """Exception events default to EXCEPTION level."""
        event = Event.from_exception(KeyError("missing"))
        assert event.id == "KeyError"
        assert event.level is EventLevel.EXCEPTION
        assert event.kind is EventKind.EXCEPTION

    def test_exception_from_message(self):
        event = Event.from_exception("unexpected")
        assert event.id == DEFAULT_EXCEPTION_ID
        assert event.message == "unexpected"

    def test_explicit_id_and_level(self):
        """Explicit ID and level win over the defaults."""
        event = Event.from_exception(RuntimeError("x"), id="job.crashed", level=EventLevel.WARNING)
        assert event.id == "job.crashed"
        assert event.level is EventLevel.WARNING

    def test_cause_excluded_from_equality(self):
        """Two events with the same fields compare equal regardless of cause."""
        first = Event.from_error(ValueError("boom"))
        second = Event.from_error(ValueError("boom"))
        assert first == second

    def test_str_of_error_event(self):
        event = Event.from_error("disk full")
        assert str(event).startswith("notification_handler.ErrorEvent: notification.Error (Level 4)")
