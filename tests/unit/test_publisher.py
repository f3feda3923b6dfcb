"""Unit tests for SessionEventPublisher."""

import uuid
import pytest

from conftest import EventRecorder
from voxbridge.models.events import SessionEvent, SessionEventType
from voxbridge.models.session import SessionState
from voxbridge.services import SessionEventPublisher


def make_event(event_type=SessionEventType.STATE_CHANGED) -> SessionEvent:
    return SessionEvent(
        event_id=str(uuid.uuid4()),
        event_type=event_type,
        session_id="session-1",
        state=SessionState.CAPTURING,
    )


@pytest.mark.unit
class TestSessionEventPublisher:
    """Test cases for SessionEventPublisher."""

    def test_subscribers_receive_events(self):
        publisher = SessionEventPublisher(f"test_topic_{uuid.uuid4().hex}")
        recorder = EventRecorder()
        publisher.subscribe(recorder.on_event)

        event = make_event()
        publisher.publish(event)

        assert recorder.events == [event]

    def test_topics_are_isolated(self):
        first = SessionEventPublisher(f"test_topic_{uuid.uuid4().hex}")
        second = SessionEventPublisher(f"test_topic_{uuid.uuid4().hex}")
        recorder = EventRecorder()
        first.subscribe(recorder.on_event)

        second.publish(make_event())

        assert recorder.events == []

    def test_unsubscribe(self):
        publisher = SessionEventPublisher(f"test_topic_{uuid.uuid4().hex}")
        recorder = EventRecorder()
        publisher.subscribe(recorder.on_event)

        publisher.unsubscribe(recorder.on_event)
        publisher.publish(make_event())

        assert recorder.events == []

    def test_local_function_listener_stays_subscribed(self):
        publisher = SessionEventPublisher(f"test_topic_{uuid.uuid4().hex}")
        received = []

        def listener(event):
            received.append(event.event_type)

        publisher.subscribe(listener)
        del listener
        publisher.publish(make_event(SessionEventType.CANCELLED))

        assert received == [SessionEventType.CANCELLED]

    def test_listener_errors_are_contained(self):
        publisher = SessionEventPublisher(f"test_topic_{uuid.uuid4().hex}")

        def broken(event):
            raise RuntimeError("listener bug")

        publisher.subscribe(broken)
        publisher.publish(make_event())

    def test_unsubscribe_all(self):
        publisher = SessionEventPublisher(f"test_topic_{uuid.uuid4().hex}")
        recorder = EventRecorder()
        publisher.subscribe(recorder.on_event)

        publisher.unsubscribe_all()
        publisher.publish(make_event())

        assert recorder.events == []

    def test_failing_listener_does_not_starve_later_listeners(self):
        publisher = SessionEventPublisher(f"test_topic_{uuid.uuid4().hex}")
        recorder = EventRecorder()

        def broken(event):
            raise RuntimeError("listener bug")

        publisher.subscribe(broken)
        publisher.subscribe(recorder.on_event)
        publisher.publish(make_event())
        publisher.publish(make_event(SessionEventType.CANCELLED))

        assert recorder.types() == [SessionEventType.STATE_CHANGED, SessionEventType.CANCELLED]

    def test_bound_method_unsubscribes_with_fresh_reference(self):
        publisher = SessionEventPublisher(f"test_topic_{uuid.uuid4().hex}")
        recorder = EventRecorder()
        publisher.subscribe(recorder.on_event)
        publisher.subscribe(recorder.on_event)

        publisher.publish(make_event())
        publisher.unsubscribe(recorder.on_event)
        publisher.publish(make_event())

        assert len(recorder.events) == 1
