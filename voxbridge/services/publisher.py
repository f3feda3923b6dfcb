"""Session event publisher built on pubsub.pub."""

import logging
from typing import Callable, Dict

from pubsub import pub

from ..models.events import SessionEvent

logger = logging.getLogger(__name__)

SessionEventListener = Callable[[SessionEvent], None]


def _session_event_proto(event: SessionEvent) -> None:
    """Prototype listener defining the message data of session topics."""


class SessionEventPublisher:
    """Publishes SessionEvents on a pub/sub topic owned by one orchestrator."""

    def __init__(self, topic: str):
        """Initialize session event publisher.

        Args:
            topic: Pub/sub topic name for this orchestrator's events
        """
        self.topic = topic
        pub.getDefaultTopicMgr().getOrCreateTopic(topic, _session_event_proto)
        # pubsub only keeps weak references; hold the guarded wrappers here
        self._listeners: Dict[SessionEventListener, SessionEventListener] = {}
        logger.info(f"SessionEventPublisher initialized with topic: {topic}")

    def subscribe(self, listener: SessionEventListener) -> None:
        """Register a listener called with event=SessionEvent for every publish.

        A listener that raises is logged and does not stop delivery to the others.
        """
        if listener in self._listeners:
            return

        def guarded(event: SessionEvent) -> None:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Session event listener {listener!r} failed on "
                             f"{event.event_type.value}: {e}", exc_info=True)

        pub.subscribe(guarded, self.topic)
        self._listeners[listener] = guarded

    def unsubscribe(self, listener: SessionEventListener) -> None:
        guarded = self._listeners.pop(listener, None)
        if guarded is None:
            return
        try:
            pub.unsubscribe(guarded, self.topic)
        except Exception as e:
            logger.warning(f"Error during unsubscribe: {e}")

    def unsubscribe_all(self) -> None:
        for listener in list(self._listeners):
            self.unsubscribe(listener)

    def publish(self, event: SessionEvent) -> None:
        """Publish a session event to every subscribed listener."""
        pub.sendMessage(self.topic, event=event)
        logger.debug(f"Published session event: {event.event_type.value} ({event.state.value})")
