"""Auto mode: record for a fixed duration, translate, synthesize and commit."""

import asyncio
import logging
from typing import Optional

from .errors import CaptureUnavailable, PersistFailed
from .models.events import SessionEvent, SessionEventType
from .models.session import VoiceSelection
from .services.session_orchestrator import SessionOrchestrator
from .ui.console import ConsoleView

logger = logging.getLogger(__name__)


async def run_auto_mode(orchestrator: SessionOrchestrator,
                        view: ConsoleView,
                        duration_seconds: int = 10,
                        input_language: Optional[str] = None,
                        output_language: Optional[str] = None,
                        voice: Optional[VoiceSelection] = None,
                        detection_enabled: bool = False,
                        name: Optional[str] = None) -> Optional[str]:
    """Run one complete recording session without user interaction.

    Detected language suggestions are accepted automatically.

    Returns:
        The committed recording id, or None if nothing was committed
    """
    logger.info(f"Starting auto mode: {duration_seconds}s recording")

    def accept_suggestions(event: SessionEvent) -> None:
        if event.event_type is SessionEventType.LANGUAGE_SWITCH_SUGGESTED:
            orchestrator.accept_detected_language()

    orchestrator.subscribe(view.on_session_event)
    if detection_enabled:
        orchestrator.subscribe(accept_suggestions)

    try:
        try:
            session = await orchestrator.start(input_language, output_language, voice, detection_enabled)
        except CaptureUnavailable as e:
            view.error(f"Cannot start recording: {e}")
            return None

        view.info(f"🎙️  Recording {session.input_language} → {session.output_language} "
                  f"for {duration_seconds} seconds...")
        await asyncio.sleep(duration_seconds)

        view.info("⏹️  Stopping recording...")
        outcome = await orchestrator.stop()
        view.show_outcome(outcome)

        if orchestrator.session is None:
            logger.info(f"Auto mode ended without a ready session: {outcome.status.value}")
            return None

        try:
            recording_id = await orchestrator.commit(name)
        except PersistFailed as e:
            view.error(f"Could not save recording: {e}")
            orchestrator.cancel()
            return None

        view.info(f"✅ Saved recording {recording_id}")
        logger.info(f"Auto mode completed: {recording_id}")
        return recording_id
    finally:
        orchestrator.unsubscribe(view.on_session_event)
        if detection_enabled:
            orchestrator.unsubscribe(accept_suggestions)
