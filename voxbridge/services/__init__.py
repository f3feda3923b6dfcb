"""Service layer: session orchestration, persistence and voice management."""

from .publisher import SessionEventPublisher
from .persistence import RecordingPersistence
from .voice_profiles import CustomVoiceStore
from .voice_resolver import CustomVoiceResolver
from .session_orchestrator import SessionOrchestrator

__all__ = [
    "SessionEventPublisher",
    "RecordingPersistence",
    "CustomVoiceStore",
    "CustomVoiceResolver",
    "SessionOrchestrator",
]
