"""Data models for the VoxBridge application."""

from .session import SessionState, VoiceKind, VoiceSelection, AudioArtifact, Session
from .recording import RecordingSession, RecordingSortOption
from .voice import CustomVoiceProfile
from .transcription import TranscriptUpdate, DetectionResult
from .events import (
    AudioEvent,
    SessionEventType,
    SessionEvent,
    OutcomeStatus,
    SessionOutcome,
)

__all__ = [
    "SessionState",
    "VoiceKind",
    "VoiceSelection",
    "AudioArtifact",
    "Session",
    "RecordingSession",
    "RecordingSortOption",
    "CustomVoiceProfile",
    "TranscriptUpdate",
    "DetectionResult",
    # Events
    "AudioEvent",
    "SessionEventType",
    "SessionEvent",
    "OutcomeStatus",
    "SessionOutcome",
]
