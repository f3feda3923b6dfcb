"""Event and outcome models published by capture and the session orchestrator."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Any, Dict

from .session import SessionState, AudioArtifact


@dataclass
class AudioEvent:
    """Audio chunk captured from the microphone."""
    chunk_id: str
    audio_data: bytes
    timestamp: float  # Unix timestamp when chunk was captured
    sequence_number: int
    sample_rate: int = 16000
    channels: int = 1
    chunk_duration_ms: Optional[int] = None
    final: bool = False  # True for the last chunk before capture stops

    def __post_init__(self):
        """Calculate chunk duration if not provided."""
        if self.chunk_duration_ms is None and self.audio_data:
            # 16-bit audio (2 bytes per sample)
            bytes_per_second = self.sample_rate * self.channels * 2
            duration_seconds = len(self.audio_data) / bytes_per_second
            self.chunk_duration_ms = int(duration_seconds * 1000)


class SessionEventType(Enum):
    """Kinds of events an orchestrator publishes to its subscribers."""
    STATE_CHANGED = "state_changed"
    TRANSCRIPT_UPDATED = "transcript_updated"
    LANGUAGE_SWITCH_SUGGESTED = "language_switch_suggested"
    LANGUAGE_SWITCHED = "language_switched"
    LANGUAGES_SWAPPED = "languages_swapped"
    CAPTURE_FAILED = "capture_failed"
    TRANSCRIPT_SKIPPED = "transcript_skipped"
    TRANSLATION_READY = "translation_ready"
    TRANSLATION_FAILED = "translation_failed"
    SYNTHESIS_READY = "synthesis_ready"
    SYNTHESIS_FAILED = "synthesis_failed"
    COMMITTED = "committed"
    PERSIST_FAILED = "persist_failed"
    CANCELLED = "cancelled"


@dataclass
class SessionEvent:
    """Session lifecycle event."""
    event_id: str
    event_type: SessionEventType
    session_id: Optional[str]
    state: SessionState
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)


class OutcomeStatus(Enum):
    """How a stop (or re-synthesis) request ended."""
    READY = "ready"
    EMPTY_TRANSCRIPT_SKIPPED = "empty_transcript_skipped"
    TRANSLATION_FAILED = "translation_failed"
    SYNTHESIS_FAILED = "synthesis_failed"
    CANCELLED = "cancelled"


@dataclass
class SessionOutcome:
    """Result handed back to the caller of stop() or resynthesize().

    Carries every artifact produced so far so a failed step can be retried
    manually without re-recording.
    """
    status: OutcomeStatus
    session_id: Optional[str]
    transcript: str = ""
    translation: Optional[str] = None
    audio: Optional[AudioArtifact] = None
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.READY
