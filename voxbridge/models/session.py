"""Session-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class SessionState(Enum):
    """States of the recording session state machine."""
    IDLE = "idle"
    CAPTURING = "capturing"
    STOPPING = "stopping"
    TRANSLATING = "translating"
    SYNTHESIZING = "synthesizing"
    READY = "ready"
    COMMITTED = "committed"


class VoiceKind(Enum):
    """Logical voice choices offered to the user."""
    MALE = "male"
    FEMALE = "female"
    CUSTOM = "custom"


@dataclass(frozen=True)
class VoiceSelection:
    """A logical voice selection, resolved to a concrete voice id at synthesis time."""
    kind: VoiceKind
    custom_voice_id: Optional[str] = None  # CustomVoiceProfile.id; None means "the active one"

    @classmethod
    def male(cls) -> "VoiceSelection":
        return cls(VoiceKind.MALE)

    @classmethod
    def female(cls) -> "VoiceSelection":
        return cls(VoiceKind.FEMALE)

    @classmethod
    def custom(cls, profile_id: Optional[str] = None) -> "VoiceSelection":
        return cls(VoiceKind.CUSTOM, profile_id)

    @classmethod
    def parse(cls, value: str) -> "VoiceSelection":
        """Parse 'male', 'female', 'custom' or 'custom:<profile id>'."""
        kind, _, profile_id = value.partition(":")
        return cls(VoiceKind(kind.strip().lower()), profile_id.strip() or None)


@dataclass
class AudioArtifact:
    """Synthesized speech for a session's translation."""
    data: bytes
    voice_id: str
    mime_type: str = "audio/mpeg"
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass
class Session:
    """Ephemeral, in-memory state of one recording session.

    Owned by the SessionOrchestrator and dropped once the session is committed
    or discarded. Never persisted directly.
    """
    id: str
    input_language: str
    output_language: str
    voice: VoiceSelection
    detection_enabled: bool
    started_at: datetime
    state: SessionState = SessionState.IDLE
    working_transcript: str = ""  # Replaced wholesale on every transcript update
    final_translation: Optional[str] = None
    audio_artifact: Optional[AudioArtifact] = None
    duration: float = 0.0  # Seconds between start and stop
