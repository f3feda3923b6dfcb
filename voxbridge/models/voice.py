"""Custom voice profile model."""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, Any


@dataclass(frozen=True)
class CustomVoiceProfile:
    """A user-registered synthesis voice (e.g. a cloned ElevenLabs voice)."""
    id: str
    name: str
    voice_id: str  # Opaque identifier understood by the synthesis service
    date_added: datetime

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['date_added'] = self.date_added.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CustomVoiceProfile":
        return cls(
            id=data['id'],
            name=data['name'],
            voice_id=data['voice_id'],
            date_added=datetime.fromisoformat(data['date_added']),
        )
