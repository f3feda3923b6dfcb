"""Persisted recording data models."""

from dataclasses import dataclass, asdict, replace
from datetime import datetime
from enum import Enum
from typing import Dict, Any, List


@dataclass(frozen=True)
class RecordingSession:
    """A stored recording: source transcript, translation and audio reference."""
    id: str
    name: str
    date_created: datetime
    duration: float  # Seconds
    audio_file_name: str
    source_language: str
    target_language: str
    transcription: str
    translation: str
    is_favorite: bool = False

    def with_favorite(self, is_favorite: bool) -> "RecordingSession":
        return replace(self, is_favorite=is_favorite)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['date_created'] = self.date_created.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecordingSession":
        data = dict(data)
        data['date_created'] = datetime.fromisoformat(data['date_created'])
        data['duration'] = float(data.get('duration', 0.0))
        data.setdefault('is_favorite', False)
        return cls(**data)


class RecordingSortOption(Enum):
    """Orderings supported when listing recordings."""
    DATE_CREATED = "date_created"  # Newest first
    NAME = "name"
    DURATION = "duration"  # Longest first

    def sort(self, recordings: List[RecordingSession]) -> List[RecordingSession]:
        if self is RecordingSortOption.NAME:
            return sorted(recordings, key=lambda r: r.name.lower())
        if self is RecordingSortOption.DURATION:
            return sorted(recordings, key=lambda r: r.duration, reverse=True)
        return sorted(recordings, key=lambda r: r.date_created, reverse=True)
