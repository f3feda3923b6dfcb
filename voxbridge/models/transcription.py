"""Transcription-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class TranscriptUpdate:
    """Best-effort transcript of everything heard so far in a stream.

    Each update replaces the previous one; it is not a delta.
    """
    text: str
    is_final: bool = False
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def token_count(self) -> int:
        return len(self.text.split())


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of identifying the spoken language of a transcript."""
    language_code: Optional[str]  # Base code (e.g. "es"); None when ambiguous
    is_supported: bool
    confidence: float = 0.0
