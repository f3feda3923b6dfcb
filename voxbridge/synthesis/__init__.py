"""Text-to-speech backends for VoxBridge."""

from .base import AbstractSynthesizer
from .elevenlabs import ElevenLabsSynthesizer

__all__ = [
    "AbstractSynthesizer",
    "ElevenLabsSynthesizer",
]
