"""Transcription module for VoxBridge."""

from .base import AbstractSpeechBackend, TranscriptStream, QueueTranscriptStream
from ..models.transcription import TranscriptUpdate
from .google_backend import GoogleStreamingSpeechBackend, TranscriptAssembler

__all__ = [
    "AbstractSpeechBackend",
    "TranscriptStream",
    "QueueTranscriptStream",
    "TranscriptUpdate",
    "GoogleStreamingSpeechBackend",
    "TranscriptAssembler",
]
