"""Audio capture module."""

from .microphone import MicrophoneCapture

__all__ = [
    'MicrophoneCapture',
]
