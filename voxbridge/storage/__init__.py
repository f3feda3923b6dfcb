"""Storage layer for recordings and audio files."""

from .file_manager import FileManager
from .stores import RecordingStore, AudioFileStore, FileRecordingStore, FileAudioStore

__all__ = [
    "FileManager",
    "RecordingStore",
    "AudioFileStore",
    "FileRecordingStore",
    "FileAudioStore",
]
