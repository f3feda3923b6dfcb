"""Async recording and audio stores backed by the FileManager."""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from .file_manager import FileManager, AudioSource
from ..errors import RecordingNotFound
from ..models.recording import RecordingSession, RecordingSortOption

logger = logging.getLogger(__name__)


class RecordingStore(ABC):
    """Persistent store of RecordingSession metadata."""

    @abstractmethod
    async def save(self, recording: RecordingSession) -> str:
        """Store a recording and return its id."""
        pass

    @abstractmethod
    async def get(self, recording_id: str) -> Optional[RecordingSession]:
        pass

    @abstractmethod
    async def list(self, sort_by: RecordingSortOption = RecordingSortOption.DATE_CREATED) -> List[RecordingSession]:
        pass

    @abstractmethod
    async def delete(self, recording_id: str) -> None:
        """Raises RecordingNotFound if no such recording exists."""
        pass

    @abstractmethod
    async def set_favorite(self, recording_id: str, is_favorite: bool) -> RecordingSession:
        """Raises RecordingNotFound if no such recording exists."""
        pass


class AudioFileStore(ABC):
    """Named audio file storage."""

    @abstractmethod
    async def save(self, source: AudioSource, logical_name: str) -> str:
        """Store audio bytes or copy an audio file; returns the stored file name."""
        pass

    @abstractmethod
    async def load(self, file_name: str) -> Path:
        pass

    @abstractmethod
    async def delete(self, file_name: str) -> None:
        pass


class FileRecordingStore(RecordingStore):
    """Recordings as JSON files in the data directory."""

    def __init__(self, file_manager: FileManager):
        self.file_manager = file_manager

    async def save(self, recording: RecordingSession) -> str:
        await asyncio.to_thread(self.file_manager.save_recording, recording)
        return recording.id

    async def get(self, recording_id: str) -> Optional[RecordingSession]:
        return await asyncio.to_thread(self.file_manager.load_recording, recording_id)

    async def list(self, sort_by: RecordingSortOption = RecordingSortOption.DATE_CREATED) -> List[RecordingSession]:
        recordings = await asyncio.to_thread(self.file_manager.list_recordings)
        return sort_by.sort(recordings)

    async def delete(self, recording_id: str) -> None:
        deleted = await asyncio.to_thread(self.file_manager.delete_recording, recording_id)
        if not deleted:
            raise RecordingNotFound(f"Recording not found: {recording_id}")

    async def set_favorite(self, recording_id: str, is_favorite: bool) -> RecordingSession:
        recording = await self.get(recording_id)
        if recording is None:
            raise RecordingNotFound(f"Recording not found: {recording_id}")
        updated = recording.with_favorite(is_favorite)
        await asyncio.to_thread(self.file_manager.save_recording, updated)
        logger.info(f"Recording {recording_id} favorite set to {is_favorite}")
        return updated


class FileAudioStore(AudioFileStore):
    """Audio files in the data directory's audio folder."""

    def __init__(self, file_manager: FileManager, extension: str = ".mp3"):
        self.file_manager = file_manager
        self.extension = extension

    async def save(self, source: AudioSource, logical_name: str) -> str:
        return await asyncio.to_thread(self.file_manager.save_audio_file, source, logical_name, self.extension)

    async def load(self, file_name: str) -> Path:
        return await asyncio.to_thread(self.file_manager.load_audio_file, file_name)

    async def delete(self, file_name: str) -> None:
        await asyncio.to_thread(self.file_manager.delete_audio_file, file_name)
