"""Persistence facade turning finished sessions into stored recordings."""

import uuid
import logging
from pathlib import Path
from typing import List

from ..errors import PersistFailed, RecordingNotFound
from ..models.recording import RecordingSession, RecordingSortOption
from ..models.session import Session
from ..storage.stores import RecordingStore, AudioFileStore

logger = logging.getLogger(__name__)


class RecordingPersistence:
    """Commits session artifacts and exposes the recording library."""

    def __init__(self, recording_store: RecordingStore, audio_store: AudioFileStore):
        self.recording_store = recording_store
        self.audio_store = audio_store

    async def commit(self, session: Session, name: str) -> RecordingSession:
        """Store a session's audio and metadata as a RecordingSession.

        Audio saved before a failing metadata write is removed again.

        Raises:
            PersistFailed: If the audio or the metadata cannot be stored
        """
        audio_file_name = ""
        try:
            if session.audio_artifact is not None:
                audio_file_name = await self.audio_store.save(session.audio_artifact.data, name)

            recording = RecordingSession(
                id=str(uuid.uuid4()),
                name=name,
                date_created=session.started_at,
                duration=max(0.0, session.duration),
                audio_file_name=audio_file_name,
                source_language=session.input_language,
                target_language=session.output_language,
                transcription=session.working_transcript.strip(),
                translation=session.final_translation or "",
            )
            await self.recording_store.save(recording)
        except Exception as e:
            logger.error(f"Error committing session {session.id}: {e}")
            if audio_file_name:
                await self._discard_audio(audio_file_name)
            raise PersistFailed(e) from e

        logger.info(f"Committed session {session.id} as recording {recording.id} ('{name}')")
        return recording

    async def _discard_audio(self, audio_file_name: str) -> None:
        try:
            await self.audio_store.delete(audio_file_name)
        except Exception as e:
            logger.warning(f"Could not remove orphaned audio file {audio_file_name}: {e}")

    async def list_recordings(self, sort_by: RecordingSortOption = RecordingSortOption.DATE_CREATED) -> List[RecordingSession]:
        return await self.recording_store.list(sort_by)

    async def get_recording(self, recording_id: str) -> RecordingSession:
        recording = await self.recording_store.get(recording_id)
        if recording is None:
            raise RecordingNotFound(f"Recording not found: {recording_id}")
        return recording

    async def delete_recording(self, recording_id: str) -> None:
        """Delete a recording together with its audio file."""
        recording = await self.get_recording(recording_id)
        if recording.audio_file_name:
            try:
                await self.audio_store.delete(recording.audio_file_name)
            except FileNotFoundError:
                logger.warning(f"Audio file {recording.audio_file_name} already gone")
        await self.recording_store.delete(recording_id)

    async def set_favorite(self, recording_id: str, is_favorite: bool) -> RecordingSession:
        return await self.recording_store.set_favorite(recording_id, is_favorite)

    async def load_audio(self, recording: RecordingSession) -> Path:
        """Path of a recording's synthesized audio.

        Raises:
            FileNotFoundError: If the recording has no (existing) audio file
        """
        if not recording.audio_file_name:
            raise FileNotFoundError(f"Recording {recording.id} has no audio")
        return await self.audio_store.load(recording.audio_file_name)
