"""Unit tests for the file-backed stores and the recording persistence facade."""

import pytest
from datetime import datetime, timedelta

from test_file_manager import make_recording
from voxbridge.errors import PersistFailed, RecordingNotFound
from voxbridge.models.recording import RecordingSortOption
from voxbridge.models.session import Session, VoiceSelection, AudioArtifact
from voxbridge.services import RecordingPersistence
from voxbridge.storage import FileRecordingStore, FileAudioStore


def make_session(**overrides) -> Session:
    fields = dict(
        id="session-1",
        input_language="en",
        output_language="es",
        voice=VoiceSelection.male(),
        detection_enabled=False,
        started_at=datetime(2024, 5, 1, 9, 30),
        working_transcript="  hello there friend ",
        final_translation="hola amigo",
        audio_artifact=AudioArtifact(data=b"ID3audio", voice_id="voice-1"),
        duration=3.5,
    )
    fields.update(overrides)
    return Session(**fields)


@pytest.mark.unit
class TestFileRecordingStore:
    """Test cases for FileRecordingStore."""

    @pytest.mark.asyncio
    async def test_save_and_get(self, file_manager):
        store = FileRecordingStore(file_manager)
        recording = make_recording()

        assert await store.save(recording) == recording.id
        assert await store.get(recording.id) == recording
        assert await store.get("missing") is None

    @pytest.mark.asyncio
    async def test_list_sort_options(self, file_manager):
        store = FileRecordingStore(file_manager)
        base = datetime(2024, 1, 1)
        await store.save(make_recording("a", name="beta", date_created=base, duration=10))
        await store.save(make_recording("b", name="Alpha", date_created=base + timedelta(days=1), duration=5))
        await store.save(make_recording("c", name="gamma", date_created=base + timedelta(days=2), duration=20))

        by_date = await store.list()
        by_name = await store.list(RecordingSortOption.NAME)
        by_duration = await store.list(RecordingSortOption.DURATION)

        assert [r.id for r in by_date] == ["c", "b", "a"]
        assert [r.id for r in by_name] == ["b", "a", "c"]
        assert [r.id for r in by_duration] == ["c", "a", "b"]

    @pytest.mark.asyncio
    async def test_set_favorite(self, file_manager):
        store = FileRecordingStore(file_manager)
        await store.save(make_recording())

        updated = await store.set_favorite("rec-1", True)

        assert updated.is_favorite is True
        assert (await store.get("rec-1")).is_favorite is True
        assert (await store.set_favorite("rec-1", False)).is_favorite is False

    @pytest.mark.asyncio
    async def test_missing_recording_raises(self, file_manager):
        store = FileRecordingStore(file_manager)

        with pytest.raises(RecordingNotFound):
            await store.delete("missing")
        with pytest.raises(RecordingNotFound):
            await store.set_favorite("missing", True)


@pytest.mark.unit
class TestRecordingPersistence:
    """Test cases for RecordingPersistence."""

    @pytest.mark.asyncio
    async def test_commit_builds_recording(self, persistence):
        recording = await persistence.commit(make_session(), "Test1")

        assert recording.name == "Test1"
        assert recording.transcription == "hello there friend"
        assert recording.translation == "hola amigo"
        assert recording.source_language == "en"
        assert recording.target_language == "es"
        assert recording.date_created == datetime(2024, 5, 1, 9, 30)
        assert recording.duration == 3.5
        assert recording.is_favorite is False
        assert (await persistence.load_audio(recording)).read_bytes() == b"ID3audio"
        assert await persistence.get_recording(recording.id) == recording

    @pytest.mark.asyncio
    async def test_commit_without_audio(self, persistence):
        recording = await persistence.commit(make_session(audio_artifact=None, duration=-1.0), "No audio")

        assert recording.audio_file_name == ""
        assert recording.duration == 0.0
        with pytest.raises(FileNotFoundError):
            await persistence.load_audio(recording)

    @pytest.mark.asyncio
    async def test_commit_failure_removes_saved_audio(self, file_manager):
        class BrokenStore(FileRecordingStore):
            async def save(self, recording):
                raise OSError("read-only file system")

        persistence = RecordingPersistence(BrokenStore(file_manager), FileAudioStore(file_manager))

        with pytest.raises(PersistFailed) as exc_info:
            await persistence.commit(make_session(), "Test1")

        assert isinstance(exc_info.value.cause, OSError)
        assert list(file_manager.audio_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_delete_removes_audio(self, persistence, file_manager):
        recording = await persistence.commit(make_session(), "Test1")

        await persistence.delete_recording(recording.id)

        assert await persistence.list_recordings() == []
        assert list(file_manager.audio_dir.iterdir()) == []
        with pytest.raises(RecordingNotFound):
            await persistence.delete_recording(recording.id)

    @pytest.mark.asyncio
    async def test_delete_tolerates_missing_audio(self, persistence, file_manager):
        recording = await persistence.commit(make_session(), "Test1")
        (file_manager.audio_dir / recording.audio_file_name).unlink()

        await persistence.delete_recording(recording.id)

        assert await persistence.list_recordings() == []

    @pytest.mark.asyncio
    async def test_favorite(self, persistence):
        recording = await persistence.commit(make_session(), "Test1")

        updated = await persistence.set_favorite(recording.id, True)

        assert updated.is_favorite
        assert updated.translation == recording.translation
