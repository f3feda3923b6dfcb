"""File management module for audio files and recording metadata."""

import os
import re
import json
import uuid
import shutil
import logging
import threading
from pathlib import Path
from typing import Dict, Any, Optional, List, Union

from ..models.recording import RecordingSession


logger = logging.getLogger(__name__)

AudioSource = Union[bytes, str, Path]


def safe_file_stem(name: str) -> str:
    """Reduce a user-facing name to characters safe for a file name."""
    stem = re.sub(r"[^A-Za-z0-9_-]+", "_", name).strip("_")
    return stem or "Recording"


class FileManager:
    """Manages file storage for synthesized audio and recording metadata."""

    def __init__(self, data_dir: str = "./data"):
        """Initialize file manager with data directory.

        Args:
            data_dir: Base directory for storing all data
        """
        self.data_dir = Path(data_dir)
        self.audio_dir = self.data_dir / "audio"
        self.recordings_dir = self.data_dir / "recordings"
        self.logs_dir = self.data_dir / "logs"
        self._lock = threading.RLock()

        self._ensure_directories()

        logger.info(f"FileManager initialized with data_dir: {self.data_dir}")

    def _ensure_directories(self) -> None:
        """Ensure all required directories exist."""
        for directory in [self.data_dir, self.audio_dir, self.recordings_dir, self.logs_dir]:
            directory.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Ensured directory exists: {directory}")

    def save_audio_file(self, source: AudioSource, logical_name: str, extension: str = ".mp3") -> str:
        """Store audio under a unique file name derived from logical_name.

        Args:
            source: Raw audio bytes, or the path of an existing audio file to copy
            logical_name: Human-readable name the file name is based on
            extension: File extension used for raw bytes

        Returns:
            File name (relative to the audio directory)
        """
        if not isinstance(source, (bytes, bytearray)):
            extension = Path(source).suffix or extension
        if not extension.startswith('.'):
            extension = '.' + extension

        file_name = f"{safe_file_stem(logical_name)}_{uuid.uuid4().hex}{extension}"
        destination = self.audio_dir / file_name

        try:
            if isinstance(source, (bytes, bytearray)):
                with open(destination, 'wb') as f:
                    f.write(source)
            else:
                shutil.copyfile(source, destination)
        except Exception as e:
            logger.error(f"Error saving audio file: {e}")
            raise

        logger.info(f"Audio file saved: {destination} ({destination.stat().st_size} bytes)")
        return file_name

    def load_audio_file(self, file_name: str) -> Path:
        """Resolve a stored audio file name to its path.

        Raises:
            FileNotFoundError: If no such audio file exists
        """
        file_path = self.audio_dir / file_name
        if not file_path.is_file():
            raise FileNotFoundError(f"Audio file not found: {file_path}")
        return file_path

    def delete_audio_file(self, file_name: str) -> None:
        """Delete a stored audio file.

        Raises:
            FileNotFoundError: If no such audio file exists
        """
        file_path = self.load_audio_file(file_name)
        file_path.unlink()
        logger.info(f"Deleted audio file: {file_path}")

    def _recording_path(self, recording_id: str) -> Path:
        return self.recordings_dir / f"{recording_id}.json"

    def save_recording(self, recording: RecordingSession) -> str:
        """Save recording metadata to a JSON file.

        Returns:
            Path to saved recording file
        """
        info_file = self._recording_path(recording.id)
        tmp_file = info_file.with_suffix('.json.tmp')

        with self._lock:
            try:
                with open(tmp_file, 'w', encoding='utf-8') as f:
                    json.dump(recording.to_dict(), f, indent=2, ensure_ascii=False)
                os.replace(tmp_file, info_file)
            except Exception as e:
                logger.error(f"Error saving recording {recording.id}: {e}")
                if tmp_file.exists():
                    tmp_file.unlink()
                raise

        logger.info(f"Recording saved: {info_file}")
        return str(info_file)

    def load_recording(self, recording_id: str) -> Optional[RecordingSession]:
        """Load recording metadata from its JSON file.

        Returns:
            RecordingSession or None if not found or unreadable
        """
        info_file = self._recording_path(recording_id)

        if not info_file.exists():
            logger.warning(f"Recording file not found: {info_file}")
            return None

        try:
            with open(info_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return RecordingSession.from_dict(data)
        except Exception as e:
            logger.error(f"Error loading recording {recording_id}: {e}")
            return None

    def list_recordings(self) -> List[RecordingSession]:
        """Load every readable recording (unsorted)."""
        recordings = []
        for path in self.recordings_dir.glob("*.json"):
            recording = self.load_recording(path.stem)
            if recording is not None:
                recordings.append(recording)

        logger.debug(f"Found {len(recordings)} recordings")
        return recordings

    def delete_recording(self, recording_id: str) -> bool:
        """Delete recording metadata.

        Returns:
            True if a recording was deleted
        """
        info_file = self._recording_path(recording_id)
        with self._lock:
            if not info_file.exists():
                return False
            info_file.unlink()
        logger.info(f"Deleted recording: {recording_id}")
        return True

    def get_storage_stats(self) -> Dict[str, Any]:
        """Get storage usage statistics.

        Returns:
            Dictionary with storage statistics
        """
        try:
            audio_files = [p for p in self.audio_dir.iterdir() if p.is_file()]
            recording_files = list(self.recordings_dir.glob("*.json"))
            total_size = sum(p.stat().st_size for p in audio_files + recording_files)

            return {
                "total_size_bytes": total_size,
                "total_size_mb": round(total_size / (1024 * 1024), 2),
                "recording_count": len(recording_files),
                "audio_files": len(audio_files),
                "data_directory": str(self.data_dir)
            }

        except Exception as e:
            logger.error(f"Error getting storage stats: {e}")
            return {}
