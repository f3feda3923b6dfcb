"""User-scoped custom voice profiles and the active voice selection."""

import os
import json
import uuid
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List, Optional

from ..errors import VoiceProfileNotFound
from ..models.voice import CustomVoiceProfile

logger = logging.getLogger(__name__)


class CustomVoiceStore:
    """Custom voice profiles persisted to a JSON file.

    All reads and writes go through one lock, and profiles are immutable, so a
    reader always sees a consistent snapshot.
    """

    def __init__(self, store_path: str):
        """Initialize voice store.

        Args:
            store_path: JSON file holding the profiles and the active voice id
        """
        self.store_path = Path(store_path)
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._voices: Dict[str, CustomVoiceProfile] = {}
        self._active_voice_id: Optional[str] = None
        self._load()
        logger.info(f"CustomVoiceStore loaded {len(self._voices)} voices from {self.store_path}")

    def _load(self) -> None:
        if not self.store_path.exists():
            return
        try:
            with open(self.store_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            voices = [CustomVoiceProfile.from_dict(item) for item in data.get('voices', [])]
            self._voices = {voice.id: voice for voice in voices}
            self._active_voice_id = data.get('active_voice_id')
        except Exception as e:
            logger.error(f"Error loading custom voices, starting empty: {e}")
            self._voices = {}
            self._active_voice_id = None

    def _save(self) -> None:
        data: Dict[str, Any] = {
            'voices': [voice.to_dict() for voice in self._voices.values()],
            'active_voice_id': self._active_voice_id,
        }
        tmp_path = self.store_path.with_suffix('.json.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.store_path)

    def add_voice(self, name: str, voice_id: str) -> CustomVoiceProfile:
        """Register a new custom voice."""
        if not name.strip() or not voice_id.strip():
            raise ValueError("Custom voice needs a name and a voice id")
        profile = CustomVoiceProfile(
            id=str(uuid.uuid4()),
            name=name.strip(),
            voice_id=voice_id.strip(),
            date_added=datetime.now(),
        )
        with self._lock:
            self._voices[profile.id] = profile
            self._save()
        logger.info(f"Added custom voice '{profile.name}' ({profile.id})")
        return profile

    def rename_voice(self, profile_id: str, new_name: str) -> CustomVoiceProfile:
        """Rename a profile, keeping its id and voice id."""
        if not new_name.strip():
            raise ValueError("Custom voice name cannot be empty")
        with self._lock:
            profile = self._require(profile_id)
            renamed = CustomVoiceProfile(
                id=profile.id,
                name=new_name.strip(),
                voice_id=profile.voice_id,
                date_added=profile.date_added,
            )
            self._voices[profile_id] = renamed
            self._save()
        return renamed

    def delete_voice(self, profile_id: str) -> None:
        """Delete a profile; clears the active selection if it pointed here."""
        with self._lock:
            self._require(profile_id)
            del self._voices[profile_id]
            if self._active_voice_id == profile_id:
                self._active_voice_id = None
            self._save()
        logger.info(f"Deleted custom voice {profile_id}")

    def get_voice(self, profile_id: str) -> Optional[CustomVoiceProfile]:
        with self._lock:
            return self._voices.get(profile_id)

    def list_voices(self) -> List[CustomVoiceProfile]:
        """All profiles, newest first."""
        with self._lock:
            voices = list(self._voices.values())
        return sorted(voices, key=lambda voice: voice.date_added, reverse=True)

    def set_active_voice(self, profile_id: str) -> CustomVoiceProfile:
        with self._lock:
            profile = self._require(profile_id)
            self._active_voice_id = profile_id
            self._save()
        logger.info(f"Active custom voice set to '{profile.name}'")
        return profile

    def clear_active_voice(self) -> None:
        with self._lock:
            self._active_voice_id = None
            self._save()

    def active_voice(self) -> Optional[CustomVoiceProfile]:
        """Snapshot of the active profile, or None.

        An active id that no longer matches a profile is cleared.
        """
        with self._lock:
            if self._active_voice_id is None:
                return None
            profile = self._voices.get(self._active_voice_id)
            if profile is None:
                logger.warning(f"Active custom voice {self._active_voice_id} no longer exists, clearing")
                self._active_voice_id = None
                self._save()
            return profile

    def _require(self, profile_id: str) -> CustomVoiceProfile:
        profile = self._voices.get(profile_id)
        if profile is None:
            raise VoiceProfileNotFound(f"Custom voice not found: {profile_id}")
        return profile
