"""Resolves logical voice selections to concrete synthesis voice ids."""

import logging

from .voice_profiles import CustomVoiceStore
from ..errors import CustomVoiceNotConfigured
from ..languages import registry
from ..models.session import VoiceKind, VoiceSelection

logger = logging.getLogger(__name__)


class CustomVoiceResolver:
    """Maps male/female/custom selections to voice ids for an output language."""

    def __init__(self, voice_store: CustomVoiceStore):
        self.voice_store = voice_store

    def resolve(self, voice: VoiceSelection, output_language: str) -> str:
        """Resolve a voice selection.

        Raises:
            CustomVoiceNotConfigured: If a custom voice is requested and none is usable
        """
        if voice.kind is VoiceKind.CUSTOM:
            if voice.custom_voice_id:
                profile = self.voice_store.get_voice(voice.custom_voice_id)
                if profile is None:
                    raise CustomVoiceNotConfigured(f"Custom voice {voice.custom_voice_id} does not exist")
            else:
                profile = self.voice_store.active_voice()
                if profile is None:
                    raise CustomVoiceNotConfigured()
            logger.debug(f"Resolved custom voice '{profile.name}' -> {profile.voice_id}")
            return profile.voice_id

        if not registry.is_supported(output_language):
            logger.warning(f"No default voices for '{output_language}', using {registry.DEFAULT_LANGUAGE}")
        return registry.default_voice_id(output_language, female=voice.kind is VoiceKind.FEMALE)
