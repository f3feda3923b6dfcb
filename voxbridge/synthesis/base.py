"""Abstract base class for text-to-speech backends."""

from abc import ABC, abstractmethod


class AbstractSynthesizer(ABC):
    """Text-to-speech capability."""

    mime_type = "audio/mpeg"

    @abstractmethod
    async def synthesize(self, text: str, voice_id: str) -> bytes:
        """Render text as speech with the given voice.

        Raises:
            VoiceNotFound: If the service does not know voice_id
            NetworkError: If the service cannot be reached or fails
        """
        pass
