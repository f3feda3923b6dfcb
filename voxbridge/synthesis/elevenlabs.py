"""ElevenLabs text-to-speech backend."""

import asyncio
import logging
import aiohttp
from typing import Any, Dict

from .base import AbstractSynthesizer
from ..errors import VoiceNotFound, NetworkError

logger = logging.getLogger(__name__)

ELEVENLABS_TTS_URL = "https://api.elevenlabs.io/v1/text-to-speech"


def build_payload(text: str, model_id: str, stability: float, similarity_boost: float) -> Dict[str, Any]:
    return {
        "text": text,
        "model_id": model_id,
        "voice_settings": {
            "stability": stability,
            "similarity_boost": similarity_boost,
        },
    }


class ElevenLabsSynthesizer(AbstractSynthesizer):
    """Speech synthesis through the ElevenLabs REST API."""

    def __init__(self,
                 api_key: str,
                 base_url: str = ELEVENLABS_TTS_URL,
                 model_id: str = "eleven_multilingual_v2",
                 stability: float = 0.5,
                 similarity_boost: float = 0.75,
                 timeout_seconds: float = 30.0):
        """Initialize ElevenLabs synthesizer.

        Args:
            api_key: ElevenLabs API key
            base_url: Text-to-speech endpoint; the voice id is appended
            model_id: Synthesis model (multilingual for translated speech)
            stability: Voice stability setting (0.0 to 1.0)
            similarity_boost: Voice similarity setting (0.0 to 1.0)
            timeout_seconds: Total request timeout
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model_id = model_id
        self.stability = stability
        self.similarity_boost = similarity_boost
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)

        logger.info(f"ElevenLabsSynthesizer initialized with model: {model_id}")

    async def synthesize(self, text: str, voice_id: str) -> bytes:
        url = f"{self.base_url}/{voice_id}"
        headers = {
            "xi-api-key": self.api_key,
            "Content-Type": "application/json",
            "Accept": self.mime_type,
        }
        payload = build_payload(text, self.model_id, self.stability, self.similarity_boost)

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(url, headers=headers, json=payload) as response:
                    if not 200 <= response.status < 300:
                        error_text = await response.text()
                        if response.status in (400, 404) and "voice" in error_text.lower():
                            raise VoiceNotFound(f"ElevenLabs does not know voice '{voice_id}': {error_text}")
                        raise NetworkError(f"ElevenLabs API error: {response.status} - {error_text}")

                    audio = await response.read()
        except aiohttp.ClientError as e:
            raise NetworkError(f"ElevenLabs request failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise NetworkError("ElevenLabs request timed out") from e

        if not audio:
            raise NetworkError("ElevenLabs returned no audio")

        logger.info(f"Synthesized {len(audio)} bytes of audio with voice {voice_id}")
        return audio
