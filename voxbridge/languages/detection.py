"""Language detection gate for interim transcripts."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from google.cloud import translate_v2 as translate
from google.oauth2 import service_account

from . import registry
from ..models.transcription import DetectionResult

logger = logging.getLogger(__name__)

UNDETERMINED = "und"


class LanguageIdentifier(ABC):
    """Capability that names the dominant language of a piece of text."""

    @abstractmethod
    async def identify(self, text: str) -> Tuple[Optional[str], float]:
        """Identify the language of text.

        Returns:
            Tuple of (language code or None, confidence between 0 and 1)
        """
        pass


class GoogleLanguageIdentifier(LanguageIdentifier):
    """Language identification through Google Cloud Translation."""

    def __init__(self, credentials_path: str):
        if not credentials_path:
            raise ValueError("Google credentials path is required - cannot initialize without credentials")
        self.credentials_path = credentials_path
        self.client = None

    def initialize(self) -> bool:
        logger.info(f"Loading Google credentials from: {self.credentials_path}")
        credentials = service_account.Credentials.from_service_account_file(self.credentials_path)
        self.client = translate.Client(credentials=credentials)
        logger.info("Google language identifier initialized successfully")
        return True

    async def identify(self, text: str) -> Tuple[Optional[str], float]:
        if self.client is None:
            self.initialize()
        result = await asyncio.to_thread(self.client.detect_language, text)
        language = result.get("language")
        confidence = float(result.get("confidence") or 0.0)
        logger.debug(f"Detected language '{language}' (confidence: {confidence:.2f})")
        return language, confidence


class LanguageDetectionGate:
    """Decides whether an interim transcript warrants a language switch prompt."""

    def __init__(self, identifier: LanguageIdentifier, min_confidence: float = 0.5):
        """Initialize detection gate.

        Args:
            identifier: Capability used to identify the transcript language
            min_confidence: Results below this confidence count as ambiguous
        """
        self.identifier = identifier
        self.min_confidence = min_confidence

    async def detect(self, transcript: str) -> DetectionResult:
        """Identify the transcript's language and check it against the registry."""
        code, confidence = await self.identifier.identify(transcript)

        if not code or code == UNDETERMINED or confidence < self.min_confidence:
            logger.debug(f"Ambiguous detection result: code={code}, confidence={confidence:.2f}")
            return DetectionResult(language_code=None, is_supported=False, confidence=confidence)

        base = registry.base_code(code)
        return DetectionResult(
            language_code=base,
            is_supported=registry.is_detectable(base),
            confidence=confidence,
        )

    @staticmethod
    def should_prompt(result: DetectionResult, input_language: str, output_language: str) -> bool:
        """True if the user should be asked to switch the input language.

        Unsupported or ambiguous results never prompt. Neither does a result
        matching the current input or the output language.
        """
        if result.language_code is None or not result.is_supported:
            return False
        detected = registry.base_code(result.language_code)
        return detected != registry.base_code(input_language) and detected != registry.base_code(output_language)
