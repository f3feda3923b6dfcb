"""Abstract base class for translation backends."""

from abc import ABC, abstractmethod


class AbstractTranslator(ABC):
    """Text-to-text translation capability."""

    @abstractmethod
    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        """Translate text between two languages.

        Args:
            text: Text to translate
            source_language: Code of the spoken language (e.g. 'en' or 'en-US')
            target_language: Code of the language to translate into

        Returns:
            Translated text

        Raises:
            TranslationUnavailable: If the service rejects the request
            NetworkError: If the service cannot be reached
        """
        pass
