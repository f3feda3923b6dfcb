"""DeepL translation backend."""

import asyncio
import logging
import aiohttp
from typing import Any, Dict

from .base import AbstractTranslator
from ..errors import TranslationUnavailable, NetworkError
from ..languages.registry import base_code

logger = logging.getLogger(__name__)

DEEPL_FREE_URL = "https://api-free.deepl.com/v2/translate"  # Use api.deepl.com for Pro

# DeepL wants a regional variant for these target languages
_TARGET_VARIANTS = {
    "en": "EN-US",
    "pt": "PT-BR",
    "zh": "ZH-HANS",
}


def source_code(language_code: str) -> str:
    """DeepL source language code: always the bare, upper-cased base code."""
    return base_code(language_code).upper()


def target_code(language_code: str) -> str:
    """DeepL target language code, keeping an explicit regional variant."""
    normalized = language_code.replace("_", "-").upper()
    if "-" in normalized and base_code(language_code) in _TARGET_VARIANTS:
        return normalized
    return _TARGET_VARIANTS.get(base_code(language_code), base_code(language_code).upper())


def parse_translation(payload: Dict[str, Any]) -> str:
    """Extract the translated text from a DeepL response body."""
    try:
        return payload["translations"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise NetworkError(f"Unexpected DeepL response format: {payload!r}") from e


class DeepLTranslator(AbstractTranslator):
    """Translation through the DeepL REST API."""

    def __init__(self, api_key: str, api_url: str = DEEPL_FREE_URL, timeout_seconds: float = 15.0):
        """Initialize DeepL translator.

        Args:
            api_key: DeepL authentication key
            api_url: Translate endpoint (free or pro)
            timeout_seconds: Total request timeout
        """
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)

        logger.info(f"DeepLTranslator initialized with endpoint: {api_url}")

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        headers = {
            "Authorization": f"DeepL-Auth-Key {self.api_key}",
        }
        data = {
            "text": text,
            "source_lang": source_code(source_language),
            "target_lang": target_code(target_language),
        }

        logger.debug(f"Translating {len(text)} chars {data['source_lang']} -> {data['target_lang']}")
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(self.api_url, headers=headers, data=data) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise TranslationUnavailable(f"DeepL API error: {response.status} - {error_text}")

                    result = await response.json()
        except aiohttp.ClientError as e:
            raise NetworkError(f"DeepL request failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise NetworkError("DeepL request timed out") from e

        translated = parse_translation(result)
        logger.info(f"Translation received ({len(translated)} chars)")
        return translated
