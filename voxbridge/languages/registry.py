"""Static registry of supported languages, recognition locales and default voices."""

from dataclasses import dataclass
from typing import Dict, List, Optional

DEFAULT_LANGUAGE = "en"


@dataclass(frozen=True)
class Language:
    """A language the app can recognize, translate and speak."""
    code: str  # Base code, e.g. "es"
    display_name: str
    locale: str  # Locale handed to the speech recognizer, e.g. "es-ES"
    male_voice_id: str
    female_voice_id: str
    detectable: bool = True  # Part of the language detection set


# Voice ids are ElevenLabs premade voices; the multilingual model speaks any of
# these languages with any voice.
_LANGUAGES: List[Language] = [
    Language("en", "English (US)", "en-US", "pNInz6obpgDQGcFmaJgB", "21m00Tcm4TlvDq8ikWAM"),
    Language("es", "Spanish", "es-ES", "ErXwobaYiN019PkySvjV", "EXAVITQu4vr4xnAE8fpt"),
    Language("fr", "French", "fr-FR", "TxGEqnHWrfWFTfGW9XjX", "XB0fDUnXU5powFXDhCwa"),
    Language("de", "German", "de-DE", "VR6AewLTigWG4xSOukaG", "MF3mGyEYCl7XYWbV9V6O"),
    Language("it", "Italian", "it-IT", "yoZ06aMxZJJ28mfd3POQ", "AZnzlk1XvdvUeBnXmlld"),
    Language("pt", "Portuguese", "pt-BR", "ErXwobaYiN019PkySvjV", "EXAVITQu4vr4xnAE8fpt"),
    Language("ru", "Russian", "ru-RU", "TxGEqnHWrfWFTfGW9XjX", "XB0fDUnXU5powFXDhCwa"),
    Language("ko", "Korean", "ko-KR", "pNInz6obpgDQGcFmaJgB", "21m00Tcm4TlvDq8ikWAM"),
    Language("ja", "Japanese", "ja-JP", "VR6AewLTigWG4xSOukaG", "MF3mGyEYCl7XYWbV9V6O"),
    Language("zh", "Chinese", "zh-CN", "yoZ06aMxZJJ28mfd3POQ", "AZnzlk1XvdvUeBnXmlld", detectable=False),
]

_BY_CODE: Dict[str, Language] = {language.code: language for language in _LANGUAGES}


def base_code(language_code: str) -> str:
    """Strip region/script suffixes: 'en-US' -> 'en', 'zh_Hans' -> 'zh'."""
    return language_code.replace("_", "-").split("-")[0].strip().lower()


def get_language(language_code: str) -> Optional[Language]:
    """Look up a language by base code or full locale."""
    if not language_code:
        return None
    return _BY_CODE.get(base_code(language_code))


def is_supported(language_code: str) -> bool:
    return get_language(language_code) is not None


def is_detectable(language_code: str) -> bool:
    """True if the language is part of the detection set."""
    language = get_language(language_code)
    return language is not None and language.detectable


def display_name(language_code: str) -> str:
    """User-facing name for a code; unknown codes are returned unchanged."""
    language = get_language(language_code)
    return language.display_name if language else language_code


def recognition_locale(language_code: str) -> Optional[str]:
    """Locale to hand the recognizer.

    A full locale is passed through untouched; a bare base code maps to the
    registry's default locale for that language.
    """
    language = get_language(language_code)
    if language is None:
        return None
    if "-" in language_code.replace("_", "-"):
        return language_code
    return language.locale


def default_voice_id(language_code: str, female: bool) -> str:
    """Default synthesis voice for a language, falling back to the default language."""
    language = get_language(language_code) or _BY_CODE[DEFAULT_LANGUAGE]
    return language.female_voice_id if female else language.male_voice_id


def supported_languages() -> List[Language]:
    return list(_LANGUAGES)


def detectable_codes() -> List[str]:
    return [language.code for language in _LANGUAGES if language.detectable]
