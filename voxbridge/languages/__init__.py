"""Language registry and detection for VoxBridge."""

from .registry import (
    Language,
    DEFAULT_LANGUAGE,
    base_code,
    get_language,
    is_supported,
    display_name,
    default_voice_id,
    supported_languages,
)
from .detection import LanguageIdentifier, GoogleLanguageIdentifier, LanguageDetectionGate

__all__ = [
    "Language",
    "DEFAULT_LANGUAGE",
    "base_code",
    "get_language",
    "is_supported",
    "display_name",
    "default_voice_id",
    "supported_languages",
    "LanguageIdentifier",
    "GoogleLanguageIdentifier",
    "LanguageDetectionGate",
]
