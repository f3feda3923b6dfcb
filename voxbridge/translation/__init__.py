"""Translation backends for VoxBridge."""

from .base import AbstractTranslator
from .deepl import DeepLTranslator

__all__ = [
    "AbstractTranslator",
    "DeepLTranslator",
]
