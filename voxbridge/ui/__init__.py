"""Terminal user interface components."""

from .console import ConsoleView

__all__ = ["ConsoleView"]
