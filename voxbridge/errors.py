"""Exception types raised by VoxBridge components."""

from typing import Optional


class VoxBridgeError(Exception):
    """Base class for all VoxBridge errors."""


class CaptureUnavailable(VoxBridgeError):
    """Audio input could not be opened or the recognizer rejected the locale."""

    def __init__(self, message: str, locale: Optional[str] = None):
        super().__init__(message)
        self.locale = locale


class TranslationFailed(VoxBridgeError):
    """Translation of the final transcript failed.

    The transcript is kept on the exception so the caller can retry without
    re-recording.
    """

    def __init__(self, cause: BaseException, transcript: str = ""):
        super().__init__(f"Translation failed: {cause}")
        self.cause = cause
        self.transcript = transcript


class SynthesisFailed(VoxBridgeError):
    """Speech synthesis of the translation failed; the translation survives."""

    def __init__(self, cause: Optional[BaseException] = None, translation: str = "", message: Optional[str] = None):
        super().__init__(message or f"Speech synthesis failed: {cause}")
        self.cause = cause
        self.translation = translation


class CustomVoiceNotConfigured(SynthesisFailed):
    """A custom voice was requested but no active custom voice profile exists."""

    def __init__(self, message: str = "No active custom voice is configured"):
        super().__init__(cause=None, message=message)


class PersistFailed(VoxBridgeError):
    """Saving a recording (audio file or metadata) failed."""

    def __init__(self, cause: BaseException):
        super().__init__(f"Failed to persist recording: {cause}")
        self.cause = cause


class InvalidStateForOperation(VoxBridgeError):
    """An operation was attempted in a state that does not allow it."""

    def __init__(self, operation: str, state):
        state_name = getattr(state, "value", state)
        super().__init__(f"Cannot {operation} while session is {state_name}")
        self.operation = operation
        self.state = state


class RecordingNotFound(VoxBridgeError):
    """No stored recording has the requested id."""


class VoiceProfileNotFound(VoxBridgeError):
    """No custom voice profile has the requested id."""


# Capability-level errors raised by adapters

class TranslationUnavailable(VoxBridgeError):
    """The translation service rejected the request or is not usable."""


class VoiceNotFound(VoxBridgeError):
    """The synthesis service does not know the requested voice id."""


class NetworkError(VoxBridgeError):
    """A remote capability could not be reached or returned garbage."""
