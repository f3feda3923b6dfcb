"""Pytest configuration and fixtures for VoxBridge tests."""

import pytest
import asyncio
import tempfile
import logging
from pathlib import Path
from typing import Callable, List, Optional, Tuple
from unittest.mock import Mock, patch

from voxbridge.languages.detection import LanguageIdentifier, LanguageDetectionGate
from voxbridge.models.events import SessionEvent, SessionEventType
from voxbridge.services import (
    CustomVoiceResolver,
    CustomVoiceStore,
    RecordingPersistence,
    SessionOrchestrator,
)
from voxbridge.storage import FileManager, FileRecordingStore, FileAudioStore
from voxbridge.synthesis.base import AbstractSynthesizer
from voxbridge.transcription.base import AbstractSpeechBackend, QueueTranscriptStream
from voxbridge.translation.base import AbstractTranslator


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class StubbornTranscriptStream(QueueTranscriptStream):
    """Stream that records close() but keeps delivering queued updates."""

    def __init__(self, locale: str):
        super().__init__(locale)
        self.close_calls = 0

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    def close(self) -> None:
        self.close_calls += 1


class FakeSpeechBackend(AbstractSpeechBackend):
    """Speech backend whose streams are fed by the test."""

    def __init__(self):
        self.opened_locales: List[str] = []
        self.streams: List[QueueTranscriptStream] = []
        self.fail_with: Optional[Exception] = None
        self.open_gate: Optional[asyncio.Event] = None
        self.ignore_close = False
        self.cleaned_up = False

    async def open_stream(self, locale: str) -> QueueTranscriptStream:
        self.opened_locales.append(locale)
        if self.open_gate is not None:
            await self.open_gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        stream = StubbornTranscriptStream(locale) if self.ignore_close else QueueTranscriptStream(locale)
        self.streams.append(stream)
        return stream

    @property
    def latest(self) -> QueueTranscriptStream:
        return self.streams[-1]

    def cleanup(self) -> None:
        self.cleaned_up = True


class FakeTranslator(AbstractTranslator):
    """Translator returning a canned result, optionally held back by a gate."""

    def __init__(self, result: str = "hola amigo"):
        self.result = result
        self.error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.swallow_cancel = False
        self.on_call: Optional[Callable[[], None]] = None
        self.cancelled = False
        self.calls: List[Tuple[str, str, str]] = []

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        self.calls.append((text, source_language, target_language))
        if self.on_call is not None:
            self.on_call()
        if self.gate is not None:
            try:
                await self.gate.wait()
            except asyncio.CancelledError:
                self.cancelled = True
                if not self.swallow_cancel:
                    raise
        if self.error is not None:
            raise self.error
        return self.result


class FakeSynthesizer(AbstractSynthesizer):
    """Synthesizer returning canned audio bytes."""

    def __init__(self, audio: bytes = b"ID3-fake-mp3"):
        self.audio = audio
        self.error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.on_call: Optional[Callable[[], None]] = None
        self.calls: List[Tuple[str, str]] = []

    async def synthesize(self, text: str, voice_id: str) -> bytes:
        self.calls.append((text, voice_id))
        if self.on_call is not None:
            self.on_call()
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.audio


class FakeIdentifier(LanguageIdentifier):
    """Language identifier with a fixed answer."""

    def __init__(self, code: Optional[str] = "en", confidence: float = 0.95):
        self.code = code
        self.confidence = confidence
        self.calls: List[str] = []

    async def identify(self, text: str) -> Tuple[Optional[str], float]:
        self.calls.append(text)
        return self.code, self.confidence


class EventRecorder:
    """Session event listener that keeps everything it receives."""

    def __init__(self):
        self.events: List[SessionEvent] = []

    def on_event(self, event: SessionEvent) -> None:
        self.events.append(event)

    def types(self) -> List[SessionEventType]:
        return [event.event_type for event in self.events]

    def of_type(self, event_type: SessionEventType) -> List[SessionEvent]:
        return [event for event in self.events if event.event_type is event_type]


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Yield to the event loop until predicate() holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.005)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream
        mock_stream.read.return_value = b'\x00' * 2048  # Silent audio
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_sample_size.return_value = 2

        # Configure mock PyAudio class
        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def file_manager(temp_data_dir):
    return FileManager(temp_data_dir)


@pytest.fixture
def persistence(file_manager):
    return RecordingPersistence(FileRecordingStore(file_manager), FileAudioStore(file_manager))


@pytest.fixture
def voice_store(temp_data_dir):
    return CustomVoiceStore(str(Path(temp_data_dir) / "custom_voices.json"))


@pytest.fixture
def speech_backend():
    return FakeSpeechBackend()


@pytest.fixture
def translator():
    return FakeTranslator()


@pytest.fixture
def synthesizer():
    return FakeSynthesizer()


@pytest.fixture
def identifier():
    return FakeIdentifier()


@pytest.fixture
def orchestrator(speech_backend, translator, synthesizer, voice_store, persistence, identifier):
    """Orchestrator wired to fake adapters and real file-backed stores."""
    orchestrator = SessionOrchestrator(
        speech_backend=speech_backend,
        translator=translator,
        synthesizer=synthesizer,
        voice_resolver=CustomVoiceResolver(voice_store),
        persistence=persistence,
        detection_gate=LanguageDetectionGate(identifier, min_confidence=0.5),
        default_input_language="en",
        default_output_language="es",
    )
    yield orchestrator
    orchestrator.publisher.unsubscribe_all()


@pytest.fixture
def recorder(orchestrator):
    recorder = EventRecorder()
    orchestrator.subscribe(recorder.on_event)
    return recorder
