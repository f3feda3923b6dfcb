"""Google Speech-to-Text streaming transcription backend."""

import asyncio
import queue
import logging
from threading import Thread
from typing import List, Optional

from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.oauth2 import service_account

from .base import AbstractSpeechBackend, QueueTranscriptStream, TranscriptStream
from ..capture.microphone import MicrophoneCapture
from ..errors import CaptureUnavailable
from ..languages import registry
from ..models.events import AudioEvent
from ..models.transcription import TranscriptUpdate

logger = logging.getLogger(__name__)


class TranscriptAssembler:
    """Turns per-utterance streaming results into full-transcript updates.

    Google reports each utterance separately; callers expect every update to be
    the whole transcript so far.
    """

    def __init__(self):
        self.final_segments: List[str] = []

    def feed(self, text: str, is_final: bool) -> TranscriptUpdate:
        text = text.strip()
        if is_final:
            if text:
                self.final_segments.append(text)
            segments = self.final_segments
        else:
            segments = self.final_segments + ([text] if text else [])
        return TranscriptUpdate(text=" ".join(segments), is_final=is_final)


class GoogleTranscriptStream(QueueTranscriptStream):
    """Microphone audio streamed to Google with interim results."""

    def __init__(self,
                 locale: str,
                 client: speech.SpeechClient,
                 streaming_config: speech.StreamingRecognitionConfig,
                 sample_rate: int = 16000,
                 chunk_size: int = 1024,
                 channels: int = 1):
        super().__init__(locale)
        self.client = client
        self.streaming_config = streaming_config
        self.assembler = TranscriptAssembler()
        self._audio_queue: "queue.Queue[Optional[bytes]]" = queue.Queue()
        self._recognizer_thread: Optional[Thread] = None
        self.capture = MicrophoneCapture(
            callback=self._on_audio_event,
            sample_rate=sample_rate,
            chunk_size=chunk_size,
            channels=channels,
        )

    def start(self) -> None:
        """Open the microphone and start the recognizer thread.

        Raises:
            OSError: If the microphone cannot be opened
        """
        self.capture.start_recording()
        self._recognizer_thread = Thread(target=self._recognize_loop, daemon=True)
        self._recognizer_thread.name = f"GoogleRecognizer-{self.locale}"
        self._recognizer_thread.start()

    def _on_audio_event(self, event: AudioEvent) -> None:
        if event.audio_data:
            self._audio_queue.put(event.audio_data)
        if event.final:
            self._audio_queue.put(None)

    def _audio_requests(self):
        while True:
            chunk = self._audio_queue.get()
            if chunk is None:
                return
            yield speech.StreamingRecognizeRequest(audio_content=chunk)

    def _recognize_loop(self) -> None:
        try:
            responses = self.client.streaming_recognize(self.streaming_config, self._audio_requests())
            for response in responses:
                for result in response.results:
                    if not result.alternatives:
                        continue
                    update = self.assembler.feed(result.alternatives[0].transcript, result.is_final)
                    logger.debug(f"{'FINAL' if result.is_final else 'INTERIM'} ({self.locale}): '{update.text}'")
                    self.push_threadsafe(update)
        except gax_exceptions.GoogleAPICallError as e:
            if not self.closed:
                logger.error(f"Google STT streaming error ({self.locale}): {e}")
                self.fail_threadsafe(RuntimeError(f"Google Speech streaming error: {e}"))
        except Exception as e:
            if not self.closed:
                logger.error(f"Unexpected recognizer error ({self.locale}): {e}", exc_info=True)
                self.fail_threadsafe(e)
        finally:
            self.finish_threadsafe()

    def _on_close(self) -> None:
        self.capture.stop_recording(wait=False)
        self._audio_queue.put(None)


class GoogleStreamingSpeechBackend(AbstractSpeechBackend):
    """Google Speech-to-Text streaming backend fed by the local microphone."""

    def __init__(self,
                 credentials_path: Optional[str] = None,
                 sample_rate: int = 16000,
                 chunk_size: int = 1024,
                 channels: int = 1,
                 use_enhanced: bool = True,
                 enable_automatic_punctuation: bool = True):
        """Initialize Google streaming backend.

        Args:
            credentials_path: Path to Google Cloud service account JSON file
            sample_rate: Microphone sample rate in Hz
            chunk_size: Samples per captured chunk
            channels: Number of microphone channels
            use_enhanced: Whether to use enhanced model (costs more but better quality)
            enable_automatic_punctuation: Enable automatic punctuation
        """
        self.credentials_path = credentials_path
        if not self.credentials_path:
            raise ValueError("Google credentials path is required - cannot initialize without credentials")
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.use_enhanced = use_enhanced
        self.enable_automatic_punctuation = enable_automatic_punctuation
        self.client: Optional[speech.SpeechClient] = None
        self.project_id = None

    def initialize(self) -> bool:
        """Initialize Google Speech client and verify credentials."""
        logger.info(f"Loading Google credentials from: {self.credentials_path}")
        credentials = service_account.Credentials.from_service_account_file(self.credentials_path)
        self.client = speech.SpeechClient(credentials=credentials)
        self.project_id = credentials.project_id
        logger.info(f"Using Google Cloud project: {self.project_id}")
        return True

    def _streaming_config(self, locale: str) -> speech.StreamingRecognitionConfig:
        config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=self.sample_rate,
            audio_channel_count=self.channels,
            language_code=locale,
            use_enhanced=self.use_enhanced,
            enable_automatic_punctuation=self.enable_automatic_punctuation,
        )
        return speech.StreamingRecognitionConfig(config=config, interim_results=True)

    async def open_stream(self, locale: str) -> TranscriptStream:
        recognition_locale = registry.recognition_locale(locale)
        if recognition_locale is None:
            raise CaptureUnavailable(f"Speech recognizer does not support locale '{locale}'", locale)

        if self.client is None:
            self.initialize()

        stream = GoogleTranscriptStream(
            locale=recognition_locale,
            client=self.client,
            streaming_config=self._streaming_config(recognition_locale),
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            channels=self.channels,
        )
        try:
            await asyncio.to_thread(stream.start)
        except OSError as e:
            stream.close()
            raise CaptureUnavailable(f"Could not open audio input: {e}", locale) from e

        logger.info(f"Opened Google transcription stream for {recognition_locale}")
        return stream

    def cleanup(self) -> None:
        self.client = None
