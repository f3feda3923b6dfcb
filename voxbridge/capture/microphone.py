"""Microphone capture that pushes audio chunks to a callback from a background thread."""

import pyaudio
import time
import logging
from threading import Thread, Event
from typing import Optional, Callable
from datetime import datetime

from ..models.events import AudioEvent


logger = logging.getLogger(__name__)


class MicrophoneCapture:
    """Continuous microphone capture delivering AudioEvents to a callback."""

    def __init__(
        self,
        callback: Callable[[AudioEvent], None],
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
        format: int = pyaudio.paInt16,
    ):
        """Initialize microphone capture with specified parameters.

        Args:
            callback: Receives every captured AudioEvent (called on the capture thread)
            sample_rate: Audio sample rate (16kHz suits speech recognition)
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels (1 for mono)
            format: Audio format (16-bit signed int)
        """
        self.audio_event_callback = callback
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format

        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False

        self.start_time: Optional[datetime] = None
        self.total_chunks = 0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    def start_recording(self) -> None:
        """Open the input device and start the capture thread.

        The device is opened on the calling thread so a missing or busy
        microphone raises here instead of inside the capture thread.

        Raises:
            OSError: If the audio input cannot be opened
        """
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        logger.info("Starting microphone capture")
        self.stop_event.clear()
        self.total_chunks = 0
        self.stream = self.__open_audio_stream()
        self.start_time = datetime.now()

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "MicrophoneCaptureThread"
        self.recording_thread.start()
        self.is_recording = True

    def stop_recording(self, wait: bool = True) -> None:
        """Stop capture. Safe to call repeatedly.

        Args:
            wait: Join the capture thread before returning
        """
        if not self.is_recording:
            return

        logger.info("Stopping microphone capture")
        self.stop_event.set()
        self.is_recording = False

        if wait and self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Capture thread did not stop cleanly")

        logger.info(f"Capture stopped. Total chunks: {self.total_chunks}")

    def __open_audio_stream(self):
        self.pyaudio_instance = pyaudio.PyAudio()
        try:
            stream = self.pyaudio_instance.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
                stream_callback=None
            )
        except Exception:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
            raise
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        return stream

    def __publish_audio_event(self, audio_chunk: bytes, final: bool) -> None:
        self.total_chunks += 1
        audio_event = AudioEvent(
            chunk_id=f"chunk_{self.total_chunks}",
            audio_data=audio_chunk,
            timestamp=time.time(),
            sequence_number=self.total_chunks,
            sample_rate=self.sample_rate,
            channels=self.channels,
            final=final
        )
        self.audio_event_callback(audio_event)

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        stream = self.stream
        try:
            while not self.stop_event.is_set():
                audio_chunk = stream.read(self.chunk_size, exception_on_overflow=False)
                self.__publish_audio_event(audio_chunk, final=self.stop_event.is_set())
            # Tell consumers we are done
            self.__publish_audio_event(b"", final=True)
        except Exception as e:
            logger.error(f"Error in capture loop: {e}")
        finally:
            if stream:
                stream.stop_stream()
                stream.close()
            self.stream = None
            if self.pyaudio_instance:
                self.pyaudio_instance.terminate()
                self.pyaudio_instance = None

    def get_duration_seconds(self) -> float:
        if self.start_time is None:
            return 0.0
        return (datetime.now() - self.start_time).total_seconds()
