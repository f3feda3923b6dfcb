"""Abstract base classes for streaming transcription backends."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional, Union

from ..models.transcription import TranscriptUpdate

logger = logging.getLogger(__name__)

_END = object()


class TranscriptStream(ABC):
    """Async iterator of TranscriptUpdates for one capture session.

    A stream is not seekable or restartable; open a new one instead.
    """

    def __init__(self, locale: str):
        self.locale = locale

    def __aiter__(self) -> "TranscriptStream":
        return self

    @abstractmethod
    async def __anext__(self) -> TranscriptUpdate:
        pass

    @abstractmethod
    def close(self) -> None:
        """Stop capture and recognition. Must be idempotent."""
        pass

    @property
    @abstractmethod
    def closed(self) -> bool:
        pass


class QueueTranscriptStream(TranscriptStream):
    """TranscriptStream fed through an asyncio queue.

    Producers on the event loop use push()/finish()/fail(); producers on other
    threads use the *_threadsafe variants. Must be created on the event loop.
    """

    def __init__(self, locale: str, loop: Optional[asyncio.AbstractEventLoop] = None):
        super().__init__(locale)
        self._loop = loop or asyncio.get_running_loop()
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, update: TranscriptUpdate) -> None:
        self._put(update)

    def fail(self, error: BaseException) -> None:
        self._put(error)

    def finish(self) -> None:
        self._put(_END)

    def push_threadsafe(self, update: TranscriptUpdate) -> None:
        self._put_threadsafe(update)

    def fail_threadsafe(self, error: BaseException) -> None:
        self._put_threadsafe(error)

    def finish_threadsafe(self) -> None:
        self._put_threadsafe(_END)

    def _put(self, item: Union[TranscriptUpdate, BaseException, object]) -> None:
        if self._closed and item is not _END:
            logger.debug(f"Dropping update for closed {self.locale} stream")
            return
        self._queue.put_nowait(item)

    def _put_threadsafe(self, item) -> None:
        try:
            self._loop.call_soon_threadsafe(self._put, item)
        except RuntimeError:
            # Event loop already closed; nobody is listening any more
            logger.debug(f"Event loop closed, dropping item for {self.locale} stream")

    async def __anext__(self) -> TranscriptUpdate:
        if self._closed:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _END or self._closed:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_END)
        self._on_close()

    def _on_close(self) -> None:
        """Hook for subclasses to release capture resources."""
        pass


class AbstractSpeechBackend(ABC):
    """Abstract base class for streaming speech-to-text backends."""

    @abstractmethod
    async def open_stream(self, locale: str) -> TranscriptStream:
        """Open microphone capture and a recognition stream for locale.

        Raises:
            CaptureUnavailable: If audio input cannot be opened or the locale is rejected
        """
        pass

    def cleanup(self) -> None:
        """Clean up backend resources."""
        pass
