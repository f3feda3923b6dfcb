"""Recording session orchestrator: capture, transcribe, translate, synthesize, persist."""

import uuid
import asyncio
import logging
from datetime import datetime
from typing import Optional, Set, Tuple, Awaitable, TypeVar

from .persistence import RecordingPersistence
from .publisher import SessionEventPublisher, SessionEventListener
from .voice_resolver import CustomVoiceResolver
from ..errors import (
    CaptureUnavailable,
    TranslationFailed,
    SynthesisFailed,
    PersistFailed,
    InvalidStateForOperation,
)
from ..languages.detection import LanguageDetectionGate
from ..languages import registry
from ..models.session import Session, SessionState, VoiceSelection, AudioArtifact
from ..models.transcription import TranscriptUpdate, DetectionResult
from ..models.events import SessionEvent, SessionEventType, SessionOutcome, OutcomeStatus
from ..synthesis.base import AbstractSynthesizer
from ..transcription.base import AbstractSpeechBackend, TranscriptStream
from ..translation.base import AbstractTranslator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _StaleCompletion(Exception):
    """An awaited adapter call finished after its epoch was superseded."""


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class SessionOrchestrator:
    """State machine driving one recording session at a time.

    Every operation that abandons in-flight work (stop, cancel, swap) bumps the
    epoch. Completions carrying an older epoch are dropped without touching
    session state.
    """

    def __init__(self,
                 speech_backend: AbstractSpeechBackend,
                 translator: AbstractTranslator,
                 synthesizer: AbstractSynthesizer,
                 voice_resolver: CustomVoiceResolver,
                 persistence: RecordingPersistence,
                 detection_gate: Optional[LanguageDetectionGate] = None,
                 default_input_language: str = "en-US",
                 default_output_language: str = "es-ES",
                 min_detection_tokens: int = 3):
        """Initialize session orchestrator.

        Args:
            speech_backend: Opens microphone capture + transcription streams
            translator: Translates the final transcript
            synthesizer: Turns the translation into speech
            voice_resolver: Maps voice selections to synthesis voice ids
            persistence: Stores committed sessions as recordings
            detection_gate: Optional language detection for interim transcripts
            default_input_language: Input language used until one is chosen
            default_output_language: Output language used until one is chosen
            min_detection_tokens: Transcript length (in words) before detection runs
        """
        self.speech_backend = speech_backend
        self.translator = translator
        self.synthesizer = synthesizer
        self.voice_resolver = voice_resolver
        self.persistence = persistence
        self.detection_gate = detection_gate
        self.min_detection_tokens = min_detection_tokens

        self._input_language = default_input_language
        self._output_language = default_output_language

        self._state = SessionState.IDLE
        self._epoch = 0
        self._session: Optional[Session] = None
        self._opening = False
        self._committing = False

        self._stream: Optional[TranscriptStream] = None
        self._consumer_task: Optional[asyncio.Task] = None
        self._detection_task: Optional[asyncio.Task] = None
        self._pending_task: Optional[asyncio.Task] = None

        self._pending_prompt: Optional[DetectionResult] = None
        self._declined_languages: Set[str] = set()

        self.publisher = SessionEventPublisher(f"voxbridge_session_{uuid.uuid4().hex}")
        logger.info(f"SessionOrchestrator initialized ({default_input_language} -> {default_output_language})")

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def pending_prompt(self) -> Optional[DetectionResult]:
        """Detected language awaiting accept/decline, if any."""
        return self._pending_prompt

    @property
    def languages(self) -> Tuple[str, str]:
        """Remembered (input, output) pair used by the next start()."""
        return self._input_language, self._output_language

    def subscribe(self, listener: SessionEventListener) -> None:
        self.publisher.subscribe(listener)

    def unsubscribe(self, listener: SessionEventListener) -> None:
        self.publisher.unsubscribe(listener)

    # Session lifecycle

    async def start(self,
                    input_language: Optional[str] = None,
                    output_language: Optional[str] = None,
                    voice: Optional[VoiceSelection] = None,
                    detection_enabled: bool = False) -> Session:
        """Open capture and transcription and begin a new session.

        Missing languages fall back to the remembered pair.

        Raises:
            InvalidStateForOperation: If a session is already active
            CaptureUnavailable: If capture cannot be opened, or cancel() ran while opening
        """
        if self._state not in (SessionState.IDLE, SessionState.COMMITTED) or self._opening:
            raise InvalidStateForOperation("start", self._state)

        input_language = input_language or self._input_language
        output_language = output_language or self._output_language
        voice = voice or VoiceSelection.male()

        self._epoch += 1
        epoch = self._epoch
        self._opening = True
        try:
            stream = await self.speech_backend.open_stream(input_language)
        except CaptureUnavailable as e:
            logger.error(f"Capture unavailable for {input_language}: {e}")
            self._publish(SessionEventType.CAPTURE_FAILED, session_id=None, error=str(e))
            raise
        except Exception as e:
            logger.error(f"Error opening capture for {input_language}: {e}", exc_info=True)
            self._publish(SessionEventType.CAPTURE_FAILED, session_id=None, error=str(e))
            raise CaptureUnavailable(str(e), input_language) from e
        finally:
            self._opening = False

        if epoch != self._epoch:
            stream.close()
            logger.info("Session cancelled while capture was opening")
            raise CaptureUnavailable("Capture was cancelled while opening", input_language)

        self._input_language = input_language
        self._output_language = output_language
        self._declined_languages.clear()
        self._pending_prompt = None
        self._session = Session(
            id=str(uuid.uuid4()),
            input_language=input_language,
            output_language=output_language,
            voice=voice,
            detection_enabled=detection_enabled,
            started_at=datetime.now(),
        )
        logger.info(f"Started session {self._session.id}: {input_language} -> {output_language}, "
                    f"voice={voice.kind.value}, detection={detection_enabled}")
        self._attach_stream(stream, epoch)
        self._set_state(SessionState.CAPTURING)
        return self._session

    async def stop(self) -> SessionOutcome:
        """Stop capture, then translate and synthesize the transcript.

        Raises:
            InvalidStateForOperation: If not capturing
        """
        if self._state is not SessionState.CAPTURING:
            raise InvalidStateForOperation("stop", self._state)

        session = self._session
        self._epoch += 1
        epoch = self._epoch
        self._teardown_capture()
        self._cancel_task(self._detection_task)
        self._detection_task = None
        self._pending_prompt = None
        session.duration = max(0.0, (datetime.now() - session.started_at).total_seconds())

        self._set_state(SessionState.STOPPING)
        if epoch != self._epoch:
            return self._outcome(OutcomeStatus.CANCELLED, session)

        transcript = session.working_transcript.strip()
        if not transcript:
            logger.info(f"Session {session.id} stopped with an empty transcript, skipping translation")
            self._publish(SessionEventType.TRANSCRIPT_SKIPPED)
            self._end_session()
            return SessionOutcome(OutcomeStatus.EMPTY_TRANSCRIPT_SKIPPED, session.id)

        return await self._translate(session, transcript, epoch)

    async def resynthesize(self, voice: Optional[VoiceSelection] = None) -> SessionOutcome:
        """Run synthesis again for the current translation, optionally with another voice.

        Raises:
            InvalidStateForOperation: If the session is not ready
        """
        if self._state is not SessionState.READY or self._committing:
            raise InvalidStateForOperation("resynthesize", self._state)
        session = self._session
        if voice is not None:
            session.voice = voice
        return await self._synthesize(session, self._epoch)

    async def commit(self, name: Optional[str] = None) -> str:
        """Persist the ready session and return the new recording id.

        Raises:
            InvalidStateForOperation: If the session is not ready
            PersistFailed: If storing fails; the session stays ready
        """
        if self._state is not SessionState.READY or self._committing:
            raise InvalidStateForOperation("commit", self._state)

        session = self._session
        name = (name or "").strip() or session.started_at.strftime("Recording %H:%M")
        epoch = self._epoch
        self._committing = True
        try:
            recording = await self.persistence.commit(session, name)
        except PersistFailed as e:
            logger.error(f"Commit of session {session.id} failed: {e}")
            self._publish(SessionEventType.PERSIST_FAILED, session_id=session.id, error=str(e))
            raise
        finally:
            self._committing = False

        if epoch != self._epoch:
            logger.info(f"Session {session.id} was cancelled during commit; recording {recording.id} kept")
            return recording.id

        self._set_state(SessionState.COMMITTED)
        self._publish(SessionEventType.COMMITTED, session_id=session.id, recording_id=recording.id, name=name)
        self._session = None
        return recording.id

    def cancel(self) -> None:
        """Abandon the session from any state. Synchronous and idempotent.

        Safe to call from a session event listener.
        """
        self._epoch += 1
        self._teardown_capture()
        self._cancel_task(self._detection_task)
        self._cancel_task(self._pending_task)
        self._detection_task = None
        self._pending_task = None
        self._pending_prompt = None
        self._declined_languages.clear()

        session = self._session
        if self._state is SessionState.IDLE and session is None:
            return

        logger.info(f"Cancelling session {session.id if session else None} in state {self._state.value}")
        self._session = None
        self._set_state(SessionState.IDLE, session_id=session.id if session else None)
        self._publish(SessionEventType.CANCELLED, session_id=session.id if session else None)

    def shutdown(self) -> None:
        """Cancel any session and release listeners and backend resources."""
        self.cancel()
        self.publisher.unsubscribe_all()
        self.speech_backend.cleanup()

    # Languages

    async def swap_languages(self) -> Tuple[str, str]:
        """Swap input and output languages.

        While capturing, the transcription stream is reopened on the new input
        language and the working transcript is cleared.

        Raises:
            InvalidStateForOperation: Outside idle, committed and capturing
            CaptureUnavailable: If the stream cannot be reopened; the session is cancelled
        """
        if self._state in (SessionState.IDLE, SessionState.COMMITTED) and not self._opening:
            self._input_language, self._output_language = self._output_language, self._input_language
            self._publish(SessionEventType.LANGUAGES_SWAPPED, session_id=None,
                          input_language=self._input_language, output_language=self._output_language)
            return self.languages

        if self._state is not SessionState.CAPTURING:
            raise InvalidStateForOperation("swap languages", self._state)

        session = self._session
        self._epoch += 1
        epoch = self._epoch
        self._teardown_capture()
        self._cancel_task(self._detection_task)
        self._detection_task = None
        self._pending_prompt = None

        session.input_language, session.output_language = session.output_language, session.input_language
        self._input_language, self._output_language = session.input_language, session.output_language
        session.working_transcript = ""
        logger.info(f"Swapping languages for session {session.id}: "
                    f"{session.input_language} -> {session.output_language}")

        try:
            stream = await self.speech_backend.open_stream(session.input_language)
        except Exception as e:
            if epoch != self._epoch:
                logger.info(f"Ignoring reopen failure of superseded stream: {e}")
                return self.languages
            logger.error(f"Could not reopen capture after swap: {e}")
            self._publish(SessionEventType.CAPTURE_FAILED, error=str(e))
            self.cancel()
            if isinstance(e, CaptureUnavailable):
                raise
            raise CaptureUnavailable(str(e), session.input_language) from e

        if epoch != self._epoch:
            stream.close()
            logger.info("Swap superseded while reopening capture, closing new stream")
            return self.languages

        self._attach_stream(stream, epoch)
        self._publish(SessionEventType.LANGUAGES_SWAPPED,
                      input_language=session.input_language, output_language=session.output_language)
        return self.languages

    def accept_detected_language(self) -> str:
        """Switch the session's input language to the suggested one.

        Capture keeps running; the transcript is not cleared.

        Raises:
            InvalidStateForOperation: If no suggestion is pending
        """
        prompt = self._pending_prompt
        if self._state is not SessionState.CAPTURING or prompt is None:
            raise InvalidStateForOperation("accept detected language", self._state)

        session = self._session
        previous = session.input_language
        session.input_language = prompt.language_code
        self._input_language = prompt.language_code
        self._pending_prompt = None
        logger.info(f"Input language switched {previous} -> {prompt.language_code}")
        self._publish(SessionEventType.LANGUAGE_SWITCHED,
                      previous_language=previous, input_language=prompt.language_code)
        return prompt.language_code

    def decline_detected_language(self) -> None:
        """Dismiss the suggestion; the same language is not suggested again this session.

        Raises:
            InvalidStateForOperation: If no suggestion is pending
        """
        prompt = self._pending_prompt
        if self._state is not SessionState.CAPTURING or prompt is None:
            raise InvalidStateForOperation("decline detected language", self._state)
        self._declined_languages.add(prompt.language_code)
        self._pending_prompt = None
        logger.info(f"Declined switching to {prompt.language_code}")

    # Capture and transcription

    def _attach_stream(self, stream: TranscriptStream, epoch: int) -> None:
        self._stream = stream
        self._consumer_task = asyncio.create_task(self._consume(stream, epoch))

    async def _consume(self, stream: TranscriptStream, epoch: int) -> None:
        try:
            async for update in stream:
                if epoch != self._epoch or stream is not self._stream:
                    logger.debug(f"Dropping transcript update from stale {stream.locale} stream")
                    break
                self._handle_update(update, epoch)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if epoch == self._epoch and stream is self._stream:
                logger.error(f"Transcription stream failed: {e}", exc_info=True)
                self._publish(SessionEventType.CAPTURE_FAILED, error=str(e))
            else:
                logger.debug(f"Ignoring error from stale stream: {e}")
        logger.debug(f"Transcript consumer for {stream.locale} finished")

    def _handle_update(self, update: TranscriptUpdate, epoch: int) -> None:
        session = self._session
        session.working_transcript = update.text
        self._publish(SessionEventType.TRANSCRIPT_UPDATED, text=update.text, is_final=update.is_final)

        # A listener may have stopped or cancelled the session
        if epoch != self._epoch or self._session is not session:
            return
        if session.detection_enabled and self.detection_gate is not None \
                and update.token_count >= self.min_detection_tokens:
            self._schedule_detection(update.text, epoch)

    # Language detection

    def _schedule_detection(self, text: str, epoch: int) -> None:
        if self._pending_prompt is not None:
            return
        if self._detection_task is not None and not self._detection_task.done():
            return
        self._detection_task = asyncio.create_task(self._detect(text, epoch))

    async def _detect(self, text: str, epoch: int) -> None:
        try:
            result = await self.detection_gate.detect(text)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Language detection failed, keeping current language: {e}")
            return

        if epoch != self._epoch or self._state is not SessionState.CAPTURING:
            logger.debug("Dropping stale detection result")
            return

        session = self._session
        if result.language_code in self._declined_languages:
            logger.debug(f"Detected {result.language_code} was declined earlier, not prompting")
            return
        if not self.detection_gate.should_prompt(result, session.input_language, session.output_language):
            return

        self._pending_prompt = result
        logger.info(f"Suggesting switch to {result.language_code} (confidence: {result.confidence:.2f})")
        self._publish(SessionEventType.LANGUAGE_SWITCH_SUGGESTED,
                      language_code=result.language_code,
                      display_name=registry.display_name(result.language_code),
                      confidence=result.confidence)

    # Translation and synthesis

    async def _translate(self, session: Session, transcript: str, epoch: int) -> SessionOutcome:
        self._set_state(SessionState.TRANSLATING)
        if epoch != self._epoch:
            return self._outcome(OutcomeStatus.CANCELLED, session)

        try:
            translation = await self._run_pending(
                self.translator.translate(transcript, session.input_language, session.output_language), epoch)
        except _StaleCompletion:
            return self._outcome(OutcomeStatus.CANCELLED, session)
        except Exception as e:
            error = TranslationFailed(e, transcript)
            logger.error(f"Session {session.id}: {error}")
            self._publish(SessionEventType.TRANSLATION_FAILED, error=str(error))
            self._end_session()
            return SessionOutcome(OutcomeStatus.TRANSLATION_FAILED, session.id, transcript, error=error)

        session.final_translation = translation
        logger.info(f"Session {session.id} translated {len(transcript)} -> {len(translation)} chars")
        self._publish(SessionEventType.TRANSLATION_READY, translation=translation)
        if epoch != self._epoch:
            return self._outcome(OutcomeStatus.CANCELLED, session)

        return await self._synthesize(session, epoch)

    async def _synthesize(self, session: Session, epoch: int) -> SessionOutcome:
        self._set_state(SessionState.SYNTHESIZING)
        if epoch != self._epoch:
            return self._outcome(OutcomeStatus.CANCELLED, session)

        translation = session.final_translation
        try:
            # Resolving may rewrite the voice profile file
            voice_id = await self._run_pending(
                asyncio.to_thread(self.voice_resolver.resolve, session.voice, session.output_language), epoch)
            data = await self._run_pending(self.synthesizer.synthesize(translation, voice_id), epoch)
        except _StaleCompletion:
            return self._outcome(OutcomeStatus.CANCELLED, session)
        except Exception as e:
            if isinstance(e, SynthesisFailed):
                error = e
                error.translation = error.translation or translation
            else:
                error = SynthesisFailed(e, translation)
            logger.error(f"Session {session.id}: {error}")
            self._set_state(SessionState.READY)
            self._publish(SessionEventType.SYNTHESIS_FAILED, error=str(error))
            return self._outcome(OutcomeStatus.SYNTHESIS_FAILED, session, error)

        session.audio_artifact = AudioArtifact(data=data, voice_id=voice_id, mime_type=self.synthesizer.mime_type)
        logger.info(f"Session {session.id} synthesized {len(data)} bytes with voice {voice_id}")
        self._set_state(SessionState.READY)
        self._publish(SessionEventType.SYNTHESIS_READY, voice_id=voice_id, size_bytes=len(data))
        if epoch != self._epoch:
            return self._outcome(OutcomeStatus.CANCELLED, session)
        return self._outcome(OutcomeStatus.READY, session)

    async def _run_pending(self, call: Awaitable[T], epoch: int) -> T:
        """Await an adapter call as a task that cancel() can abort.

        Raises:
            _StaleCompletion: If the epoch moved on before the call finished,
                whether it returned or raised
        """
        task = asyncio.ensure_future(call)
        self._pending_task = task
        try:
            result = await task
        except asyncio.CancelledError:
            if epoch != self._epoch:
                logger.info("Adapter call cancelled with its session")
                raise _StaleCompletion()
            # Our own caller was cancelled; abandon the session with it
            self.cancel()
            raise
        except Exception as e:
            if epoch != self._epoch:
                logger.info(f"Dropping late adapter failure for a superseded session: {e}")
                raise _StaleCompletion() from e
            raise
        finally:
            if self._pending_task is task:
                self._pending_task = None

        if epoch != self._epoch:
            logger.info("Dropping late adapter result for a superseded session")
            raise _StaleCompletion()
        return result

    # Helpers

    def _outcome(self, status: OutcomeStatus, session: Session,
                 error: Optional[Exception] = None) -> SessionOutcome:
        return SessionOutcome(
            status=status,
            session_id=session.id,
            transcript=session.working_transcript.strip(),
            translation=session.final_translation,
            audio=session.audio_artifact,
            error=error,
        )

    def _end_session(self) -> None:
        session = self._session
        self._session = None
        self._set_state(SessionState.IDLE, session_id=session.id if session else None)

    def _teardown_capture(self) -> None:
        stream, self._stream = self._stream, None
        task, self._consumer_task = self._consumer_task, None
        if stream is not None:
            stream.close()
        self._cancel_task(task)

    @staticmethod
    def _cancel_task(task: Optional[asyncio.Task]) -> None:
        # Never cancel the task we are running in (listener reentrancy)
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()

    def _set_state(self, state: SessionState, session_id: Optional[str] = None) -> None:
        previous = self._state
        self._state = state
        if self._session is not None:
            self._session.state = state
        logger.debug(f"Session state {previous.value} -> {state.value}")
        self._publish(SessionEventType.STATE_CHANGED, session_id=session_id, previous_state=previous.value)

    def _publish(self, event_type: SessionEventType, session_id: Optional[str] = None, **metadata) -> None:
        if session_id is None and self._session is not None:
            session_id = self._session.id
        event = SessionEvent(
            event_id=str(uuid.uuid4()),
            event_type=event_type,
            session_id=session_id,
            state=self._state,
            metadata=metadata,
        )
        self.publisher.publish(event)
