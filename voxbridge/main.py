"""Main application entry point for VoxBridge."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from . import __version__
from .auto_mode import run_auto_mode
from .config import VoxBridgeConfig
from .errors import VoxBridgeError
from .languages import LanguageDetectionGate, GoogleLanguageIdentifier
from .models.recording import RecordingSortOption
from .models.session import VoiceSelection
from .services import (
    CustomVoiceResolver,
    CustomVoiceStore,
    RecordingPersistence,
    SessionOrchestrator,
)
from .storage import FileManager, FileRecordingStore, FileAudioStore
from .synthesis import ElevenLabsSynthesizer
from .transcription import GoogleStreamingSpeechBackend
from .translation import DeepLTranslator
from .ui import ConsoleView

logger = logging.getLogger(__name__)

VOICES_FILE_NAME = "custom_voices.json"


class VoxBridgeApp:
    """Wires configuration, stores and capability adapters together."""

    def __init__(self, config: VoxBridgeConfig):
        self.config = config
        data_dir = config.get_data_directory()
        self.file_manager = FileManager(data_dir)
        self.persistence = RecordingPersistence(
            FileRecordingStore(self.file_manager),
            FileAudioStore(self.file_manager),
        )
        self.voice_store = CustomVoiceStore(str(Path(data_dir) / VOICES_FILE_NAME))
        self.view = ConsoleView()

    def build_orchestrator(self) -> SessionOrchestrator:
        """Create the session orchestrator with the remote adapters.

        Raises:
            ValueError: If credentials or API keys are missing
        """
        credentials_path = self.config.get_google_credentials_path()
        speech_backend = GoogleStreamingSpeechBackend(
            credentials_path=credentials_path,
            sample_rate=self.config.get('audio.sample_rate', 16000),
            chunk_size=self.config.get('audio.chunk_size', 1024),
            channels=self.config.get('audio.channels', 1),
            use_enhanced=self.config.get('google_cloud.use_enhanced_model', True),
            enable_automatic_punctuation=self.config.get('google_cloud.enable_automatic_punctuation', True),
        )
        speech_backend.initialize()

        translator = DeepLTranslator(
            api_key=self.config.get_api_key('deepl', 'DEEPL_API_KEY'),
            api_url=self.config.get('deepl.api_url', 'https://api-free.deepl.com/v2/translate'),
            timeout_seconds=self.config.get('deepl.timeout_seconds', 15),
        )
        synthesizer = ElevenLabsSynthesizer(
            api_key=self.config.get_api_key('elevenlabs', 'ELEVEN_LABS_API_KEY'),
            base_url=self.config.get('elevenlabs.base_url', 'https://api.elevenlabs.io/v1/text-to-speech'),
            model_id=self.config.get('elevenlabs.model_id', 'eleven_multilingual_v2'),
            stability=self.config.get('elevenlabs.stability', 0.5),
            similarity_boost=self.config.get('elevenlabs.similarity_boost', 0.75),
            timeout_seconds=self.config.get('elevenlabs.timeout_seconds', 30),
        )
        detection_gate = LanguageDetectionGate(
            GoogleLanguageIdentifier(credentials_path),
            min_confidence=self.config.get('detection.min_confidence', 0.5),
        )

        return SessionOrchestrator(
            speech_backend=speech_backend,
            translator=translator,
            synthesizer=synthesizer,
            voice_resolver=CustomVoiceResolver(self.voice_store),
            persistence=self.persistence,
            detection_gate=detection_gate,
            default_input_language=self.config.get('languages.input', 'en-US'),
            default_output_language=self.config.get('languages.output', 'es-ES'),
            min_detection_tokens=self.config.get('detection.min_tokens', 3),
        )

    async def run_auto(self, duration: int, input_language: Optional[str], output_language: Optional[str],
                       voice: Optional[str], detection: Optional[bool], name: Optional[str]) -> Optional[str]:
        orchestrator = self.build_orchestrator()
        voice_selection = VoiceSelection.parse(voice or self.config.get('languages.voice', 'male'))
        if detection is None:
            detection = self.config.get('languages.detection_enabled', False)
        try:
            return await run_auto_mode(
                orchestrator,
                self.view,
                duration_seconds=duration,
                input_language=input_language,
                output_language=output_language,
                voice=voice_selection,
                detection_enabled=detection,
                name=name,
            )
        finally:
            orchestrator.shutdown()

    async def list_recordings(self, sort_by: RecordingSortOption) -> None:
        recordings = await self.persistence.list_recordings(sort_by)
        self.view.show_recordings(recordings)
        self.view.show_storage_stats(self.file_manager.get_storage_stats())

    async def set_favorite(self, recording_id: str, is_favorite: bool) -> None:
        recording = await self.persistence.set_favorite(recording_id, is_favorite)
        state = "added to" if recording.is_favorite else "removed from"
        self.view.info(f"'{recording.name}' {state} favorites")

    async def delete_recording(self, recording_id: str) -> None:
        await self.persistence.delete_recording(recording_id)
        self.view.info(f"Deleted recording {recording_id}")

    def add_voice(self, name: str, voice_id: str) -> None:
        profile = self.voice_store.add_voice(name, voice_id)
        self.view.info(f"Added custom voice '{profile.name}' ({profile.id})")

    def activate_voice(self, profile_id: str) -> None:
        profile = self.voice_store.set_active_voice(profile_id)
        self.view.info(f"Active custom voice: '{profile.name}'")

    def list_voices(self) -> None:
        self.view.show_voices(self.voice_store.list_voices(), self.voice_store.active_voice())


def setup_logging(config: VoxBridgeConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/voxbridge.log')
    console_output = config.get('logging.console_output', True)

    Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("VoxBridge starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="VoxBridge - Speak in one language, hear yourself in another",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: looks for voxbridge.yaml)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, else INFO)"
    )

    session = parser.add_argument_group("recording")
    session.add_argument("--auto", action="store_true",
                         help="Record for --duration seconds, translate, synthesize and save")
    session.add_argument("--duration", type=int, default=10,
                         help="Duration in seconds for auto mode recording (default: 10)")
    session.add_argument("--input", dest="input_language", help="Input language (e.g. en or en-US)")
    session.add_argument("--output", dest="output_language", help="Output language (e.g. es)")
    session.add_argument("--voice", help="male | female | custom | custom:<profile id>")
    session.add_argument("--detect", dest="detection", action="store_true", default=None,
                         help="Suggest switching the input language when another one is heard")
    session.add_argument("--name", help="Recording name (default: 'Recording HH:MM')")

    library = parser.add_argument_group("library")
    library.add_argument("--list", action="store_true", help="List saved recordings")
    library.add_argument("--sort", choices=[option.value for option in RecordingSortOption],
                         default=RecordingSortOption.DATE_CREATED.value, help="Sort order for --list")
    library.add_argument("--favorite", metavar="ID", help="Mark a recording as favorite")
    library.add_argument("--unfavorite", metavar="ID", help="Remove a recording from favorites")
    library.add_argument("--delete", metavar="ID", help="Delete a recording and its audio")

    voices = parser.add_argument_group("custom voices")
    voices.add_argument("--add-voice", nargs=2, metavar=("NAME", "VOICE_ID"), help="Register a custom voice")
    voices.add_argument("--activate-voice", metavar="ID", help="Make a custom voice the active one")
    voices.add_argument("--list-voices", action="store_true", help="List custom voices")

    parser.add_argument(
        "--version",
        action="version",
        version=f"VoxBridge v{__version__}"
    )
    return parser


async def _run_command(app: VoxBridgeApp, args: argparse.Namespace) -> None:
    if args.add_voice:
        app.add_voice(*args.add_voice)
    elif args.activate_voice:
        app.activate_voice(args.activate_voice)
    elif args.list_voices:
        app.list_voices()
    elif args.favorite:
        await app.set_favorite(args.favorite, True)
    elif args.unfavorite:
        await app.set_favorite(args.unfavorite, False)
    elif args.delete:
        await app.delete_recording(args.delete)
    elif args.list:
        await app.list_recordings(RecordingSortOption(args.sort))
    elif args.auto:
        await app.run_auto(args.duration, args.input_language, args.output_language,
                           args.voice, args.detection, args.name)
    else:
        raise NotImplementedError("Interactive mode not implemented yet, use --auto")


def main() -> None:
    """Main entry point for VoxBridge."""
    args = build_parser().parse_args()

    try:
        config = VoxBridgeConfig(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(1)

    setup_logging(config, args.log_level or config.get('logging.level', 'INFO'))
    app = VoxBridgeApp(config)

    try:
        asyncio.run(_run_command(app, args))
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except (VoxBridgeError, ValueError, FileNotFoundError, NotImplementedError) as e:
        app.view.error(f"❌ Error: {e}")
        logger.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
