"""Rich console rendering for the VoxBridge command line."""

import logging
from typing import List, Optional, Dict, Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..languages import registry
from ..models.events import SessionEvent, SessionEventType, SessionOutcome, OutcomeStatus
from ..models.recording import RecordingSession
from ..models.voice import CustomVoiceProfile

logger = logging.getLogger(__name__)

_OUTCOME_STYLES = {
    OutcomeStatus.READY: "green",
    OutcomeStatus.EMPTY_TRANSCRIPT_SKIPPED: "yellow",
    OutcomeStatus.TRANSLATION_FAILED: "red",
    OutcomeStatus.SYNTHESIS_FAILED: "red",
    OutcomeStatus.CANCELLED: "yellow",
}


def _format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(round(seconds)), 60)
    return f"{minutes}:{secs:02d}"


class ConsoleView:
    """Renders sessions, recordings and voice profiles to the terminal."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self._last_transcript = ""

    def on_session_event(self, event: SessionEvent) -> None:
        """Session event listener printing progress lines."""
        if event.event_type is SessionEventType.TRANSCRIPT_UPDATED:
            text = event.metadata.get("text", "")
            if text and text != self._last_transcript:
                self._last_transcript = text
                self.console.print(Text(f"  … {text}", style="dim"))
        elif event.event_type is SessionEventType.STATE_CHANGED:
            self.console.print(f"[cyan]●[/cyan] {event.state.value}")
        elif event.event_type is SessionEventType.LANGUAGE_SWITCH_SUGGESTED:
            self.console.print(f"[yellow]Sounds like {event.metadata.get('display_name')}.[/yellow]")
        elif event.event_type in (SessionEventType.CAPTURE_FAILED,
                                  SessionEventType.TRANSLATION_FAILED,
                                  SessionEventType.SYNTHESIS_FAILED,
                                  SessionEventType.PERSIST_FAILED):
            self.console.print(f"[red]✗ {event.metadata.get('error')}[/red]")

    def show_outcome(self, outcome: SessionOutcome) -> None:
        style = _OUTCOME_STYLES.get(outcome.status, "white")
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Status", Text(outcome.status.value, style=style))
        table.add_row("Transcript", outcome.transcript or "-")
        table.add_row("Translation", outcome.translation or "-")
        if outcome.audio is not None:
            table.add_row("Audio", f"{outcome.audio.size_bytes} bytes ({outcome.audio.voice_id})")
        if outcome.error is not None:
            table.add_row("Error", Text(str(outcome.error), style="red"))
        self.console.print(Panel(table, title="Session", border_style=style))

    def show_recordings(self, recordings: List[RecordingSession]) -> None:
        if not recordings:
            self.console.print("No recordings yet.")
            return
        table = Table(title=f"Recordings ({len(recordings)})")
        table.add_column("★", justify="center")
        table.add_column("Name")
        table.add_column("Created")
        table.add_column("Length", justify="right")
        table.add_column("Languages")
        table.add_column("Translation", overflow="fold")
        table.add_column("ID", style="dim")
        for recording in recordings:
            table.add_row(
                "★" if recording.is_favorite else "",
                recording.name,
                recording.date_created.strftime("%Y-%m-%d %H:%M"),
                _format_duration(recording.duration),
                f"{registry.display_name(recording.source_language)} → "
                f"{registry.display_name(recording.target_language)}",
                recording.translation,
                recording.id,
            )
        self.console.print(table)

    def show_voices(self, voices: List[CustomVoiceProfile], active: Optional[CustomVoiceProfile]) -> None:
        if not voices:
            self.console.print("No custom voices configured.")
            return
        table = Table(title="Custom voices")
        table.add_column("Active", justify="center")
        table.add_column("Name")
        table.add_column("Voice ID")
        table.add_column("Added")
        table.add_column("ID", style="dim")
        for voice in voices:
            table.add_row(
                "✓" if active is not None and active.id == voice.id else "",
                voice.name,
                voice.voice_id,
                voice.date_added.strftime("%Y-%m-%d"),
                voice.id,
            )
        self.console.print(table)

    def show_storage_stats(self, stats: Dict[str, Any]) -> None:
        if not stats:
            return
        self.console.print(f"[dim]{stats['recording_count']} recordings, {stats['total_size_mb']} MB "
                           f"in {stats['data_directory']}[/dim]")

    def info(self, message: str) -> None:
        self.console.print(message)

    def error(self, message: str) -> None:
        self.console.print(f"[red]{message}[/red]")
