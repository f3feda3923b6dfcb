"""Unit tests for MicrophoneCapture class."""

import pytest
import time
from unittest.mock import Mock, patch

from voxbridge.capture import MicrophoneCapture


@pytest.mark.unit
class TestMicrophoneCapture:
    """Test cases for MicrophoneCapture class."""

    def test_initialization(self):
        """Test MicrophoneCapture initialization with default parameters."""
        capture = MicrophoneCapture(callback=Mock())

        assert capture.sample_rate == 16000
        assert capture.chunk_size == 1024
        assert capture.channels == 1
        assert capture.is_recording is False
        assert capture.total_chunks == 0
        assert capture.get_duration_seconds() == 0.0

    def test_start_recording_opens_stream_on_caller_thread(self, mock_pyaudio):
        """Test starting audio recording."""
        capture = MicrophoneCapture(callback=Mock())

        with patch.object(capture, '_record_continuously') as mock_record:
            capture.start_recording()

            assert capture.is_recording is True
            assert capture.start_time is not None
            assert capture.recording_thread.daemon is True
            mock_pyaudio['instance'].open.assert_called_once()
            capture.recording_thread.join(timeout=1.0)
            mock_record.assert_called_once()
            capture.stop_recording()

    def test_start_recording_already_recording(self, mock_pyaudio):
        """Test starting recording when already recording."""
        capture = MicrophoneCapture(callback=Mock())
        capture.is_recording = True

        capture.start_recording()

        mock_pyaudio['instance'].open.assert_not_called()

    def test_open_failure_raises_and_terminates(self, mock_pyaudio):
        """A missing input device raises to the caller."""
        mock_pyaudio['instance'].open.side_effect = OSError("Invalid input device")
        capture = MicrophoneCapture(callback=Mock())

        with pytest.raises(OSError):
            capture.start_recording()

        assert capture.is_recording is False
        mock_pyaudio['instance'].terminate.assert_called_once()

    def test_records_and_publishes_events(self, mock_pyaudio):
        """Captured chunks reach the callback, followed by a final empty event."""
        events = []
        capture = MicrophoneCapture(callback=events.append)

        capture.start_recording()
        time.sleep(0.05)
        capture.stop_recording()

        assert len(events) >= 2
        assert events[0].audio_data == b'\x00' * 2048
        assert events[0].sequence_number == 1
        assert events[-1].final is True
        assert events[-1].audio_data == b""
        mock_pyaudio['stream'].close.assert_called_once()
        mock_pyaudio['instance'].terminate.assert_called_once()

    def test_stop_recording_is_idempotent(self, mock_pyaudio):
        """Test stopping recording repeatedly and when not recording."""
        capture = MicrophoneCapture(callback=Mock())
        capture.stop_recording()

        capture.start_recording()
        capture.stop_recording()
        capture.stop_recording()

        assert capture.is_recording is False
        assert capture.stop_event.is_set()

    def test_read_error_stops_loop(self, mock_pyaudio):
        """A failing device read ends capture and releases the stream."""
        mock_pyaudio['stream'].read.side_effect = OSError("Input overflowed")
        capture = MicrophoneCapture(callback=Mock())

        capture.start_recording()
        capture.recording_thread.join(timeout=1.0)

        assert not capture.recording_thread.is_alive()
        mock_pyaudio['stream'].close.assert_called_once()
        capture.stop_recording()
