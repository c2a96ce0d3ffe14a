"""Pytest configuration and fixtures for voicepanels tests."""

import pytest
import queue
import tempfile
import time
import logging
from unittest.mock import Mock, patch
import numpy as np

from voicepanels.audio.capture import AudioCapture
from voicepanels.errors import RecognitionError
from voicepanels.models.audio import AudioStats
from voicepanels.models.panels import AuthorizationStatus, PanelBoard
from voicepanels.models.transcription import TranscriptionResult
from voicepanels.recognition.base import AbstractRecognitionBackend
from voicepanels.recognition.publisher import TranscriptionPublisher
from voicepanels.services.recording_controller import RecordingController
from voicepanels.ui.dispatch import MainThreadDispatcher


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without hardware or network")
    config.addinivalue_line("markers", "integration: tests wiring several components together")
    config.addinivalue_line("markers", "hardware: tests that need a real microphone")


def poll_until(condition, timeout: float = 2.0, interval: float = 0.005) -> bool:
    """Poll ``condition`` until it is true or ``timeout`` expires."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        if condition():
            return True
        time.sleep(interval)
    return condition()


class FakeRecognitionBackend(AbstractRecognitionBackend):
    """In-memory recognizer: tests push transcripts, the task thread yields them."""

    def __init__(self, status: AuthorizationStatus = AuthorizationStatus.AUTHORIZED,
                 asynchronous_authorization: bool = False):
        super().__init__("en-US")
        self.status = status
        self.asynchronous_authorization = asynchronous_authorization
        self.authorization_requests = 0
        self.pending_callbacks = []
        self.requests = []
        self.tasks = []
        self.fail_to_start = False
        self._results: "queue.Queue" = queue.Queue()

    def request_authorization(self, callback) -> None:
        self.authorization_requests += 1
        if self.asynchronous_authorization:
            self.pending_callbacks.append(callback)
        else:
            callback(self.status)

    def check_ready(self) -> None:
        if self.fail_to_start:
            raise RecognitionError("recognizer unavailable")

    def recognition_task(self, request, result_handler, finished_handler=None):
        task = super().recognition_task(request, result_handler, finished_handler)
        self.tasks.append(task)
        return task

    def stream_results(self, request):
        self.requests.append(request)
        while not request.is_ended:
            try:
                item = self._results.get(timeout=0.01)
            except queue.Empty:
                continue
            if request.is_ended:
                # Leave it for the next task
                self._results.put(item)
                return
            if item is None:
                return
            if isinstance(item, Exception):
                raise item
            yield item

    def emit(self, transcript: str, is_final: bool = False) -> None:
        """Deliver a transcript through the active recognition task."""
        self._results.put(TranscriptionResult.from_transcript(
            transcript, is_final=is_final, service="fake"))

    def fail(self, error: Exception) -> None:
        self._results.put(error)

    def finish(self) -> None:
        """End the result stream as if the service closed it."""
        self._results.put(None)


@pytest.fixture
def wait_for():
    """Polling helper for conditions reached on background threads."""
    return poll_until


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # 1024 samples of 16-bit audio (sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate
    freq = 440

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    audio_data = (wave_data * 32767).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        def read(frames, exception_on_overflow=True):
            # Pace reads roughly like a real device
            time.sleep(0.005)
            return mock_stream.read_data

        mock_stream.read_data = b'\x00' * 2048  # Silent audio
        mock_stream.read.side_effect = read
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_sample_size.return_value = 2
        mock_pyaudio_instance.get_device_count.return_value = 1
        mock_pyaudio_instance.get_device_info_by_index.return_value = {"maxInputChannels": 1}

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def mock_audio_capture():
    """Mock AudioCapture for controller tests."""
    mock = Mock(spec=AudioCapture)
    mock.is_running = False
    mock.tap = None
    mock.error_handler = None

    def install_tap(callback, error_handler=None):
        mock.tap = callback
        mock.error_handler = error_handler

    def remove_tap():
        mock.tap = None
        mock.error_handler = None

    mock.install_tap.side_effect = install_tap
    mock.remove_tap.side_effect = remove_tap
    mock.get_recording_stats.return_value = AudioStats(
        is_running=False,
        duration_seconds=0.0,
        sample_rate=16000,
        chunk_size=1024,
        total_chunks=0,
    )
    return mock


@pytest.fixture
def fake_backend():
    return FakeRecognitionBackend()


@pytest.fixture
def board():
    return PanelBoard()


@pytest.fixture
def dispatcher():
    return MainThreadDispatcher()


@pytest.fixture
def controller(mock_audio_capture, fake_backend, board, dispatcher):
    """Controller wired to fakes; stopped again at teardown."""
    controller = RecordingController(
        audio_capture=mock_audio_capture,
        backend=fake_backend,
        board=board,
        dispatcher=dispatcher,
        publisher=TranscriptionPublisher()
    )
    yield controller
    controller.view_will_disappear()


@pytest.fixture
def hear(fake_backend, dispatcher):
    """Speak a transcript and pump the UI thread until it has been applied."""
    def hear_transcript(transcript: str) -> None:
        fake_backend.emit(transcript)
        assert poll_until(lambda: dispatcher.pending() > 0), f"no result for '{transcript}'"
        dispatcher.drain()
    return hear_transcript
