"""Microphone audio engine: a PyAudio input stream with a single buffer tap."""

import pyaudio
import time
import logging
from threading import Thread, Event, Lock
from typing import Optional, Callable
from datetime import datetime
import numpy as np

from ..errors import AudioEngineError
from ..models.audio import AudioStats
from ..models.events import AudioEvent


logger = logging.getLogger(__name__)

AudioTap = Callable[[AudioEvent], None]
AudioErrorHandler = Callable[[Exception], None]


class AudioCapture:
    """Continuous microphone capture delivering each buffer to an installed tap."""

    def __init__(
        self,
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
        format: int = pyaudio.paInt16,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            sample_rate: Audio sample rate (16kHz for speech recognition)
            chunk_size: Size of each audio buffer in samples
            channels: Number of audio channels (1 for mono)
            format: Audio format (16-bit signed int)
        """
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format

        self.tap: Optional[AudioTap] = None
        self.error_handler: Optional[AudioErrorHandler] = None

        # Capture thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_running = False

        # Statistics tracking
        self.start_time: Optional[datetime] = None
        self.total_chunks = 0
        self.peak_level = 0.0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream: Optional[pyaudio.Stream] = None
        self._stream_lock = Lock()

    def install_tap(self, callback: AudioTap,
                    error_handler: Optional[AudioErrorHandler] = None) -> None:
        """Install the callback that receives every captured buffer.

        Args:
            callback: Called on the capture thread with each AudioEvent
            error_handler: Called on the capture thread if reading from the
                microphone fails after the engine has started
        """
        if self.tap is not None:
            logger.warning("Replacing existing audio tap")
        self.tap = callback
        self.error_handler = error_handler
        logger.debug("Audio tap installed")

    def remove_tap(self) -> None:
        """Remove the installed tap. Safe to call when none is installed."""
        if self.tap is not None:
            logger.debug("Audio tap removed")
        self.tap = None
        self.error_handler = None

    def prepare(self) -> None:
        """Open the input stream so that start() can begin immediately.

        Raises:
            AudioEngineError: if the microphone stream cannot be opened
        """
        with self._stream_lock:
            if self.stream is not None:
                return
            try:
                self.pyaudio_instance = pyaudio.PyAudio()
                self.stream = self.pyaudio_instance.open(
                    format=self.format,
                    channels=self.channels,
                    rate=self.sample_rate,
                    input=True,
                    frames_per_buffer=self.chunk_size,
                    stream_callback=None
                )
            except (OSError, IOError) as e:
                self._release_stream_locked()
                raise AudioEngineError(f"Could not open microphone stream: {e}") from e
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")

    def start(self) -> None:
        """Start capturing in a background thread.

        Raises:
            AudioEngineError: if the microphone stream cannot be opened
        """
        if self.is_running:
            logger.warning("Audio engine already running")
            return

        self.prepare()

        logger.info("Starting audio engine")
        self.stop_event.clear()
        self.start_time = datetime.now()
        self.total_chunks = 0
        self.peak_level = 0.0

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.is_running = True
        self.recording_thread.start()

    def stop(self) -> None:
        """Stop capturing and release the stream. Idempotent."""
        was_running = self.is_running
        self.stop_event.set()

        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Capture thread did not stop cleanly")
        self.recording_thread = None

        with self._stream_lock:
            self._release_stream_locked()

        if was_running:
            logger.info(f"Audio engine stopped. Total chunks: {self.total_chunks}")
        self.is_running = False

    def _release_stream_locked(self) -> None:
        if self.stream is not None:
            try:
                self.stream.stop_stream()
                self.stream.close()
            except (OSError, IOError) as e:
                logger.warning(f"Error closing audio stream: {e}")
            self.stream = None
        if self.pyaudio_instance is not None:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None

    def _read_audio_chunk(self) -> Optional[bytes]:
        with self._stream_lock:
            if self.stream is None:
                return None
            audio_chunk = self.stream.read(
                self.chunk_size,
                exception_on_overflow=False
            )
        self.total_chunks += 1
        return audio_chunk

    def _deliver(self, audio_chunk: bytes) -> None:
        samples = np.frombuffer(audio_chunk, dtype=np.int16)
        level = float(np.abs(samples).max()) / 32768.0 if samples.size else 0.0
        self.peak_level = max(self.peak_level, level)

        audio_event = AudioEvent(
            chunk_id=f"chunk_{self.total_chunks}",
            audio_data=audio_chunk,
            timestamp=time.time(),
            sequence_number=self.total_chunks,
            sample_rate=self.sample_rate,
            channels=self.channels,
            peak_level=level,
        )

        tap = self.tap
        if tap is not None:
            tap(audio_event)

    def _record_continuously(self) -> None:
        """Internal method: capture loop in background thread."""
        try:
            while not self.stop_event.is_set():
                audio_chunk = self._read_audio_chunk()
                if audio_chunk is None:
                    break
                self._deliver(audio_chunk)
        except (OSError, IOError) as e:
            logger.error(f"Audio capture failed: {e}")
            self.is_running = False
            error_handler = self.error_handler
            if error_handler is not None and not self.stop_event.is_set():
                error_handler(e)
        finally:
            self.is_running = False

    def get_recording_stats(self) -> AudioStats:
        """Get current capture statistics."""
        duration = 0.0
        if self.start_time:
            duration = (datetime.now() - self.start_time).total_seconds()

        return AudioStats(
            is_running=self.is_running,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            total_chunks=self.total_chunks,
            peak_level=self.peak_level,
        )

    def check_microphone_available(self) -> bool:
        """Check whether PyAudio reports at least one input device."""
        instance = pyaudio.PyAudio()
        try:
            for index in range(instance.get_device_count()):
                if instance.get_device_info_by_index(index).get("maxInputChannels", 0) > 0:
                    return True
            return False
        finally:
            instance.terminate()
