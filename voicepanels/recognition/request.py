"""Streaming recognition request fed by audio engine buffers."""

import logging
import queue
import threading
from typing import Iterator, Union

from ..models.events import AudioEvent

logger = logging.getLogger(__name__)

_END_OF_AUDIO = None


class AudioBufferRecognitionRequest:
    """A stream of audio buffers consumed by one recognition task.

    Buffers are appended from the audio capture thread and drained by the
    recognition worker through ``audio_chunks()``. Once ``end_audio()`` has
    been called the stream is closed and later appends are dropped.
    """

    def __init__(self):
        self._queue: "queue.Queue" = queue.Queue()
        self._ended = threading.Event()
        self._lock = threading.Lock()
        self.buffers_appended = 0

    @property
    def is_ended(self) -> bool:
        return self._ended.is_set()

    def append(self, buffer: Union[AudioEvent, bytes]) -> None:
        """Append one audio buffer (an AudioEvent or raw PCM bytes)."""
        audio_data = buffer.audio_data if isinstance(buffer, AudioEvent) else buffer
        if not audio_data:
            return
        with self._lock:
            if self._ended.is_set():
                return
            self._queue.put(audio_data)
            self.buffers_appended += 1

    def end_audio(self) -> None:
        """Mark the end of the audio stream. Idempotent."""
        with self._lock:
            if self._ended.is_set():
                return
            self._ended.set()
            self._queue.put(_END_OF_AUDIO)
        logger.debug(f"Recognition request ended after {self.buffers_appended} buffers")

    def audio_chunks(self) -> Iterator[bytes]:
        """Yield appended buffers in order until the stream is ended."""
        while True:
            chunk = self._queue.get()
            if chunk is _END_OF_AUDIO:
                return
            yield chunk
