"""Recognition task: a worker thread delivering transcripts to a handler."""

import logging
import threading
from typing import Callable, Iterable, Optional

from ..errors import RecognitionError
from ..models.transcription import TranscriptionResult
from .request import AudioBufferRecognitionRequest

logger = logging.getLogger(__name__)

ResultHandler = Callable[[TranscriptionResult], None]


class RecognitionTask:
    """An active recognition session owned by whoever started it.

    The task iterates ``results`` on its own thread and hands every result to
    ``result_handler``. After ``cancel()`` no further results are delivered.
    If the stream ends on its own, ``finished_handler`` is called from the
    task thread.
    """

    def __init__(self,
                 request: AudioBufferRecognitionRequest,
                 results: Callable[[], Iterable[TranscriptionResult]],
                 result_handler: ResultHandler,
                 finished_handler: Optional[Callable[[], None]] = None,
                 name: str = "RecognitionTask"):
        self.request = request
        self.results = results
        self.result_handler = result_handler
        self.finished_handler = finished_handler
        self.name = name
        self.results_delivered = 0

        self._cancelled = threading.Event()
        self._finished = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the worker thread."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.name = self.name
        self._thread.start()
        logger.debug(f"{self.name} started")

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def is_finished(self) -> bool:
        return self._finished.is_set()

    def cancel(self) -> None:
        """Stop delivering results and close the request stream. Idempotent."""
        if self._cancelled.is_set():
            return
        self._cancelled.set()
        self.request.end_audio()
        logger.debug(f"{self.name} cancelled after {self.results_delivered} results")

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the worker to finish; returns True if it did."""
        return self._finished.wait(timeout)

    def _run(self) -> None:
        try:
            for result in self.results():
                if self._cancelled.is_set():
                    break
                self.results_delivered += 1
                self.result_handler(result)
        except RecognitionError as e:
            logger.error(f"{self.name} failed: {e}")
        except Exception as e:
            logger.error(f"Unhandled exception in {self.name}: {e}", exc_info=True)
        finally:
            self._finished.set()
            logger.debug(f"{self.name} finished")
            if not self._cancelled.is_set() and self.finished_handler is not None:
                self.finished_handler()
