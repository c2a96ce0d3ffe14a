"""Abstract base class for speech recognition backends."""

from abc import ABC, abstractmethod
from typing import Callable, Iterable, Optional
import logging

from ..models.panels import AuthorizationStatus
from ..models.transcription import TranscriptionResult
from .request import AudioBufferRecognitionRequest
from .task import RecognitionTask, ResultHandler

logger = logging.getLogger(__name__)

AuthorizationCallback = Callable[[AuthorizationStatus], None]


class AbstractRecognitionBackend(ABC):
    """A speech framework able to authorize and stream transcripts."""

    def __init__(self, language: str = "en-US"):
        """Initialize backend with language preference."""
        self.language = language

    @abstractmethod
    def request_authorization(self, callback: AuthorizationCallback) -> None:
        """Ask for permission to use speech recognition.

        ``callback`` receives the resulting AuthorizationStatus and may be
        invoked on any thread.
        """
        pass

    @abstractmethod
    def stream_results(self, request: AudioBufferRecognitionRequest) -> Iterable[TranscriptionResult]:
        """Yield partial and final results for the audio in ``request``.

        Raises:
            RecognitionError: if the recognition stream fails
        """
        pass

    def check_ready(self) -> None:
        """Raise RecognitionError if a recognition task cannot be started."""
        pass

    def recognition_task(self,
                         request: AudioBufferRecognitionRequest,
                         result_handler: ResultHandler,
                         finished_handler: Optional[Callable[[], None]] = None) -> RecognitionTask:
        """Start a recognition task over ``request``.

        Args:
            request: Audio stream to recognize
            result_handler: Called on the task thread for every result
            finished_handler: Called on the task thread if the stream ends
                before the task is cancelled

        Returns:
            The running RecognitionTask

        Raises:
            RecognitionError: if the backend cannot start recognizing
        """
        self.check_ready()
        task = RecognitionTask(
            request=request,
            results=lambda: self.stream_results(request),
            result_handler=result_handler,
            finished_handler=finished_handler,
            name=f"{self.__class__.__name__}Task",
        )
        task.start()
        return task

    def cleanup(self) -> None:
        """Clean up backend resources."""
        pass
