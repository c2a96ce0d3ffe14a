"""Google Speech-to-Text streaming recognition backend."""

import logging
import threading
from pathlib import Path
from typing import Iterable, Optional

from .base import AbstractRecognitionBackend, AuthorizationCallback
from .request import AudioBufferRecognitionRequest
from ..errors import RecognitionError
from ..models.panels import AuthorizationStatus
from ..models.transcription import TranscriptionResult

from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.auth import exceptions as auth_exceptions
from google.oauth2 import service_account

logger = logging.getLogger(__name__)


class GoogleSpeechBackend(AbstractRecognitionBackend):
    """Google Speech-to-Text streaming API backend."""

    def __init__(self,
                 credentials_path: Optional[str] = None,
                 sample_rate: int = 16000,
                 language: str = "en-US",
                 interim_results: bool = True):
        """Initialize Google Speech backend.

        Args:
            credentials_path: Path to Google Cloud service account JSON file
            sample_rate: Sample rate of the LINEAR16 audio in Hz
            language: Language code (e.g., 'en-US')
            interim_results: Deliver partial results while speech is ongoing
        """
        super().__init__(language)
        self.credentials_path = credentials_path
        self.client: Optional[speech.SpeechClient] = None
        self.project_id = None
        self.service_name = "Google Speech-to-Text"
        self.streaming_config = speech.StreamingRecognitionConfig(
            config=speech.RecognitionConfig(
                encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
                sample_rate_hertz=sample_rate,
                language_code=self.language,
                # Command words must arrive bare, without trailing periods
                enable_automatic_punctuation=False,
            ),
            interim_results=interim_results,
        )
        self._client_lock = threading.Lock()

    def request_authorization(self, callback: AuthorizationCallback) -> None:
        """Load credentials on a background thread and report the outcome."""
        thread = threading.Thread(
            target=lambda: callback(self.authorize()),
            daemon=True,
        )
        thread.name = "SpeechAuthorization"
        thread.start()

    def authorize(self) -> AuthorizationStatus:
        """Create the Speech client from service account credentials."""
        with self._client_lock:
            if self.client is not None:
                return AuthorizationStatus.AUTHORIZED

            if not self.credentials_path:
                logger.warning("Google credentials path is not configured")
                return AuthorizationStatus.NOT_DETERMINED

            if not Path(self.credentials_path).exists():
                logger.warning(f"Google credentials file not found: {self.credentials_path}")
                return AuthorizationStatus.RESTRICTED

            logger.info(f"Loading Google credentials from: {self.credentials_path}")
            try:
                credentials = service_account.Credentials.from_service_account_file(self.credentials_path)
            except (ValueError, auth_exceptions.GoogleAuthError) as e:
                logger.error(f"Google credentials rejected: {e}")
                return AuthorizationStatus.DENIED

            self.client = speech.SpeechClient(credentials=credentials)
            self.project_id = credentials.project_id
            logger.info(f"Using Google Cloud project: {self.project_id}")
            return AuthorizationStatus.AUTHORIZED

    def check_ready(self) -> None:
        if self.client is None:
            raise RecognitionError("Google Speech client is not authorized")

    def stream_results(self, request: AudioBufferRecognitionRequest) -> Iterable[TranscriptionResult]:
        """Stream the request's audio to Google and yield each result."""
        self.check_ready()

        requests = (
            speech.StreamingRecognizeRequest(audio_content=chunk)
            for chunk in request.audio_chunks()
        )
        try:
            responses = self.client.streaming_recognize(self.streaming_config, requests)
            for response in responses:
                for recognition_result in response.results:
                    if not recognition_result.alternatives:
                        continue
                    alternative = recognition_result.alternatives[0]
                    logger.debug(f"Transcript='{alternative.transcript}' "
                                 f"(final={recognition_result.is_final}, conf={alternative.confidence})")
                    yield TranscriptionResult.from_transcript(
                        alternative.transcript,
                        is_final=recognition_result.is_final,
                        confidence=alternative.confidence,
                        service=self.service_name,
                        language=self.language,
                    )
        except gax_exceptions.GoogleAPICallError as e:
            logger.error("Google STT streaming call failed: %s", e)
            raise RecognitionError(f"Google Speech streaming error: {e}") from e

    def cleanup(self) -> None:
        """Release the Speech client."""
        with self._client_lock:
            if self.client is not None:
                self.client.transport.close()
                self.client = None
