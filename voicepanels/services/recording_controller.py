"""Recording controller binding voice commands to panel visibility."""

import logging
from typing import Optional

from pubsub import pub

from ..audio.capture import AudioCapture
from ..errors import AudioEngineError, RecognitionError
from ..models.panels import (
    AuthorizationStatus,
    Panel,
    PanelBoard,
    RecordingState,
    START_LISTENING_MESSAGE,
    STOP_LISTENING_MESSAGE,
)
from ..models.transcription import TranscriptionResult
from ..recognition.base import AbstractRecognitionBackend
from ..recognition.publisher import TranscriptionPublisher
from ..recognition.request import AudioBufferRecognitionRequest
from ..recognition.task import RecognitionTask
from ..ui.dispatch import MainThreadDispatcher

logger = logging.getLogger(__name__)

PANELS_TOPIC = "panels.changed"


class RecordingController:
    """Starts and stops listening and maps recognized words to panels.

    All public methods are called on the UI thread. Authorization and
    recognition callbacks arrive on framework threads and are marshaled
    through the dispatcher before touching the board.

    State machine::

        IDLE (all panels visible) --toggle--> LISTENING
        LISTENING --toggle / view_will_disappear--> IDLE
    """

    def __init__(self,
                 audio_capture: AudioCapture,
                 backend: AbstractRecognitionBackend,
                 board: PanelBoard,
                 dispatcher: MainThreadDispatcher,
                 publisher: Optional[TranscriptionPublisher] = None):
        self.audio_capture = audio_capture
        self.backend = backend
        self.board = board
        self.dispatcher = dispatcher
        self.publisher = publisher

        self.state = RecordingState.IDLE
        self.request: Optional[AudioBufferRecognitionRequest] = None
        self.recognition_task: Optional[RecognitionTask] = None
        self.last_transcript: Optional[str] = None

        # Bumped on every start and stop so late callbacks from an earlier
        # session are recognized and dropped.
        self._session = 0
        self._pending_authorization: Optional[int] = None

    @property
    def is_recording(self) -> bool:
        return self.state is RecordingState.LISTENING

    @property
    def awaiting_authorization(self) -> bool:
        return self._pending_authorization is not None

    def toggle(self) -> None:
        """Handle a press of the listen button."""
        if self.is_recording:
            self.stop_recording()
            self.board.set_button_title(START_LISTENING_MESSAGE)
            return

        if self.awaiting_authorization:
            logger.info("Authorization already requested, ignoring toggle")
            return

        self._pending_authorization = self._session
        logger.info("Requesting speech recognition authorization")
        self.backend.request_authorization(self._on_authorization)

    def _on_authorization(self, status: AuthorizationStatus) -> None:
        # Framework thread
        self.dispatcher.dispatch(self._handle_authorization, status)

    def _handle_authorization(self, status: AuthorizationStatus) -> None:
        requested_in = self._pending_authorization
        self._pending_authorization = None
        if requested_in != self._session:
            logger.info("Discarding authorization result for a torn-down session")
            return

        if status is not AuthorizationStatus.AUTHORIZED:
            logger.warning(f"Can't use speech recognition: {status.value}")
            self.board.set_button_title(START_LISTENING_MESSAGE)
            return

        if self.start_recording():
            self.board.set_button_title(STOP_LISTENING_MESSAGE)
        else:
            self.board.set_button_title(START_LISTENING_MESSAGE)

    def start_recording(self) -> bool:
        """Start audio capture and a recognition task.

        Returns:
            True if listening started, False if already listening or if the
            audio engine or recognizer failed to start
        """
        if self.is_recording:
            logger.warning("Recognition task already active")
            return False

        request = AudioBufferRecognitionRequest()
        session = self._session + 1
        self.audio_capture.install_tap(
            request.append,
            error_handler=lambda error: self._on_audio_failure(session, error),
        )
        try:
            self.audio_capture.start()
        except AudioEngineError as e:
            logger.error(f"A problem has occurred starting the audio engine: {e}")
            self.audio_capture.remove_tap()
            request.end_audio()
            return False

        self._session = session
        try:
            task = self.backend.recognition_task(
                request,
                result_handler=lambda result: self._on_result(session, result),
                finished_handler=lambda: self._on_task_finished(session),
            )
        except RecognitionError as e:
            logger.error(f"A problem has occurred starting recognition: {e}")
            self.audio_capture.stop()
            self.audio_capture.remove_tap()
            request.end_audio()
            return False

        self.request = request
        self.recognition_task = task
        self.state = RecordingState.LISTENING
        logger.info("Listening for commands")
        return True

    def _on_result(self, session: int, result: TranscriptionResult) -> None:
        # Recognition task thread
        segment = result.last_segment
        if segment is None:
            return
        self.dispatcher.dispatch(self._apply_transcript, session, segment.lower(), result)

    def _apply_transcript(self, session: int, word: str, result: TranscriptionResult) -> None:
        if session != self._session or not self.is_recording:
            logger.debug(f"Dropping late transcript '{word}'")
            return

        logger.info(f"Heard: {word}")
        self.last_transcript = word
        if self.publisher:
            self.publisher.publish_transcription_result(result)
        self.select_panel(word)

    def _on_task_finished(self, session: int) -> None:
        # Recognition task thread
        self.dispatcher.dispatch(self._handle_task_finished, session)

    def _handle_task_finished(self, session: int) -> None:
        if session != self._session or not self.is_recording:
            return
        logger.warning("Recognition stream ended, stopping")
        self.stop_recording()
        self.board.set_button_title(START_LISTENING_MESSAGE)

    def _on_audio_failure(self, session: int, error: Exception) -> None:
        # Audio capture thread
        self.dispatcher.dispatch(self._handle_audio_failure, session, error)

    def _handle_audio_failure(self, session: int, error: Exception) -> None:
        if session != self._session or not self.is_recording:
            return
        logger.error(f"Audio engine failed while listening, stopping: {error}")
        self.stop_recording()
        self.board.set_button_title(START_LISTENING_MESSAGE)

    def stop_recording(self) -> None:
        """Tear down audio capture and recognition and show every panel.

        Safe to call repeatedly and from view teardown.
        """
        self.audio_capture.stop()
        if self.request is not None:
            self.request.end_audio()
        if self.recognition_task is not None:
            self.recognition_task.cancel()
        self.audio_capture.remove_tap()

        if self.is_recording:
            logger.info("Stopped listening")
        self.request = None
        self.recognition_task = None
        self._session += 1
        self.state = RecordingState.IDLE
        self.board.show_all()
        self._publish_panels()

    def select_panel(self, word: str) -> None:
        """Show only the panel named by ``word``; hide all for anything else."""
        try:
            panel = Panel.for_command(word)
        except ValueError:
            self.board.hide_all()
        else:
            self.board.show_only(panel)
        self._publish_panels()

    def view_will_disappear(self) -> None:
        """Teardown hook for when the panel view is dismissed."""
        self._pending_authorization = None
        self.stop_recording()
        self.board.set_button_title(START_LISTENING_MESSAGE)

    def _publish_panels(self) -> None:
        pub.sendMessage(PANELS_TOPIC, visible=self.board.snapshot())
