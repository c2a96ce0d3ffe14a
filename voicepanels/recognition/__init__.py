"""Speech recognition module for voicepanels."""

from .base import AbstractRecognitionBackend
from .request import AudioBufferRecognitionRequest
from .task import RecognitionTask
from .publisher import TranscriptionPublisher, TRANSCRIPTION_TOPIC
from .google_backend import GoogleSpeechBackend

__all__ = [
    "AbstractRecognitionBackend",
    "AudioBufferRecognitionRequest",
    "RecognitionTask",
    "TranscriptionPublisher",
    "TRANSCRIPTION_TOPIC",
    "GoogleSpeechBackend",
]
