"""Data models for the voicepanels application."""

from .audio import AudioStats
from .events import AudioEvent
from .panels import (
    AuthorizationStatus,
    COMMAND_WORDS,
    Panel,
    PanelBoard,
    RecordingState,
    START_LISTENING_MESSAGE,
    STOP_LISTENING_MESSAGE,
)
from .transcription import TranscriptionResult

__all__ = [
    "AudioStats",
    "AudioEvent",
    "AuthorizationStatus",
    "COMMAND_WORDS",
    "Panel",
    "PanelBoard",
    "RecordingState",
    "START_LISTENING_MESSAGE",
    "STOP_LISTENING_MESSAGE",
    "TranscriptionResult",
]
