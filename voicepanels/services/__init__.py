"""Services layer for voicepanels application logic."""

from .recording_controller import RecordingController, PANELS_TOPIC

__all__ = [
    "RecordingController",
    "PANELS_TOPIC",
]
