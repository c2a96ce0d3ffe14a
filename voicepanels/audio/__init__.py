"""Microphone audio engine."""

from .capture import AudioCapture

__all__ = [
    'AudioCapture',
]
