"""Terminal user interface for voicepanels."""

from .dispatch import MainThreadDispatcher

__all__ = [
    "MainThreadDispatcher",
]
