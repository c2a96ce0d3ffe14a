"""Transcription-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class TranscriptionResult:
    """One partial or final result from a recognition task."""
    text: str
    segments: List[str] = field(default_factory=list)
    is_final: bool = False
    confidence: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)
    service: str = ""
    language: str = "en-US"

    @classmethod
    def from_transcript(cls, text: str, **kwargs) -> "TranscriptionResult":
        """Build a result whose segments are the words of ``text``."""
        return cls(text=text, segments=text.split(), **kwargs)

    @property
    def last_segment(self) -> Optional[str]:
        """Most recently recognized word, or None for an empty transcript."""
        if not self.segments:
            return None
        return self.segments[-1]
