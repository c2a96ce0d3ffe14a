"""Event models passed from the audio engine to its tap."""

from dataclasses import dataclass


@dataclass
class AudioEvent:
    """Audio buffer event with metadata."""
    chunk_id: str
    audio_data: bytes
    timestamp: float  # Unix timestamp when the buffer was captured
    sequence_number: int
    sample_rate: int = 16000
    channels: int = 1
    peak_level: float = 0.0
