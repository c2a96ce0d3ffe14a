"""Audio-related data models."""

from dataclasses import dataclass


@dataclass
class AudioStats:
    """Audio capture statistics."""
    is_running: bool
    duration_seconds: float
    sample_rate: int
    chunk_size: int
    total_chunks: int
    peak_level: float = 0.0
