"""Transcription publisher module for pub/sub event publishing."""

import logging
from pubsub import pub
from ..models.transcription import TranscriptionResult

logger = logging.getLogger(__name__)

TRANSCRIPTION_TOPIC = "transcription.result"


class TranscriptionPublisher:
    """Publishes transcription results using pubsub.pub."""

    def __init__(self, topic: str = TRANSCRIPTION_TOPIC):
        """Initialize transcription publisher.

        Args:
            topic: Pub/sub topic name for transcription results
        """
        self.topic = topic
        logger.info(f"TranscriptionPublisher initialized with topic: {topic}")

    def publish_transcription_result(self, result: TranscriptionResult) -> None:
        """Publish a transcription result to the pub/sub topic."""
        pub.sendMessage(self.topic, result=result)
        logger.debug(f"Published transcription result: '{result.text}' (final={result.is_final})")
