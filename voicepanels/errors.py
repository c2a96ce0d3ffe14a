"""Exception types raised by voicepanels components."""


class VoicePanelsError(Exception):
    """Base class for application errors."""


class AudioEngineError(VoicePanelsError):
    """The microphone stream could not be opened or started."""


class RecognitionError(VoicePanelsError):
    """The speech recognition stream failed."""
