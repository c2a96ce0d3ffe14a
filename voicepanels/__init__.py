"""Voice-command panel switcher."""

__version__ = "0.1.0"
