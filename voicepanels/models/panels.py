"""Panel, recording and authorization state models."""

from enum import Enum
from typing import Dict, List

START_LISTENING_MESSAGE = "Start listening"
STOP_LISTENING_MESSAGE = "Stop listening"


class RecordingState(Enum):
    """Listening state owned by the recording controller."""
    IDLE = "idle"
    LISTENING = "listening"


class AuthorizationStatus(Enum):
    """Outcome of a speech recognition authorization request."""
    AUTHORIZED = "authorized"
    DENIED = "denied"
    RESTRICTED = "restricted"
    NOT_DETERMINED = "not_determined"


class Panel(Enum):
    """The four voice-selectable panels; values are their command words."""
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"

    @classmethod
    def for_command(cls, word: str) -> "Panel":
        """Return the panel for an exact command word.

        Raises:
            ValueError: if ``word`` is not a command word
        """
        return cls(word)


COMMAND_WORDS = tuple(panel.value for panel in Panel)


class PanelBoard:
    """Visibility flags for the four panels plus the listen button title.

    Only the UI thread mutates a board.
    """

    def __init__(self):
        self.hidden: Dict[Panel, bool] = {panel: False for panel in Panel}
        self.button_title = START_LISTENING_MESSAGE

    def show_only(self, selected: Panel) -> None:
        for panel in Panel:
            self.hidden[panel] = panel is not selected

    def hide_all(self) -> None:
        for panel in Panel:
            self.hidden[panel] = True

    def show_all(self) -> None:
        for panel in Panel:
            self.hidden[panel] = False

    def is_visible(self, panel: Panel) -> bool:
        return not self.hidden[panel]

    def visible_panels(self) -> List[Panel]:
        return [panel for panel in Panel if not self.hidden[panel]]

    def set_button_title(self, title: str) -> None:
        self.button_title = title

    def snapshot(self) -> Dict[str, bool]:
        """Visibility keyed by command word, for logging and events."""
        return {panel.value: not self.hidden[panel] for panel in Panel}
