"""Terminal screen with four voice-selectable panels and a listen button."""

import time
import logging
from typing import Optional

from pubsub import pub
from rich.align import Align
from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel as RichPanel
from rich.text import Text

from ..models.panels import Panel, PanelBoard
from ..models.transcription import TranscriptionResult
from ..recognition.publisher import TRANSCRIPTION_TOPIC
from ..services.recording_controller import RecordingController
from .dispatch import MainThreadDispatcher
from .keyboard_input import create_input_handler

logger = logging.getLogger(__name__)

PANEL_STYLES = {
    Panel.TOP: "bold white on blue",
    Panel.RIGHT: "bold white on green",
    Panel.BOTTOM: "bold white on magenta",
    Panel.LEFT: "bold black on yellow",
}

TOGGLE_KEYS = (" ", "\n", "\r")
QUIT_KEY = "q"


class PanelScreen:
    """Renders a PanelBoard and routes keypresses to the controller.

    Must be constructed and run on the thread that owns ``dispatcher``.
    """

    def __init__(self,
                 controller: RecordingController,
                 board: PanelBoard,
                 dispatcher: MainThreadDispatcher,
                 console: Optional[Console] = None,
                 refresh_per_second: int = 10,
                 microphone_available: Optional[bool] = None):
        self.controller = controller
        self.board = board
        self.dispatcher = dispatcher
        self.console = console or Console()
        self.refresh_per_second = refresh_per_second
        self.microphone_available = microphone_available

        self.running = False
        self.input_handler = None
        self.last_result: Optional[TranscriptionResult] = None

        pub.subscribe(self._on_transcription, TRANSCRIPTION_TOPIC)

    def _on_transcription(self, result: TranscriptionResult) -> None:
        self.last_result = result

    def create_layout(self) -> Layout:
        """Create the main UI layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name=Panel.TOP.value, ratio=1),
            Layout(name="middle", ratio=1),
            Layout(name=Panel.BOTTOM.value, ratio=1),
            Layout(name="footer", size=3)
        )

        layout["middle"].split_row(
            Layout(name=Panel.LEFT.value, ratio=1),
            Layout(name="centre", ratio=1),
            Layout(name=Panel.RIGHT.value, ratio=1)
        )

        return layout

    def render_panel(self, panel: Panel) -> RichPanel:
        if not self.board.is_visible(panel):
            return RichPanel(Text(""), border_style="bright_black")
        label = Text(panel.value.upper(), style=PANEL_STYLES[panel])
        return RichPanel(Align.center(label, vertical="middle"), style=PANEL_STYLES[panel])

    def update_header(self, layout: Layout) -> None:
        if self.controller.is_recording:
            status = ("LISTENING", "bold red")
        elif self.controller.awaiting_authorization:
            status = ("AUTHORIZING", "bold yellow")
        else:
            status = ("IDLE", "bold yellow")

        parts = [Text("voicepanels", style="bold blue"), "  |  ", status]
        if self.controller.is_recording:
            stats = self.controller.audio_capture.get_recording_stats()
            parts.extend([
                "  |  ",
                (f"Mic {stats.peak_level:.0%}", "cyan"),
                f"  {stats.total_chunks} chunks  {stats.duration_seconds:.0f}s",
            ])
        if self.microphone_available is False:
            parts.extend(["  |  ", ("No microphone found", "bold red")])

        layout["header"].update(RichPanel(Align.center(Text.assemble(*parts)), style="bright_blue"))

    def update_centre(self, layout: Layout) -> None:
        if self.last_result is not None and self.controller.is_recording:
            heard = Text.assemble(
                ("Heard: ", "bold"),
                (self.controller.last_transcript or "", "white"),
                "\n",
                (self.last_result.text, "dim italic"),
            )
        else:
            heard = Text("Say top, bottom, left or right", style="dim white italic")
        layout["centre"].update(RichPanel(Align.center(heard, vertical="middle"), border_style="blue"))

    def update_footer(self, layout: Layout) -> None:
        controls = Text.assemble(
            ("[ ", "bold"),
            (self.board.button_title, "bold green"),
            (" ]", "bold"),
            "   SPACE press button   ",
            ("Q", "bold red"), " quit"
        )
        layout["footer"].update(RichPanel(Align.center(controls), style="bright_black"))

    def update_display(self, layout: Layout) -> None:
        """Update all display components."""
        self.update_header(layout)
        for panel in Panel:
            layout[panel.value].update(self.render_panel(panel))
        self.update_centre(layout)
        self.update_footer(layout)

    def on_key(self, key: str) -> bool:
        """Input-thread callback. Returns False to end the input loop."""
        if key == QUIT_KEY:
            self.dispatcher.dispatch(self.request_quit)
            return False
        self.dispatcher.dispatch(self.handle_key, key)
        return True

    def handle_key(self, key: str) -> None:
        """Handle a keypress on the UI thread."""
        if key in TOGGLE_KEYS:
            self.controller.toggle()
        else:
            logger.debug(f"Unhandled key: '{key}'")

    def request_quit(self) -> None:
        logger.info("Quit requested")
        self.running = False

    def run(self) -> None:
        """Run the panel screen until the user quits."""
        self.running = True
        layout = self.create_layout()

        self.input_handler = create_input_handler(self.on_key)
        self.input_handler.start()

        try:
            with Live(layout, console=self.console,
                      refresh_per_second=self.refresh_per_second, screen=True):
                while self.running:
                    self.dispatcher.drain()
                    self.update_display(layout)
                    time.sleep(1.0 / self.refresh_per_second)
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        """Tear down listening and input handling."""
        self.running = False
        if self.input_handler:
            self.input_handler.stop()
        self.controller.view_will_disappear()
        pub.unsubscribe(self._on_transcription, TRANSCRIPTION_TOPIC)
        logger.info("PanelScreen cleanup completed")
