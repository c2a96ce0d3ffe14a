"""Main application entry point for voicepanels."""

import sys
import time
import argparse
import logging
from pathlib import Path
from typing import Dict, Optional

from pubsub import pub
from rich.console import Console

from voicepanels import __version__
from voicepanels.audio.capture import AudioCapture
from voicepanels.models.panels import PanelBoard
from voicepanels.recognition.google_backend import GoogleSpeechBackend
from voicepanels.recognition.publisher import TranscriptionPublisher
from voicepanels.services.recording_controller import RecordingController, PANELS_TOPIC
from voicepanels.ui.dispatch import MainThreadDispatcher
from voicepanels.ui.panel_screen import PanelScreen

from .config import VoicePanelsConfig

logger = logging.getLogger(__name__)


class Application:
    """Wires the audio engine, speech backend and controller together."""

    def __init__(self, config_path: Optional[str] = None, log_level: Optional[str] = None):
        self.config = VoicePanelsConfig(config_path)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)
        self.console = Console()

        self.audio_capture: Optional[AudioCapture] = None
        self.backend: Optional[GoogleSpeechBackend] = None
        self.controller: Optional[RecordingController] = None
        self.board = PanelBoard()
        self.dispatcher: Optional[MainThreadDispatcher] = None

    def init(self) -> None:
        """Build all collaborators. Must run on the UI thread."""
        logger.info("Initializing services...")

        sample_rate = self.config.get('audio.sample_rate', 16000)
        chunk_size = self.config.get('audio.chunk_size', 1024)
        channels = self.config.get('audio.channels', 1)
        logger.info(f"Audio settings: {sample_rate}Hz, {chunk_size} samples/chunk, {channels} channels")

        self.audio_capture = AudioCapture(
            sample_rate=sample_rate,
            chunk_size=chunk_size,
            channels=channels
        )
        self.backend = GoogleSpeechBackend(
            credentials_path=self.config.get_google_credentials_path(),
            sample_rate=sample_rate,
            language=self.config.get('google_cloud.language', 'en-US'),
            interim_results=self.config.get('google_cloud.interim_results', True)
        )
        self.dispatcher = MainThreadDispatcher()
        self.controller = RecordingController(
            audio_capture=self.audio_capture,
            backend=self.backend,
            board=self.board,
            dispatcher=self.dispatcher,
            publisher=TranscriptionPublisher()
        )

    def run_interactive(self) -> None:
        """Run the terminal panel screen."""
        screen = PanelScreen(
            controller=self.controller,
            board=self.board,
            dispatcher=self.dispatcher,
            console=self.console,
            refresh_per_second=self.config.get('ui.refresh_per_second', 10),
            microphone_available=self.audio_capture.check_microphone_available()
        )
        screen.run()

    def run_headless(self, duration: float) -> Dict[str, bool]:
        """Listen for ``duration`` seconds, logging panel changes.

        Returns:
            Final panel visibility keyed by command word
        """
        pub.subscribe(self._print_panels, PANELS_TOPIC)
        try:
            self.controller.toggle()
            deadline = time.time() + duration
            while time.time() < deadline:
                self.dispatcher.drain()
                time.sleep(0.05)
            self.dispatcher.drain()
            if self.controller.is_recording:
                self.controller.toggle()
        finally:
            self.controller.view_will_disappear()
            pub.unsubscribe(self._print_panels, PANELS_TOPIC)

        final = self.board.snapshot()
        self.console.print(f"Final panels: {self._describe(final)}", style="bold green")
        return final

    def _print_panels(self, visible: Dict[str, bool]) -> None:
        self.console.print(f"Panels: {self._describe(visible)}")

    @staticmethod
    def _describe(visible: Dict[str, bool]) -> str:
        shown = [word for word, is_visible in visible.items() if is_visible]
        return ", ".join(shown) if shown else "none"

    def cleanup(self) -> None:
        if self.controller:
            self.controller.view_will_disappear()
        if self.backend:
            self.backend.cleanup()


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config.

    Raises:
        ValueError: if 'level' is not a logging level name
    """
    numeric_level = logging.getLevelName(str(level).upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid logging level: {level}")

    log_file_path = config.get('logging.file_path', 'data/logs/voicepanels.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("voicepanels starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def main() -> None:
    """Main entry point for the voicepanels application."""
    parser = argparse.ArgumentParser(
        description="voicepanels - show a panel by saying top, bottom, left or right",
        epilog="Keys: SPACE=Start/stop listening, q=Quit"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--duration",
        type=float,
        help="Listen headlessly for this many seconds, print the final panels and exit"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"voicepanels v{__version__}"
    )

    args = parser.parse_args()

    try:
        app = Application(args.config, args.log_level)
    except (FileNotFoundError, ValueError) as e:
        print(f"Configuration error: {e}")
        sys.exit(2)

    try:
        app.init()
        if args.duration is not None:
            app.run_headless(args.duration)
        else:
            app.run_interactive()
    except KeyboardInterrupt:
        print("\nGoodbye!")
    except Exception as e:
        print(f"Error: {e}")
        logger.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        app.cleanup()


if __name__ == "__main__":
    main()
