"""Cross-platform keyboard input handling for the terminal UI."""

import sys
import threading
import time
from typing import Optional, Callable
import logging

logger = logging.getLogger(__name__)

KeyCallback = Callable[[str], bool]


class KeyboardInputHandler:
    """Read single keypresses from a raw terminal on a background thread."""

    def __init__(self, callback: KeyCallback):
        """Initialize keyboard handler.

        Args:
            callback: Function that takes a key and returns True to continue, False to quit
        """
        self.callback = callback
        self.running = False
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the keyboard input handler."""
        if self.running:
            return

        self.running = True
        self.thread = threading.Thread(target=self._input_loop, daemon=True)
        self.thread.name = "KeyboardInput"
        self.thread.start()
        logger.info("Keyboard input handler started")

    def stop(self) -> None:
        """Stop the keyboard input handler."""
        self.running = False
        if self.thread and self.thread is not threading.current_thread():
            self.thread.join(timeout=1.0)
        logger.info("Keyboard input handler stopped")

    def _input_loop(self) -> None:
        """Main input handling loop."""
        while self.running:
            key = self._get_key()
            if key:
                logger.debug(f"Key detected: '{key}' (ord: {ord(key)})")
                if not self.callback(key):
                    logger.info("Callback returned False, ending input loop")
                    break
            time.sleep(0.05)
        self.running = False

    def _get_key(self) -> Optional[str]:
        """Get a single keypress in a cross-platform way."""
        if sys.platform == "win32":
            return self._get_key_windows()
        return self._get_key_unix()

    def _get_key_windows(self) -> Optional[str]:
        """Get key on Windows."""
        import msvcrt
        if msvcrt.kbhit():
            key = msvcrt.getch().decode('utf-8', errors='ignore')
            return key.lower()
        return None

    def _get_key_unix(self) -> Optional[str]:
        """Get key on Unix/Linux/macOS."""
        import select
        import tty
        import termios

        if select.select([sys.stdin], [], [], 0.1)[0]:
            old_settings = termios.tcgetattr(sys.stdin)
            try:
                tty.setraw(sys.stdin.fileno())
                key = sys.stdin.read(1)
                return key.lower()
            finally:
                termios.tcsetattr(sys.stdin, termios.TCSADRAIN, old_settings)
        return None


class SimpleInputHandler:
    """Line-based input handler for when stdin is not a terminal."""

    def __init__(self, callback: KeyCallback):
        """Initialize simple handler.

        Args:
            callback: Function that takes a key and returns True to continue, False to quit
        """
        self.callback = callback
        self.running = False
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the simple input handler."""
        if self.running:
            return

        self.running = True
        self.thread = threading.Thread(target=self._input_loop, daemon=True)
        self.thread.name = "LineInput"
        self.thread.start()
        logger.info("Simple input handler started")

    def stop(self) -> None:
        """Stop the simple input handler."""
        self.running = False
        logger.info("Simple input handler stopped")

    def _input_loop(self) -> None:
        """Simple input loop using readline()."""
        while self.running:
            line = sys.stdin.readline()
            if not line:
                # EOF
                break
            user_input = line.strip().lower()
            key = user_input[0] if user_input else " "
            if not self.callback(key):
                break
        self.running = False


def create_input_handler(callback: KeyCallback) -> object:
    """Create the best available input handler for the current stdin.

    Args:
        callback: Function that takes a key and returns True to continue, False to quit

    Returns:
        An input handler instance
    """
    if sys.stdin.isatty():
        return KeyboardInputHandler(callback)
    logger.info("stdin is not a terminal, using line-based input")
    return SimpleInputHandler(callback)
