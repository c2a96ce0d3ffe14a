"""Marshal calls from framework threads onto the UI thread."""

import logging
import queue
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)


class MainThreadDispatcher:
    """Runs callables on the thread that created the dispatcher.

    Calls made from the owner thread run immediately. Calls from any other
    thread are queued until the owner thread calls ``drain()``.
    """

    def __init__(self):
        self.owner = threading.current_thread()
        self._pending: "queue.Queue" = queue.Queue()

    def is_owner_thread(self) -> bool:
        return threading.current_thread() is self.owner

    def dispatch(self, fn: Callable[..., Any], *args: Any) -> None:
        """Run ``fn(*args)`` on the owner thread."""
        if self.is_owner_thread():
            fn(*args)
        else:
            self._pending.put((fn, args))

    def pending(self) -> int:
        return self._pending.qsize()

    def drain(self) -> int:
        """Run every queued call; returns how many ran.

        A call that raises is logged and does not stop the rest.
        """
        if not self.is_owner_thread():
            raise RuntimeError("drain() must be called from the dispatcher's owner thread")

        ran = 0
        while True:
            try:
                fn, args = self._pending.get_nowait()
            except queue.Empty:
                return ran
            try:
                fn(*args)
            except Exception as e:
                logger.error(f"Dispatched call {getattr(fn, '__name__', fn)} failed: {e}", exc_info=True)
            ran += 1
