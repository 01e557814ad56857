"""Cancellable periodic timer thread."""

import threading
from typing import Callable, Optional
from trackplayer.core.interfaces import ITimer
from trackplayer.utils.log import get_logger

logger = get_logger(__name__)


class PeriodicTimer(ITimer):
    """
    Calls a function every `interval` seconds on a daemon thread.

    The first call happens one interval after start(). cancel() is
    immediate and idempotent: a call already in progress finishes, no
    further call is made. A timer cannot be restarted; create a new one.
    """

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "trackplayer-timer"):
        if interval <= 0:
            raise ValueError(f"Timer interval must be positive, got {interval}")
        self._interval = interval
        self._callback = callback
        self._name = name
        self._cancelled = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start ticking."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        logger.debug(f"Timer {self._name} started ({self._interval:.3f}s)")

    def cancel(self) -> None:
        """Stop ticking. Safe to call repeatedly and from the callback."""
        if self._cancelled.is_set():
            return
        self._cancelled.set()
        logger.debug(f"Timer {self._name} cancelled")

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the timer thread to exit (after cancel())."""
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and not self._cancelled.is_set()

    @property
    def interval(self) -> float:
        return self._interval

    def _run(self) -> None:
        while not self._cancelled.wait(self._interval):
            try:
                self._callback()
            except Exception:
                logger.exception(f"Error in timer {self._name} callback")
