"""Owner thread that serializes engine commands."""

import queue
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar
from trackplayer.core.interfaces import IEngineWorker
from trackplayer.utils.log import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class Command:
    """Command to execute in the owner thread."""

    id: str
    func: Callable[[], Any]
    result_event: threading.Event
    result: Optional[Any] = None
    error: Optional[BaseException] = None


class EngineWorker(IEngineWorker):
    """
    Thread that owns the engine's mutable state.

    User commands and timer ticks are both submitted here, so track and
    resource access is strictly serialized. A command that calls back into
    execute() from the owner thread runs inline instead of queueing behind
    itself.
    """

    def __init__(self, name: str = "trackplayer-engine"):
        self._name = name
        self._queue: queue.Queue[Optional[Command]] = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._running = False

    def start(self) -> None:
        """Start the owner thread."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        # Daemon so a forgotten shutdown() never blocks interpreter exit
        self._thread = threading.Thread(target=self._worker_loop, name=self._name, daemon=True)
        self._running = True
        self._thread.start()
        logger.info("Engine worker thread started")

    def stop(self) -> None:
        """Stop the owner thread (blocks until done)."""
        if self._thread is None or not self._thread.is_alive():
            self._running = False
            self._thread = None
            return

        logger.info("Stopping engine worker thread...")
        # Refuse new commands first
        self._running = False
        self._stop_event.set()
        self._queue.put(None)

        if self.in_worker_thread():
            # Called from a command; the loop exits once it returns
            return

        self._thread.join(timeout=5.0)
        if self._thread.is_alive():
            logger.error("Engine worker thread did not stop within timeout")
        else:
            logger.info("Engine worker thread stopped")
        self._thread = None
        self._fail_pending()

    def in_worker_thread(self) -> bool:
        """True when called from the owner thread."""
        return self._thread is not None and threading.current_thread() is self._thread

    @property
    def is_running(self) -> bool:
        return self._running

    def execute(self, func: Callable[[], T], timeout: Optional[float] = None) -> T:
        """
        Execute a function in the owner thread and return its result.

        Args:
            func: Function to execute (no arguments).
            timeout: Maximum time to wait for result (None = infinite).

        Returns:
            Result of function execution.

        Raises:
            RuntimeError: If the owner thread is not running.
            TimeoutError: If timeout is exceeded.
            Exception: Any exception raised by the function.
        """
        if self.in_worker_thread():
            return func()

        if not self._running:
            raise RuntimeError("Engine worker not running")

        cmd = Command(
            id=str(uuid.uuid4()),
            func=func,
            result_event=threading.Event(),
        )

        self._queue.put(cmd)

        if not cmd.result_event.wait(timeout=timeout):
            raise TimeoutError(f"Command execution timeout after {timeout}s")

        if cmd.error is not None:
            raise cmd.error

        return cmd.result

    def _fail_pending(self) -> None:
        """Release callers whose commands were queued behind the stop."""
        while True:
            try:
                cmd = self._queue.get_nowait()
            except queue.Empty:
                return
            if cmd is not None:
                cmd.error = RuntimeError("Engine worker stopped")
                cmd.result_event.set()

    def _worker_loop(self) -> None:
        """Main worker loop."""
        logger.debug("Worker thread started")
        try:
            while True:
                cmd = self._queue.get()
                if cmd is None:  # Sentinel
                    logger.debug("Received sentinel, exiting worker loop")
                    break

                try:
                    cmd.result = cmd.func()
                except Exception as e:
                    logger.debug(f"Command {cmd.id} raised {type(e).__name__}: {e}")
                    cmd.error = e
                finally:
                    cmd.result_event.set()
        except Exception:
            logger.exception("Fatal error in worker thread")
        finally:
            logger.debug("Worker thread exiting")
