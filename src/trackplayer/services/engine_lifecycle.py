"""Service for managing engine lifecycle."""

from typing import Callable, Optional
from trackplayer.core.exceptions import EngineNotStartedError
from trackplayer.core.interfaces import IAudioBackend, IEngineWorker
from trackplayer.core.models import PlayerConfig
from trackplayer.concurrency.worker import EngineWorker
from trackplayer.utils.log import get_logger

logger = get_logger(__name__)


class EngineLifecycleService:
    """
    Service for managing engine lifecycle.

    Responsibilities:
    - Initialize and shutdown the backend on the owner thread
    - Manage the owner thread
    - Ensure proper resource cleanup
    """

    def __init__(
        self,
        backend: IAudioBackend,
        config: PlayerConfig,
        worker: Optional[IEngineWorker] = None,
    ):
        """
        Initialize lifecycle service.

        Args:
            backend: Audio backend implementation.
            config: Player configuration.
            worker: Optional worker implementation (for testing).
        """
        self._backend = backend
        self._config = config
        self._worker: Optional[IEngineWorker] = worker
        self._started = False

    def start(self) -> None:
        """
        Start the owner thread and initialize the backend.

        Raises:
            AudioError: If the backend fails to initialize.
        """
        if self._started:
            logger.warning("Engine already started")
            return

        if self._worker is None:
            self._worker = EngineWorker()

        self._worker.start()
        try:
            self._worker.execute(self._backend.initialize, timeout=self._config.command_timeout)
        except Exception:
            self._worker.stop()
            raise
        self._started = True
        logger.info("Playback engine started")

    def shutdown(self, before_backend: Optional[Callable[[], None]] = None) -> None:
        """
        Shutdown the backend and the owner thread.

        This method is idempotent and safe to call multiple times.

        Args:
            before_backend: Run on the owner thread before the backend shuts
                down (used to release the loaded track).
        """
        if not self._started:
            logger.debug("Engine not started, skipping shutdown")
            return

        logger.info("Shutting down playback engine...")
        # Stop accepting guarded commands right away
        self._started = False

        if self._worker is not None:
            if before_backend is not None:
                try:
                    self._worker.execute(before_backend, timeout=self._config.command_timeout)
                except Exception as e:
                    logger.warning(f"Error releasing track during shutdown: {e}")

            try:
                self._worker.execute(self._backend.shutdown, timeout=self._config.command_timeout)
            except Exception as e:
                logger.warning(f"Error during backend shutdown: {e}")

            try:
                self._worker.stop()
            except Exception as e:
                logger.warning(f"Error stopping worker thread: {e}")

            self._worker = None

        logger.info("Playback engine shut down")

    @property
    def is_started(self) -> bool:
        """
        Check if engine is started.

        Returns:
            True if started, False otherwise.
        """
        return self._started

    @property
    def worker(self) -> IEngineWorker:
        """
        Get worker instance.

        Raises:
            EngineNotStartedError: If engine is not started.
        """
        if not self._started or self._worker is None:
            raise EngineNotStartedError("Engine must be started before accessing worker")
        return self._worker
