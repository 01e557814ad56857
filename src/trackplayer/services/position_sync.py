"""Service keeping a position display in sync with the engine."""

import threading
from typing import Callable, Optional
from trackplayer.concurrency.timer import PeriodicTimer
from trackplayer.core.interfaces import IPositionDisplay, ITimer
from trackplayer.core.models import SyncState
from trackplayer.utils.log import get_logger

logger = get_logger(__name__)

TimerFactory = Callable[[float, Callable[[], None]], ITimer]


class PositionSync:
    """
    Polling protocol between a PlaybackEngine and a position display.

    Position travels engine -> display on a timer; seeks travel display ->
    engine through the on_user_seek_* callbacks. One state value, guarded
    by one lock, keeps the two directions apart:

    - PUSHING: a value is being pushed to the display. A seek commit
      arriving now is the display echoing that push and is ignored.
    - DRAGGING: the user holds the slider. Ticks are dropped and commits
      are only remembered; the drag end issues one seek with the final value.
    - SEEKING: a user seek is being applied. Ticks are dropped.

    Responsibilities:
    - Start and cancel the poll timer
    - Push samples to the display
    - Translate display seek values into engine seeks
    """

    def __init__(
        self,
        engine,
        display: IPositionDisplay,
        poll_interval_ms: int = 1000,
        display_unit_micros: int = 1,
        timer_factory: TimerFactory = PeriodicTimer,
    ):
        """
        Initialize position sync.

        Args:
            engine: PlaybackEngine to poll and seek.
            display: Display collaborator receiving push_position().
            poll_interval_ms: Timer cadence. Default: 1000.
            display_unit_micros: Microseconds per display seek unit. Default: 1.
            timer_factory: Builds the periodic timer (for testing).
        """
        if poll_interval_ms <= 0:
            raise ValueError(f"poll_interval_ms must be positive, got {poll_interval_ms}")
        self._engine = engine
        self._display = display
        self._interval = poll_interval_ms / 1000.0
        self._unit = display_unit_micros
        self._timer_factory = timer_factory
        self._lock = threading.RLock()
        self._state = SyncState.IDLE
        self._timer: Optional[ITimer] = None
        self._generation = 0
        self._engine_generation: Optional[int] = None
        self._pending_seek: Optional[int] = None
        self.dropped_ticks = 0

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def suppress_echo(self) -> bool:
        """True while a position is being pushed to the display."""
        return self._state is SyncState.PUSHING

    @property
    def user_is_dragging(self) -> bool:
        return self._state is SyncState.DRAGGING

    @property
    def is_running(self) -> bool:
        """True while the poll timer is active."""
        return self._timer is not None and self._timer.is_running

    def start(self) -> None:
        """Start polling. No-op if already polling."""
        with self._lock:
            if self.is_running:
                return
            self._generation += 1
            generation = self._generation
            self._engine_generation = self._engine.generation
            self._timer = self._timer_factory(self._interval, lambda: self._tick(generation))
            self._timer.start()
            logger.info(f"Position polling started every {self._interval:.3f}s")

    def stop(self) -> None:
        """Stop polling. Immediate and idempotent; in-flight ticks are discarded."""
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
                logger.info("Position polling stopped")

    def tick(self) -> bool:
        """
        Run one poll step now.

        Returns:
            True if a position was pushed to the display.
        """
        return self._tick(self._generation)

    def refresh(self) -> bool:
        """Push the current position once, e.g. after a load, pause or stop."""
        with self._lock:
            self._engine_generation = self._engine.generation
            return self._tick(self._generation)

    def _tick(self, generation: int) -> bool:
        with self._lock:
            if generation != self._generation:
                logger.debug("Stale tick discarded")
                return False
            if self._state is not SyncState.IDLE:
                self.dropped_ticks += 1
                logger.debug(f"Tick dropped while {self._state.value}")
                return False

            sample = self._engine.poll()
            if sample is None:
                return False
            if (
                self._engine_generation is not None
                and sample.generation != self._engine_generation
            ):
                logger.debug("Tick from a previous track discarded")
                return False

            self._state = SyncState.PUSHING
            try:
                self._display.push_position(sample.position_micros, sample.duration_micros)
            except Exception:
                logger.exception("Display failed to accept position update")
            finally:
                self._state = SyncState.IDLE
            return True

    def on_user_seek_start(self) -> None:
        """The display reports that the user started dragging."""
        with self._lock:
            if self._state is SyncState.PUSHING:
                logger.debug("Drag start during push ignored")
                return
            self._state = SyncState.DRAGGING
            self._pending_seek = None
            logger.debug("User drag started")

    def on_user_seek_commit(self, value: int) -> bool:
        """
        The display reports a new seek value.

        Returns:
            True if the engine was asked to seek.
        """
        with self._lock:
            if self._state is SyncState.PUSHING:
                logger.debug(f"Echo of pushed position ignored: {value}")
                return False
            target = int(value) * self._unit
            if self._state is SyncState.DRAGGING:
                self._pending_seek = target
                return False
            if self._state is SyncState.SEEKING:
                logger.debug(f"Seek commit during seek ignored: {value}")
                return False
            return self._apply_seek(target)

    def on_user_seek_end(self, value: Optional[int] = None) -> bool:
        """
        The display reports that the user released the slider.

        Args:
            value: Final seek value; defaults to the last committed value.

        Returns:
            True if the engine was asked to seek.
        """
        with self._lock:
            if self._state is not SyncState.DRAGGING:
                logger.debug(f"Drag end while {self._state.value} ignored")
                return False
            target = int(value) * self._unit if value is not None else self._pending_seek
            self._pending_seek = None
            self._state = SyncState.IDLE
            logger.debug("User drag ended")
            if target is None:
                return False
            return self._apply_seek(target)

    def _apply_seek(self, target: int) -> bool:
        self._state = SyncState.SEEKING
        try:
            logger.info(f"User seek to {target} microseconds")
            self._engine.set_position(target)
        finally:
            self._state = SyncState.IDLE
        return True
