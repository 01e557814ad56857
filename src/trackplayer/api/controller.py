"""PlayerController - facade between a UI and the engine."""

from pathlib import Path
from typing import Callable, Optional, TypeVar
from trackplayer.api.engine import PlaybackEngine
from trackplayer.core.exceptions import (
    AudioError,
    EngineNotStartedError,
    IoFailureError,
    ResourceUnavailableError,
    UnsupportedFormatError,
)
from trackplayer.core.interfaces import IPositionDisplay
from trackplayer.core.models import PlaybackState, PlayerConfig
from trackplayer.services.position_sync import PositionSync, TimerFactory
from trackplayer.concurrency.timer import PeriodicTimer
from trackplayer.utils.log import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_ERROR_STATUS = {
    UnsupportedFormatError: "Unsupported audio format",
    ResourceUnavailableError: "Audio output unavailable",
    IoFailureError: "Could not read file",
    EngineNotStartedError: "Player is not running",
}


def _status_for(error: AudioError) -> str:
    for error_type, prefix in _ERROR_STATUS.items():
        if isinstance(error, error_type):
            return f"{prefix}: {error}"
    return f"Playback error: {error}"


class PlayerController:
    """
    Mediates between a user interface and a PlaybackEngine.

    Translates commands into engine calls, keeps the position display
    polled while playing, and turns every error into a status message.
    No method raises.
    """

    def __init__(
        self,
        engine: PlaybackEngine,
        display: Optional[IPositionDisplay] = None,
        config: Optional[PlayerConfig] = None,
        status_listener: Optional[Callable[[str], None]] = None,
        timer_factory: TimerFactory = PeriodicTimer,
    ):
        """
        Initialize controller.

        Args:
            engine: Started (or later started) playback engine.
            display: Optional position display; enables position polling.
            config: Player configuration (default: the engine's).
            status_listener: Called with every new status message.
            timer_factory: Timer used for polling (for testing).
        """
        self._engine = engine
        self._config = config or engine.config
        self._status_listener = status_listener
        self._status = "No track loaded"
        self._sync: Optional[PositionSync] = None
        if display is not None:
            self._sync = PositionSync(
                engine,
                display,
                poll_interval_ms=self._config.poll_interval_ms,
                display_unit_micros=self._config.display_unit_micros,
                timer_factory=timer_factory,
            )
        logger.info("PlayerController initialized")

    @property
    def status(self) -> str:
        """Last user-visible status message."""
        return self._status

    @property
    def sync(self) -> Optional[PositionSync]:
        return self._sync

    def _set_status(self, message: str) -> None:
        self._status = message
        if self._status_listener is not None:
            try:
                self._status_listener(message)
            except Exception:
                logger.exception("Status listener failed")

    def _run(self, action: str, func: Callable[[], T], default: T = None) -> T:
        try:
            return func()
        except AudioError as e:
            logger.error(f"{action} failed: {e}")
            self._set_status(_status_for(e))
        except Exception as e:
            logger.exception(f"Unexpected error during {action}")
            self._set_status(f"Playback error: {e}")
        return default

    def _stop_polling(self) -> None:
        if self._sync is not None:
            self._sync.stop()

    def _refresh(self) -> None:
        if self._sync is not None:
            self._sync.refresh()

    def load(self, path: str) -> bool:
        """
        Load a file. A failed load keeps the previous track.

        Returns:
            True on success.
        """

        def do_load() -> bool:
            # Polling keeps running until the new track is installed; ticks
            # from the old track are discarded by generation afterwards
            self._engine.load(path)
            self._stop_polling()
            self._refresh()
            self._set_status(f"Loaded {Path(path).name}")
            logger.info(f"Loaded audio file: {path}")
            return True

        return self._run("load", do_load, default=False)

    def close(self) -> None:
        """Release the loaded track."""

        def do_close() -> None:
            self._stop_polling()
            self._engine.close()
            self._refresh()
            self._set_status("No track loaded")

        self._run("close", do_close)

    def play(self) -> None:
        """Start playback and position polling."""

        def do_play() -> None:
            if not self._engine.is_loaded():
                logger.warning("Playback attempted without a loaded track")
                self._set_status("No track loaded")
                return
            self._engine.play()
            if self._sync is not None:
                self._sync.start()
            self._set_status("Playing")

        self._run("play", do_play)

    def pause(self) -> None:
        """Pause playback and stop polling."""

        def do_pause() -> None:
            self._engine.pause()
            self._stop_polling()
            self._refresh()
            if self._engine.state is PlaybackState.PAUSED:
                self._set_status("Paused")

        self._run("pause", do_pause)

    def stop(self) -> None:
        """Stop playback, rewind and stop polling."""

        def do_stop() -> None:
            self._engine.stop()
            self._stop_polling()
            self._refresh()
            if self._engine.is_loaded():
                self._set_status("Stopped")

        self._run("stop", do_stop)

    def fast_forward(self, delta_micros: Optional[int] = None) -> None:
        """Skip forward (default step from config)."""
        if delta_micros is None:
            delta_micros = self._config.seek_step_micros
        self._run("fast forward", lambda: self._engine.fast_forward(delta_micros))

    def rewind(self, delta_micros: Optional[int] = None) -> None:
        """Skip back (default step from config)."""
        if delta_micros is None:
            delta_micros = self._config.seek_step_micros
        self._run("rewind", lambda: self._engine.rewind(delta_micros))

    def set_position(self, position_micros: int) -> None:
        self._run("seek", lambda: self._engine.set_position(position_micros))

    def get_position(self) -> int:
        return self._run("position query", self._engine.get_position, default=0)

    def get_duration(self) -> int:
        return self._run("duration query", self._engine.get_duration, default=0)

    def is_playing(self) -> bool:
        return self._run("playing query", self._engine.is_playing, default=False)

    def is_loaded(self) -> bool:
        return self._run("loaded query", self._engine.is_loaded, default=False)

    # Display callbacks

    def on_user_seek_start(self) -> None:
        if self._sync is not None:
            self._run("seek start", self._sync.on_user_seek_start)

    def on_user_seek_commit(self, value: int) -> None:
        if self._sync is not None:
            self._run("seek", lambda: self._sync.on_user_seek_commit(value))
        else:
            self.set_position(int(value) * self._config.display_unit_micros)

    def on_user_seek_end(self, value: Optional[int] = None) -> None:
        if self._sync is not None:
            self._run("seek end", lambda: self._sync.on_user_seek_end(value))
