"""PlaybackEngine - main public API."""

import functools
import threading
from typing import Optional
from trackplayer.api.track import Track, TrackSnapshot
from trackplayer.core.exceptions import AudioError, EngineNotStartedError, ResourceUnavailableError
from trackplayer.core.interfaces import IAudioBackend, IEngineWorker
from trackplayer.core.models import PlaybackState, PlayerConfig, PositionSample
from trackplayer.formats import get_format_for_file
from trackplayer.services.engine_lifecycle import EngineLifecycleService
from trackplayer.utils.log import get_logger

logger = get_logger(__name__)


def _requires_track(default=None, quiet=False):
    """
    Run an engine method on the owner thread, but only when a track is loaded.

    Otherwise the call is logged (warning for commands, debug for queries)
    and returns `default`. This is the single place that implements the
    "transport is always safe to call" contract.
    """

    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs):
            return self._dispatch(
                method.__name__,
                functools.partial(method, self, *args, **kwargs),
                default,
                quiet,
            )

        return wrapper

    return decorator


class PlaybackEngine:
    """
    Single-track playback engine.

    Owns exactly one Track slot. Every command and query runs on a
    dedicated owner thread, so loads, transport commands and position
    polls never interleave on the underlying resource.
    """

    def __init__(
        self,
        config: PlayerConfig = PlayerConfig(),
        backend: Optional[IAudioBackend] = None,
        worker: Optional[IEngineWorker] = None,
    ):
        """
        Initialize PlaybackEngine.

        Args:
            config: Player configuration.
            backend: Optional backend implementation (default: SoundDeviceBackend).
            worker: Optional owner-thread implementation (for testing).
        """
        self._config = config
        if backend is None:
            # Lazy import to avoid loading numpy/PortAudio on import
            from trackplayer.backends.sounddevice_backend import SoundDeviceBackend
            backend = SoundDeviceBackend()

        self._lifecycle = EngineLifecycleService(backend, config, worker)
        self._track = Track(backend)
        self._load_lock = threading.Lock()
        self._generation = 0

    @property
    def config(self) -> PlayerConfig:
        return self._config

    def start(self) -> None:
        """Start the engine."""
        self._lifecycle.start()

    def shutdown(self) -> None:
        """Release the track, shutdown the backend and stop the owner thread."""
        self._lifecycle.shutdown(before_backend=self._close_track)

    @property
    def is_started(self) -> bool:
        return self._lifecycle.is_started

    def _execute(self, func):
        return self._lifecycle.worker.execute(func, timeout=self._config.command_timeout)

    def _dispatch(self, name: str, func, default, quiet: bool):
        log = logger.debug if quiet else logger.warning
        if not self._lifecycle.is_started:
            log(f"{name} ignored: engine not started")
            return default

        def command():
            if not self._track.is_loaded():
                log(f"{name} ignored: no track loaded")
                return default
            return func()

        return self._execute(command)

    def load(self, path: str) -> None:
        """
        Load an audio file, replacing the current track.

        Decoding happens on the calling thread; concurrent loads wait for
        each other. Teardown of the old track and attachment of the new one
        run as one owner-thread command, so transport commands never see a
        half-replaced track. If decoding fails the current track is left
        untouched; if the new output line cannot be opened the previous
        track is reattached (stopped, at its old position).

        Args:
            path: Path to audio file.

        Raises:
            EngineNotStartedError: If engine is not started.
            UnsupportedFormatError: If the extension or content is not supported.
            IoFailureError: If the file cannot be read.
            ResourceUnavailableError: If no output line can be allocated.
        """
        if not self._lifecycle.is_started:
            raise EngineNotStartedError("Engine must be started before loading tracks")

        with self._load_lock:
            sound = get_format_for_file(path).load(path)
            self._execute(lambda: self._install(sound, path))

    def _install(self, sound, path: str) -> None:
        previous = self._track.snapshot()
        try:
            self._track.attach(sound, path)
        except ResourceUnavailableError:
            if previous is not None:
                self._restore(previous)
            raise
        finally:
            self._generation += 1

    def _restore(self, previous: TrackSnapshot) -> None:
        try:
            self._track.attach(previous.sound, previous.path)
            self._track.set_position(previous.position_micros)
            logger.warning(f"Load failed, previous track restored: {previous.path}")
        except AudioError as e:
            logger.error(f"Could not restore previous track {previous.path}: {e}")

    def _close_track(self) -> None:
        self._track.close()
        self._generation += 1

    @_requires_track()
    def close(self) -> None:
        """Stop playback and release the track."""
        self._close_track()

    @_requires_track()
    def play(self) -> None:
        """Start or resume playback from the current position."""
        self._track.play()

    @_requires_track()
    def pause(self) -> None:
        """Pause playback, keeping the position."""
        self._track.pause()

    @_requires_track()
    def stop(self) -> None:
        """Stop playback and rewind to the beginning."""
        self._track.stop()

    @_requires_track()
    def fast_forward(self, delta_micros: int) -> None:
        """Skip forward, clamped to the end of the track."""
        self._track.fast_forward(delta_micros)

    @_requires_track()
    def rewind(self, delta_micros: int) -> None:
        """Skip back, clamped to the beginning of the track."""
        self._track.rewind(delta_micros)

    @_requires_track()
    def set_position(self, position_micros: int) -> None:
        """Seek to a position, clamped to [0, duration]."""
        self._track.set_position(position_micros)

    @_requires_track(default=0, quiet=True)
    def get_duration(self) -> int:
        return self._track.get_duration()

    @_requires_track(default=0, quiet=True)
    def get_position(self) -> int:
        return self._track.get_position()

    @_requires_track(default=False, quiet=True)
    def is_playing(self) -> bool:
        return self._track.is_playing()

    @_requires_track(quiet=True)
    def poll(self) -> Optional[PositionSample]:
        """
        Read position, duration and running flag in one owner-thread step.

        Returns:
            PositionSample, or None when no track is loaded.
        """
        return PositionSample(
            position_micros=self._track.get_position(),
            duration_micros=self._track.get_duration(),
            playing=self._track.is_playing(),
            generation=self._generation,
        )

    @_requires_track(quiet=True)
    def current_path(self) -> Optional[str]:
        """Path of the loaded file, None when unloaded."""
        return self._track.path

    def is_loaded(self) -> bool:
        """Check whether a track is loaded."""
        if not self._lifecycle.is_started:
            return False
        return self._execute(self._track.is_loaded)

    @property
    def state(self) -> PlaybackState:
        """Transport state of the loaded track."""
        if not self._lifecycle.is_started:
            return PlaybackState.UNLOADED
        return self._execute(lambda: self._track.state)

    @property
    def generation(self) -> int:
        """Incremented on every load and close."""
        return self._generation

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.shutdown()
