"""Track - owns one audio resource and its playback cursor."""

import functools
from dataclasses import dataclass
from typing import Optional
from trackplayer.core.exceptions import AudioError
from trackplayer.core.interfaces import IAudioBackend, IAudioResource
from trackplayer.core.models import PlaybackState, SoundData
from trackplayer.formats import get_format_for_file
from trackplayer.utils.log import get_logger
from trackplayer.utils.validate import clamp_delta, clamp_position

logger = get_logger(__name__)


@dataclass(frozen=True)
class TrackSnapshot:
    """What is needed to reattach a track after it was released."""

    sound: SoundData
    path: str
    position_micros: int


def _if_loaded(default=None):
    """Make a Track method a silent no-op returning `default` while unloaded."""

    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs):
            if self._resource is None:
                return default
            return method(self, *args, **kwargs)

        return wrapper

    return decorator


class Track:
    """
    A single loaded audio stream.

    The track exclusively owns its IAudioResource. Opening a new file
    releases the current resource before the new line is allocated, so a
    track never holds two resources. Every transport call on an unloaded
    track does nothing.

    Not thread-safe: PlaybackEngine calls it from its owner thread only.
    """

    def __init__(self, backend: IAudioBackend):
        """
        Initialize an unloaded track.

        Args:
            backend: Backend that allocates output lines.
        """
        self._backend = backend
        self._resource: Optional[IAudioResource] = None
        self._sound: Optional[SoundData] = None
        self._path: Optional[str] = None
        self._duration = 0
        self._paused = False

    def open(self, path: str) -> None:
        """
        Decode a file and attach it, replacing any loaded stream.

        Args:
            path: Path to audio file.

        Raises:
            UnsupportedFormatError: If the extension or content is not supported.
            IoFailureError: If the file cannot be read.
            ResourceUnavailableError: If no output line can be allocated.
        """
        logger.info(f"Opening audio file: {path}")
        sound = get_format_for_file(path).load(path)
        self.attach(sound, path)

    def attach(self, sound: SoundData, path: str) -> None:
        """
        Allocate an output line for already decoded audio.

        The current resource, if any, is fully released first.

        Raises:
            ResourceUnavailableError: If no output line can be allocated.
        """
        if self._resource is not None:
            self.close()

        resource = self._backend.open_line(sound)
        self._resource = resource
        self._sound = sound
        self._path = path
        self._duration = resource.get_duration_micros()
        self._paused = False
        logger.info(f"Track ready: {path} ({self._duration}us)")

    def close(self) -> None:
        """
        Stop playback and release the resource. Idempotent.

        Close failures are logged; the slot is cleared regardless.
        """
        resource = self._resource
        if resource is None:
            return

        self._resource = None
        self._sound = None
        self._duration = 0
        self._paused = False

        try:
            resource.stop()
        except AudioError as e:
            logger.warning(f"Error stopping resource before close: {e}")
        try:
            resource.close()
        except AudioError as e:
            logger.warning(f"Resource did not close cleanly ({type(e).__name__}): {e}")
        logger.info(f"Track closed: {self._path}")
        self._path = None

    def is_loaded(self) -> bool:
        """Check whether a resource is attached."""
        return self._resource is not None

    @property
    def path(self) -> Optional[str]:
        """Path of the loaded file, None when unloaded."""
        return self._path

    @property
    def state(self) -> PlaybackState:
        """Current transport state."""
        if self._resource is None:
            return PlaybackState.UNLOADED
        if self._resource.is_running():
            return PlaybackState.PLAYING
        if self._paused:
            return PlaybackState.PAUSED
        return PlaybackState.STOPPED

    @_if_loaded()
    def play(self) -> None:
        """Start or resume output from the current position."""
        self._resource.start()
        self._paused = False
        logger.info("Playback started")

    @_if_loaded()
    def pause(self) -> None:
        """Stop output and keep the position. No-op unless playing."""
        if not self._resource.is_running():
            return
        self._resource.stop()
        self._paused = True
        logger.info("Playback paused")

    @_if_loaded()
    def stop(self) -> None:
        """Stop output and rewind to the beginning."""
        self._resource.stop()
        self._resource.set_position_micros(0)
        self._paused = False
        logger.info("Playback stopped and reset")

    @_if_loaded()
    def fast_forward(self, delta_micros: int) -> None:
        """Move the cursor forward, clamped to the end. Playback continues."""
        delta_micros = clamp_delta(delta_micros)
        self._seek(self._resource.get_position_micros() + delta_micros)
        logger.info(f"Fast forward by {delta_micros} microseconds")

    @_if_loaded()
    def rewind(self, delta_micros: int) -> None:
        """Move the cursor back, clamped to the beginning. Playback continues."""
        delta_micros = clamp_delta(delta_micros)
        self._seek(self._resource.get_position_micros() - delta_micros)
        logger.info(f"Rewind by {delta_micros} microseconds")

    @_if_loaded()
    def set_position(self, position_micros: int) -> None:
        """Move the cursor, clamped to [0, duration]."""
        self._seek(position_micros)
        logger.info(f"Playback position set to {position_micros} microseconds")

    def _seek(self, position_micros: int) -> None:
        self._resource.set_position_micros(clamp_position(int(position_micros), self._duration))

    @_if_loaded(default=0)
    def get_duration(self) -> int:
        """Duration in microseconds, 0 when unloaded."""
        return self._duration

    @_if_loaded(default=0)
    def get_position(self) -> int:
        """Position in microseconds, 0 when unloaded."""
        return clamp_position(self._resource.get_position_micros(), self._duration)

    @_if_loaded(default=False)
    def is_playing(self) -> bool:
        """True while output is running."""
        return self._resource.is_running()

    @_if_loaded()
    def snapshot(self) -> Optional[TrackSnapshot]:
        """Capture the decoded sound and cursor, None when unloaded."""
        return TrackSnapshot(
            sound=self._sound,
            path=self._path,
            position_micros=self.get_position(),
        )
