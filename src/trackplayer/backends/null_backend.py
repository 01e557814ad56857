"""Null backend for testing and headless use (no actual audio output)."""

import time
from typing import Callable, Dict, Optional
from trackplayer.core.exceptions import (
    AlreadyClosedWarning,
    IoFailureError,
    ResourceUnavailableError,
)
from trackplayer.core.interfaces import IAudioBackend, IAudioResource
from trackplayer.core.models import MICROS_PER_SECOND, SoundData
from trackplayer.utils.log import get_logger
from trackplayer.utils.validate import clamp_position

logger = get_logger(__name__)


class NullResource(IAudioResource):
    """Silent output line whose cursor advances with a clock."""

    def __init__(
        self,
        resource_id: str,
        sound: SoundData,
        clock: Callable[[], float],
        backend: "NullBackend",
    ):
        self.resource_id = resource_id
        self.sound = sound
        self._clock = clock
        self._backend = backend
        self._duration = sound.duration_micros
        self._running = False
        self._closed = False
        self._base_position = 0
        self._started_at = 0.0

    def _check_open(self) -> None:
        if self._closed:
            raise ResourceUnavailableError(
                f"NullResource {self.resource_id} used after close"
            )

    def _advance(self) -> None:
        """Fold elapsed clock time into the cursor."""
        if not self._running:
            return
        now = self._clock()
        elapsed = round((now - self._started_at) * MICROS_PER_SECOND)
        self._base_position = clamp_position(self._base_position + elapsed, self._duration)
        self._started_at = now
        if self._base_position >= self._duration:
            # Ran off the end, like a clip that finished
            self._running = False
            logger.debug(f"NullResource {self.resource_id}: reached end")

    def start(self) -> None:
        """Start output."""
        self._check_open()
        if self._running:
            return
        self._started_at = self._clock()
        self._running = self._base_position < self._duration
        logger.debug(f"NullResource {self.resource_id}: started at {self._base_position}us")

    def stop(self) -> None:
        """Stop output."""
        self._check_open()
        self._advance()
        self._running = False
        logger.debug(f"NullResource {self.resource_id}: stopped at {self._base_position}us")

    def close(self) -> None:
        """Close the line."""
        if self._closed:
            raise AlreadyClosedWarning(f"NullResource {self.resource_id} already closed")
        self._running = False
        self._closed = True
        self._backend._release(self)
        if self._backend.fail_close:
            raise IoFailureError(f"NullResource {self.resource_id}: simulated close failure")
        logger.debug(f"NullResource {self.resource_id}: closed")

    def is_running(self) -> bool:
        """Check whether output is running."""
        self._advance()
        return self._running

    def get_position_micros(self) -> int:
        """Get the cursor position."""
        self._check_open()
        self._advance()
        return self._base_position

    def set_position_micros(self, position: int) -> None:
        """Move the cursor, keeping the running flag."""
        self._check_open()
        self._advance()
        self._base_position = clamp_position(position, self._duration)
        self._started_at = self._clock()

    def get_duration_micros(self) -> int:
        """Get the stream length."""
        return self._duration

    @property
    def closed(self) -> bool:
        return self._closed


class NullBackend(IAudioBackend):
    """
    Null backend implementation for testing.

    Counts opened and closed lines so tests can check that no two
    resources are ever live at once.

    Args:
        clock: Time source in seconds (default: time.monotonic).
        max_lines: Refuse to open more than this many live lines (None = unlimited).
        fail_close: Make every close() raise after releasing the line.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_lines: Optional[int] = None,
        fail_close: bool = False,
    ):
        self.clock = clock
        self.max_lines = max_lines
        self.fail_close = fail_close
        self._initialized = False
        self._live: Dict[str, NullResource] = {}
        self._next_resource_id = 0
        self.opened_count = 0
        self.closed_count = 0
        self.peak_live_count = 0

    def initialize(self) -> None:
        """Initialize backend."""
        if self._initialized:
            return
        self._initialized = True
        logger.info("NullBackend initialized")

    def open_line(self, sound: SoundData) -> IAudioResource:
        """Open a silent line."""
        if self.max_lines is not None and len(self._live) >= self.max_lines:
            raise ResourceUnavailableError(
                "no free output line", detail=f"{len(self._live)}/{self.max_lines} in use"
            )
        resource_id = f"null_{self._next_resource_id}"
        self._next_resource_id += 1
        resource = NullResource(resource_id, sound, self.clock, self)
        self._live[resource_id] = resource
        self.opened_count += 1
        self.peak_live_count = max(self.peak_live_count, len(self._live))
        logger.debug(f"Opened NullResource {resource_id}")
        return resource

    def _release(self, resource: NullResource) -> None:
        if self._live.pop(resource.resource_id, None) is not None:
            self.closed_count += 1

    @property
    def live_count(self) -> int:
        """Number of lines currently open."""
        return len(self._live)

    def shutdown(self) -> None:
        """Shutdown backend."""
        for resource in list(self._live.values()):
            logger.warning(f"NullBackend: closing leaked resource {resource.resource_id}")
            resource._closed = True
            self._release(resource)
        self._initialized = False
        logger.info("NullBackend shut down")
