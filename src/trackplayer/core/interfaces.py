"""Protocol interfaces for backend, format and display abstraction."""

from typing import Callable, Optional, Protocol, TypeVar
from trackplayer.core.models import SoundData

T = TypeVar("T")


class IAudioResource(Protocol):
    """Interface for an open output line holding one decoded stream."""

    def start(self) -> None:
        """Start or resume output from the current position."""
        ...

    def stop(self) -> None:
        """Stop output, keeping the current position."""
        ...

    def close(self) -> None:
        """
        Release the line.

        Raises:
            AudioError: If the line did not close cleanly.
        """
        ...

    def is_running(self) -> bool:
        """True while output is running."""
        ...

    def get_position_micros(self) -> int:
        """Current position in microseconds."""
        ...

    def set_position_micros(self, position: int) -> None:
        """Move the cursor; does not start or stop output."""
        ...

    def get_duration_micros(self) -> int:
        """Stream length in microseconds."""
        ...


class IAudioBackend(Protocol):
    """Interface for the platform audio output."""

    def initialize(self) -> None:
        """Initialize the backend (called on the owner thread)."""
        ...

    def open_line(self, sound: SoundData) -> IAudioResource:
        """
        Allocate an output line for decoded audio.

        Raises:
            ResourceUnavailableError: If no line can be allocated.
        """
        ...

    def shutdown(self) -> None:
        """Shutdown the backend and free all resources."""
        ...


class IAudioFormat(Protocol):
    """Interface for audio decoders."""

    @property
    def extensions(self) -> tuple[str, ...]:
        """
        File extensions handled by this decoder (e.g., ('.wav', '.wave')).

        Returns:
            Tuple of extensions (lowercase, with dot).
        """
        ...

    def load(self, path: str) -> SoundData:
        """
        Decode an audio file.

        Args:
            path: Path to audio file.

        Returns:
            SoundData with format and PCM data.

        Raises:
            UnsupportedFormatError: If the content cannot be decoded.
            IoFailureError: If the file cannot be read.
        """
        ...


class IPositionDisplay(Protocol):
    """Display collaborator that renders the playback position."""

    def push_position(self, current_micros: int, total_micros: int) -> None:
        """Show the current position and total length."""
        ...


class IEngineWorker(Protocol):
    """Interface for the thread that owns engine state."""

    def start(self) -> None:
        """Start the owner thread."""
        ...

    def stop(self) -> None:
        """Stop the owner thread (blocks until done)."""
        ...

    def execute(self, func: Callable[[], T], timeout: Optional[float] = None) -> T:
        """Run func on the owner thread and return its result."""
        ...


class ITimer(Protocol):
    """Interface for a cancellable periodic timer."""

    def start(self) -> None:
        ...

    def cancel(self) -> None:
        ...

    @property
    def is_running(self) -> bool:
        ...
