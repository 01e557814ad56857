"""Data models and configuration classes."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

MICROS_PER_SECOND = 1_000_000


class PlaybackState(Enum):
    """Playback state of the loaded track as seen from outside."""

    UNLOADED = "unloaded"
    STOPPED = "stopped"
    PAUSED = "paused"
    PLAYING = "playing"


class SyncState(Enum):
    """State of the position synchronization protocol."""

    IDLE = "idle"
    PUSHING = "pushing"
    DRAGGING = "dragging"
    SEEKING = "seeking"


@dataclass
class PlayerConfig:
    """Configuration for PlaybackEngine and PlayerController."""

    poll_interval_ms: int = 1000
    """Display refresh cadence while playing. Default: 1000."""

    seek_step_micros: int = 5 * MICROS_PER_SECOND
    """Default fast-forward/rewind step. Default: 5 seconds."""

    display_unit_micros: int = 1
    """Microseconds per unit of a display seek value. Default: 1."""

    command_timeout: Optional[float] = 5.0
    """Seconds to wait for an engine command (None = forever)."""


@dataclass
class AudioFormat:
    """PCM format specification."""

    sample_rate: int
    """Sample rate in Hz."""

    channels: int
    """Number of channels (1=mono, 2=stereo)."""

    bits_per_sample: int
    """Bits per sample (8, 16 or 32)."""

    block_align: int
    """Block alignment in bytes."""

    avg_bytes_per_sec: int
    """Average bytes per second."""

    @property
    def frame_size(self) -> int:
        """Frame size in bytes."""
        return self.block_align


@dataclass
class SoundData:
    """Decoded audio data."""

    format: AudioFormat
    """PCM format."""

    data: bytes
    """Raw interleaved PCM frames."""

    @property
    def num_frames(self) -> int:
        """Number of audio frames."""
        return len(self.data) // self.format.frame_size

    @property
    def duration_micros(self) -> int:
        """Duration in microseconds."""
        return self.num_frames * MICROS_PER_SECOND // self.format.sample_rate


@dataclass(frozen=True)
class PositionSample:
    """Position and duration read atomically from the engine."""

    position_micros: int
    duration_micros: int
    playing: bool
    generation: int
