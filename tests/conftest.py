"""Shared fixtures: fake clock, WAV writer, null-backed engine, manual timer."""

import io
import struct
import pytest
from trackplayer.api.engine import PlaybackEngine
from trackplayer.backends.null_backend import NullBackend
from trackplayer.core.models import PlayerConfig

TEN_SECONDS = 10_000_000


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_wav_bytes(
    duration_micros: int = TEN_SECONDS,
    sample_rate: int = 8000,
    channels: int = 1,
    bits_per_sample: int = 16,
    audio_format: int = 1,
) -> bytes:
    """Create a silent PCM WAV file in memory."""
    block_align = (channels * bits_per_sample) // 8
    byte_rate = sample_rate * block_align
    num_frames = duration_micros * sample_rate // 1_000_000
    data_size = num_frames * block_align

    wav = io.BytesIO()
    wav.write(b"RIFF")
    wav.write(struct.pack("<I", 36 + data_size))
    wav.write(b"WAVE")

    wav.write(b"fmt ")
    wav.write(struct.pack("<I", 16))
    wav.write(struct.pack("<HHIIHH", audio_format, channels, sample_rate, byte_rate, block_align, bits_per_sample))

    wav.write(b"data")
    wav.write(struct.pack("<I", data_size))
    wav.write(b"\x00" * data_size)
    return wav.getvalue()


class RecordingDisplay:
    """Position display that records every push."""

    def __init__(self):
        self.pushes = []
        self.on_push = None

    def push_position(self, current_micros: int, total_micros: int) -> None:
        self.pushes.append((current_micros, total_micros))
        if self.on_push is not None:
            self.on_push(current_micros, total_micros)


class ManualTimer:
    """Timer that only fires when a test calls fire()."""

    def __init__(self, interval: float, callback):
        self.interval = interval
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def is_running(self) -> bool:
        return self.started and not self.cancelled

    def fire(self) -> None:
        """Deliver one tick, even if cancelled (simulates an in-flight tick)."""
        self.callback()


class ManualTimerFactory:
    """Timer factory recording every timer it builds."""

    def __init__(self):
        self.timers = []

    def __call__(self, interval: float, callback) -> ManualTimer:
        timer = ManualTimer(interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> ManualTimer:
        return self.timers[-1]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend(clock):
    return NullBackend(clock=clock)


@pytest.fixture
def config():
    return PlayerConfig(command_timeout=5.0)


@pytest.fixture
def engine(backend, config):
    engine = PlaybackEngine(config=config, backend=backend)
    engine.start()
    yield engine
    engine.shutdown()


@pytest.fixture
def make_wav(tmp_path):
    """Write a WAV file under tmp_path and return its path."""

    def _make(name: str = "track.wav", **kwargs) -> str:
        path = tmp_path / name
        path.write_bytes(make_wav_bytes(**kwargs))
        return str(path)

    return _make


@pytest.fixture
def display():
    return RecordingDisplay()


@pytest.fixture
def timers():
    return ManualTimerFactory()
