"""PortAudio output backend built on sounddevice."""

import threading
from typing import Optional
import numpy as np
from trackplayer.core.exceptions import (
    AlreadyClosedWarning,
    IoFailureError,
    ResourceUnavailableError,
    UnsupportedFormatError,
)
from trackplayer.core.interfaces import IAudioBackend, IAudioResource
from trackplayer.core.models import MICROS_PER_SECOND, SoundData
from trackplayer.utils.log import get_logger
from trackplayer.utils.validate import clamp_position

logger = get_logger(__name__)

_DTYPES = {8: "uint8", 16: "int16", 32: "int32"}


def _import_sounddevice():
    # PortAudio is loaded at import time; keep that off the package import path
    try:
        import sounddevice
    except OSError as e:
        raise ResourceUnavailableError("PortAudio library not found", detail=str(e)) from e
    return sounddevice


class SoundDeviceResource(IAudioResource):
    """
    Output line backed by a sounddevice OutputStream.

    The stream callback copies frames from a cursor; start/stop only
    toggle whether the callback emits audio or silence.
    """

    def __init__(self, sd, sound: SoundData, device: Optional[int] = None):
        fmt = sound.format
        dtype = _DTYPES.get(fmt.bits_per_sample)
        if dtype is None:
            raise UnsupportedFormatError(f"Cannot output {fmt.bits_per_sample}-bit PCM")

        self._sd = sd
        self._sample_rate = fmt.sample_rate
        self._frames = np.frombuffer(sound.data, dtype=dtype).reshape(-1, fmt.channels)
        self._silence = 128 if dtype == "uint8" else 0
        self._duration = sound.duration_micros
        self._lock = threading.RLock()
        self._cursor = 0
        self._running = False
        self._closed = False

        try:
            self._stream = sd.OutputStream(
                samplerate=fmt.sample_rate,
                channels=fmt.channels,
                dtype=dtype,
                device=device,
                callback=self._callback,
                blocksize=0,
            )
        except (sd.PortAudioError, ValueError) as e:
            raise ResourceUnavailableError("cannot open output stream", detail=str(e)) from e

    def _callback(self, outdata, frames, time_info, status) -> None:
        if status:
            logger.debug(f"Output stream status: {status}")
        with self._lock:
            if not self._running:
                outdata.fill(self._silence)
                return
            end = min(self._cursor + frames, len(self._frames))
            chunk = self._frames[self._cursor:end]
            outdata[:len(chunk)] = chunk
            outdata[len(chunk):] = self._silence
            self._cursor = end
            if end >= len(self._frames):
                self._running = False

    def start(self) -> None:
        """Start output from the cursor."""
        with self._lock:
            if self._closed:
                raise ResourceUnavailableError("stream already closed")
            self._running = self._cursor < len(self._frames)
        if not self._stream.active:
            try:
                self._stream.start()
            except self._sd.PortAudioError as e:
                raise ResourceUnavailableError("cannot start output stream", detail=str(e)) from e

    def stop(self) -> None:
        """Stop emitting audio; the stream keeps running silent."""
        with self._lock:
            self._running = False

    def close(self) -> None:
        """Stop and close the stream."""
        with self._lock:
            if self._closed:
                raise AlreadyClosedWarning("stream already closed")
            self._running = False
            self._closed = True
        try:
            self._stream.stop()
            self._stream.close()
        except self._sd.PortAudioError as e:
            raise IoFailureError(f"Error closing output stream: {e}") from e

    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def get_position_micros(self) -> int:
        with self._lock:
            return min(self._cursor * MICROS_PER_SECOND // self._sample_rate, self._duration)

    def set_position_micros(self, position: int) -> None:
        position = clamp_position(position, self._duration)
        with self._lock:
            self._cursor = min(position * self._sample_rate // MICROS_PER_SECOND, len(self._frames))

    def get_duration_micros(self) -> int:
        return self._duration


class SoundDeviceBackend(IAudioBackend):
    """Backend that plays through the default (or a chosen) PortAudio device."""

    def __init__(self, device: Optional[int] = None):
        self._device = device
        self._sd = None

    def initialize(self) -> None:
        """Load PortAudio."""
        if self._sd is not None:
            return
        self._sd = _import_sounddevice()
        logger.info(f"SoundDeviceBackend initialized (PortAudio {self._sd.get_portaudio_version()[1]})")

    def open_line(self, sound: SoundData) -> IAudioResource:
        """Open an output stream for the decoded sound."""
        if self._sd is None:
            self.initialize()
        resource = SoundDeviceResource(self._sd, sound, device=self._device)
        logger.debug(
            f"Opened output stream: {sound.format.channels}ch {sound.format.sample_rate}Hz"
        )
        return resource

    def shutdown(self) -> None:
        """Release PortAudio."""
        self._sd = None
        logger.info("SoundDeviceBackend shut down")
