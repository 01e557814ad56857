"""RIFF WAV file decoder."""

import struct
from pathlib import Path
from typing import BinaryIO
from trackplayer.core.exceptions import IoFailureError, UnsupportedFormatError
from trackplayer.core.interfaces import IAudioFormat
from trackplayer.core.models import AudioFormat, SoundData
from trackplayer.utils.log import get_logger

logger = get_logger(__name__)

SUPPORTED_BITS_PER_SAMPLE = (8, 16, 32)
WAVE_FORMAT_PCM = 1


class WavFormat(IAudioFormat):
    """WAV decoder implementing IAudioFormat."""

    @property
    def extensions(self) -> tuple[str, ...]:
        """Supported file extensions."""
        return (".wav", ".wave")

    def load(self, path: str) -> SoundData:
        """
        Decode a WAV file.

        Supports uncompressed PCM (fmt=1) with 8, 16 or 32-bit samples,
        any channel count and any sample rate.

        Args:
            path: Path to WAV file.

        Returns:
            SoundData with format and PCM data.

        Raises:
            UnsupportedFormatError: If the content is not PCM WAV.
            IoFailureError: If the file is missing or cannot be read.
        """
        path_obj = Path(path)
        try:
            with open(path_obj, "rb") as f:
                return _parse_wav(f)
        except FileNotFoundError as e:
            raise IoFailureError(f"WAV file not found: {path}") from e
        except OSError as e:
            raise IoFailureError(f"Cannot read WAV file {path}: {e}") from e


def _read_u32(f: BinaryIO) -> int:
    raw = f.read(4)
    if len(raw) < 4:
        raise UnsupportedFormatError("Truncated chunk header")
    return struct.unpack("<I", raw)[0]


def _parse_wav(f: BinaryIO) -> SoundData:
    """Parse WAV content from a binary file handle."""
    if f.read(4) != b"RIFF":
        raise UnsupportedFormatError("Not a RIFF file")

    _read_u32(f)  # RIFF size, unreliable in the wild

    if f.read(4) != b"WAVE":
        raise UnsupportedFormatError("Not a WAVE file")

    fmt_data = None
    data_chunk = None

    while True:
        chunk_id = f.read(4)
        if len(chunk_id) < 4:
            break

        chunk_size = _read_u32(f)

        # Chunks are word aligned
        padding = chunk_size & 1

        if chunk_id == b"fmt ":
            fmt_data = f.read(chunk_size)
            f.seek(padding, 1)
        elif chunk_id == b"data":
            data_chunk = f.read(chunk_size)
            if len(data_chunk) < chunk_size:
                logger.warning(
                    f"Truncated data chunk: expected {chunk_size} bytes, got {len(data_chunk)}"
                )
            break
        else:
            f.seek(chunk_size + padding, 1)

    if fmt_data is None:
        raise UnsupportedFormatError("Missing fmt chunk")

    if data_chunk is None:
        raise UnsupportedFormatError("Missing data chunk")

    # audio_format(2), num_channels(2), sample_rate(4),
    # byte_rate(4), block_align(2), bits_per_sample(2)
    if len(fmt_data) < 16:
        raise UnsupportedFormatError("Invalid fmt chunk size")

    (
        audio_format,
        num_channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
    ) = struct.unpack("<HHIIHH", fmt_data[:16])

    if audio_format != WAVE_FORMAT_PCM:
        raise UnsupportedFormatError(
            f"Unsupported audio format: {audio_format} (only PCM=1 is supported)"
        )

    if bits_per_sample not in SUPPORTED_BITS_PER_SAMPLE:
        raise UnsupportedFormatError(
            f"Unsupported bits per sample: {bits_per_sample} "
            f"(supported: {', '.join(str(b) for b in SUPPORTED_BITS_PER_SAMPLE)})"
        )

    if num_channels < 1:
        raise UnsupportedFormatError(f"Invalid channel count: {num_channels}")

    if sample_rate <= 0:
        raise UnsupportedFormatError(f"Invalid sample rate: {sample_rate} Hz")

    expected_align = num_channels * bits_per_sample // 8
    if block_align != expected_align:
        logger.warning(
            f"fmt block_align {block_align} does not match {expected_align}, using computed value"
        )
        block_align = expected_align

    format = AudioFormat(
        sample_rate=sample_rate,
        channels=num_channels,
        bits_per_sample=bits_per_sample,
        block_align=block_align,
        avg_bytes_per_sec=byte_rate,
    )

    # Drop a trailing partial frame
    usable = len(data_chunk) - len(data_chunk) % block_align
    sound = SoundData(format=format, data=data_chunk[:usable])

    logger.info(
        f"Decoded WAV: {num_channels}ch, {sample_rate}Hz, {bits_per_sample}bit, "
        f"{sound.duration_micros / 1_000_000:.2f}s"
    )
    return sound


# Decoder instance used by the format table
wav_format = WavFormat()
