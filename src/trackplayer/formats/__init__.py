"""Audio decoders, selected by file extension."""

from pathlib import Path
from typing import Dict
from trackplayer.core.exceptions import UnsupportedFormatError
from trackplayer.core.interfaces import IAudioFormat
from trackplayer.core.models import SoundData
from trackplayer.formats.wav import wav_format
from trackplayer.utils.log import get_logger

logger = get_logger(__name__)

# Every supported container. Adding a format means adding its decoder here.
_FORMATS: tuple[IAudioFormat, ...] = (wav_format,)

_format_by_extension: Dict[str, IAudioFormat] = {
    ext.lower(): fmt for fmt in _FORMATS for ext in fmt.extensions
}


def get_file_extension(path: str) -> str:
    """
    Lowercase extension of a path, with the dot.

    Dot-files such as ".wav" have no extension and return "".
    """
    return Path(path).suffix.lower()


def supported_extensions() -> tuple[str, ...]:
    """All extensions with a registered decoder, sorted."""
    return tuple(sorted(_format_by_extension))


def get_format_for_file(path: str) -> IAudioFormat:
    """
    Select the decoder for a file by its extension.

    Args:
        path: Path to audio file.

    Returns:
        IAudioFormat handling the extension.

    Raises:
        UnsupportedFormatError: If no decoder handles the extension.
    """
    ext = get_file_extension(path)
    format = _format_by_extension.get(ext)
    if format is None:
        raise UnsupportedFormatError(
            f"Unsupported format: {ext or '<none>'} ({path}). "
            f"Supported extensions: {', '.join(supported_extensions())}"
        )
    logger.debug(f"Selected {type(format).__name__} for {path}")
    return format


def load_audio(path: str) -> SoundData:
    """
    Decode an audio file with the decoder selected by its extension.

    Raises:
        UnsupportedFormatError: If the extension or content is not supported.
        IoFailureError: If the file cannot be read.
    """
    return get_format_for_file(path).load(path)


__all__ = [
    "load_audio",
    "get_format_for_file",
    "get_file_extension",
    "supported_extensions",
    "IAudioFormat",
]
