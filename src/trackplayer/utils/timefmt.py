"""Position label formatting."""

from trackplayer.core.models import MICROS_PER_SECOND


def format_time(total_seconds: int) -> str:
    """
    Format seconds as "M:SS".

    Minutes are never zero-padded, seconds always are: 7 -> "0:07",
    125 -> "2:05", 3600 -> "60:00".
    """
    total_seconds = max(0, int(total_seconds))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"


def position_labels(current_micros: int, total_micros: int) -> tuple[str, str]:
    """
    Elapsed and remaining labels for a position display.

    Returns:
        (elapsed, "-remaining"), e.g. ("0:07", "-1:53").
    """
    current = current_micros // MICROS_PER_SECOND
    total = total_micros // MICROS_PER_SECOND
    return format_time(current), "-" + format_time(total - current)
