"""Validation utilities."""


def clamp_position(position: int, duration: int) -> int:
    """Clamp a position to [0, duration]."""
    if position < 0:
        return 0
    if position > duration:
        return duration
    return position


def clamp_delta(delta: int) -> int:
    """Clamp a seek step to be non-negative."""
    if delta < 0:
        return 0
    return int(delta)
