"""
trackplayer - single-track audio playback engine.

This package loads one audio file at a time, exposes transport controls
(play, pause, stop, seek, fast-forward, rewind) and keeps a position
display in sync without feedback loops between polling and user seeks.
"""

from trackplayer.api.controller import PlayerController
from trackplayer.api.engine import PlaybackEngine
from trackplayer.api.track import Track
from trackplayer.backends.null_backend import NullBackend
from trackplayer.core.models import PlaybackState, PlayerConfig, SyncState
from trackplayer.services.position_sync import PositionSync
from trackplayer.core.exceptions import (
    AudioError,
    UnsupportedFormat,
    ResourceUnavailable,
    IoFailure,
    AlreadyClosedWarning,
    EngineNotStarted,
)

__version__ = "0.1.0"

__all__ = [
    "PlaybackEngine",
    "PlayerController",
    "PositionSync",
    "Track",
    "NullBackend",
    "PlayerConfig",
    "PlaybackState",
    "SyncState",
    "AudioError",
    "UnsupportedFormat",
    "ResourceUnavailable",
    "IoFailure",
    "AlreadyClosedWarning",
    "EngineNotStarted",
]
