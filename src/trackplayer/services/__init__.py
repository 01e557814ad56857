"""Services layer for engine orchestration."""

from trackplayer.services.engine_lifecycle import EngineLifecycleService
from trackplayer.services.position_sync import PositionSync

__all__ = ["EngineLifecycleService", "PositionSync"]
