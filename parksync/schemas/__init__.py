from .queue import (
    QueuedAction, ProcessResult, DeadLetterEntry,
    REASON_MAX_RETRIES, REASON_UNREGISTERED,
)
from .session import (
    ExtendSessionPayload, StartSessionPayload, EndSessionPayload, RefreshNearbyPayload,
    ACTION_SYNC_EXTEND, ACTION_START_SESSION, ACTION_END_SESSION, ACTION_REFRESH_NEARBY,
)
from .cache import MapRegion, CachedGarages

__all__ = [
    # Queue
    "QueuedAction", "ProcessResult", "DeadLetterEntry",
    "REASON_MAX_RETRIES", "REASON_UNREGISTERED",

    # Session payloads
    "ExtendSessionPayload", "StartSessionPayload", "EndSessionPayload", "RefreshNearbyPayload",
    "ACTION_SYNC_EXTEND", "ACTION_START_SESSION", "ACTION_END_SESSION", "ACTION_REFRESH_NEARBY",

    # Cache
    "MapRegion", "CachedGarages",
]
