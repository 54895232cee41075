from .dead_letter_service import DeadLetterLog
from .queue_service import ActionQueue, Handler
from .cache_service import OfflineCache
from .handlers import build_handlers

__all__ = [
    "ActionQueue",
    "Handler",
    "DeadLetterLog",
    "OfflineCache",
    "build_handlers",
]
