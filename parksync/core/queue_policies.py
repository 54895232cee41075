from dataclasses import dataclass
from typing import Dict, Optional

from parksync.core.config import settings
from parksync.core.exceptions import ConfigValidationError


@dataclass
class QueuePolicy:
    max_retries: int
    handler_timeout_seconds: Optional[float]

    def __post_init__(self):
        if self.max_retries < 1:
            raise ConfigValidationError("max_retries must be at least 1")
        if self.handler_timeout_seconds is not None and self.handler_timeout_seconds <= 0:
            raise ConfigValidationError("handler_timeout_seconds must be positive or None")


DEFAULT_POLICY = QueuePolicy(
    max_retries=settings.QUEUE_MAX_RETRIES,
    handler_timeout_seconds=settings.HANDLER_TIMEOUT_SECONDS or None,
)


QUEUE_POLICIES: Dict[str, QueuePolicy] = {
    settings.QUEUE_KEY: DEFAULT_POLICY,
}


def get_policy(queue_key: str) -> QueuePolicy:
    return QUEUE_POLICIES.get(queue_key, DEFAULT_POLICY)
