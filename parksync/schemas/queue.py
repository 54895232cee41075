from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
import time
import uuid


# Dead letter reasons
REASON_MAX_RETRIES = "max_retries_exceeded"
REASON_UNREGISTERED = "unregistered_type"


def now_ms() -> int:
    return int(time.time() * 1000)


class QueuedAction(BaseModel):
    """A pending mutation waiting to be delivered.

    Persisted with the client's historical camelCase field names; unknown
    fields are ignored and a missing ``retryCount`` reads as 0.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: str = Field(..., min_length=1, description="Selects the handler")
    payload: Any = None
    enqueued_at: int = Field(default=0, alias="timestamp", description="Epoch milliseconds")
    retry_count: int = Field(default=0, alias="retryCount", ge=0)

    class Config:
        populate_by_name = True
        extra = "ignore"

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the persisted wire shape."""
        return self.model_dump(by_alias=True, mode="json")


class ProcessResult(BaseModel):
    """Outcome counts of one processing pass."""

    succeeded: int = 0
    failed: int = 0
    dropped: int = Field(default=0, description="Actions removed for lack of a handler")

    def merge(self, other: "ProcessResult") -> "ProcessResult":
        return ProcessResult(
            succeeded=self.succeeded + other.succeeded,
            failed=self.failed + other.failed,
            dropped=self.dropped + other.dropped,
        )


class DeadLetterEntry(QueuedAction):
    """An action removed from the queue without being delivered."""

    reason: str
    error_message: Optional[str] = None
    failed_at: datetime
    original_queue: str
