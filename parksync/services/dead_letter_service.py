from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from pydantic import ValidationError

from parksync.core.config import settings
from parksync.core.exceptions import QueueCorruptedError
from parksync.core.store import DurableStore
from parksync.schemas.queue import DeadLetterEntry, QueuedAction
from .base_service import BaseService

if TYPE_CHECKING:
    from .queue_service import ActionQueue


class DeadLetterLog(BaseService):
    """Bounded record of actions the queue gave up on."""

    def __init__(self, store: DurableStore, key: str = None, max_entries: int = None):
        super().__init__(store, key or settings.DEAD_LETTER_KEY)
        self.max_entries = max_entries or settings.DEAD_LETTER_MAX_ENTRIES

    async def _load(self) -> List[DeadLetterEntry]:
        records = await self.read_records()
        try:
            return [DeadLetterEntry.model_validate(record) for record in records]
        except ValidationError as e:
            raise QueueCorruptedError(f"Dead letter log {self.key} is invalid: {e}") from e

    async def _persist(self, entries: List[DeadLetterEntry]):
        await self.write_records([entry.to_record() for entry in entries])

    async def record(
        self,
        action: QueuedAction,
        reason: str,
        error_message: Optional[str] = None,
        original_queue: str = None,
    ) -> Optional[DeadLetterEntry]:
        """
        Append an entry, keeping only the newest ``max_entries``.

        Best-effort: a storage failure is logged and None is returned so the
        processing pass that evicted the action carries on.
        """
        entry = DeadLetterEntry(
            **action.model_dump(),
            reason=reason,
            error_message=error_message,
            failed_at=datetime.now(timezone.utc),
            original_queue=original_queue or settings.QUEUE_KEY,
        )

        try:
            async with self._slot_lock:
                entries = await self._load()
                entries.append(entry)
                await self._persist(entries[-self.max_entries:])
        except Exception as e:
            self.logger.error(f"Error recording dead letter: {e}",
                              action_id=action.id,
                              reason=reason)
            return None

        self.logger.warning("Action moved to dead letter log",
                            action_id=action.id,
                            action_type=action.type,
                            reason=reason,
                            error=error_message)
        return entry

    async def list(self) -> List[DeadLetterEntry]:
        return await self._load()

    async def clear(self):
        async with self._slot_lock:
            await self.clear_slot()
        self.logger.info("Dead letter log cleared", key=self.key)

    async def requeue(self, entry_id: str, queue: "ActionQueue") -> Optional[str]:
        """
        Put a dead-lettered action back on ``queue`` with a fresh retry budget.

        The entry leaves the log before the action is queued, and is put back
        if queueing fails, so a retried requeue never duplicates the action.
        """
        async with self._slot_lock:
            entries = await self._load()
            entry = next((e for e in entries if e.id == entry_id), None)
            if entry is None:
                return None

            await self._persist([e for e in entries if e.id != entry_id])
            try:
                new_id = await queue.enqueue(entry.type, entry.payload)
            except Exception as e:
                self.logger.error(f"Error requeuing dead letter: {e}", entry_id=entry_id)
                await self._persist(entries)
                raise

        self.logger.info("Dead letter requeued",
                         entry_id=entry_id,
                         action_id=new_id,
                         action_type=entry.type)
        return new_id
