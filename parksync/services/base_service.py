import asyncio
import json
from abc import ABC
from typing import Any, Optional

from parksync.core.exceptions import QueueCorruptedError
from parksync.core.logging import get_logger
from parksync.core.store import DurableStore


class BaseService(ABC):
    """Base service owning one slot of the durable store."""

    def __init__(self, store: DurableStore, key: str):
        self.store = store
        self.key = key
        self.logger = get_logger(self.__class__.__name__)

        # Guards every read-modify-write of the slot
        self._slot_lock = asyncio.Lock()

    async def read_slot(self) -> Optional[str]:
        """Read the raw slot contents."""
        try:
            return await self.store.get(self.key)
        except Exception as e:
            self.logger.error(f"Error reading slot: {e}", key=self.key)
            raise

    async def write_slot(self, value: str):
        """Overwrite the slot."""
        try:
            await self.store.set(self.key, value)
        except Exception as e:
            self.logger.error(f"Error writing slot: {e}", key=self.key)
            raise

    async def clear_slot(self):
        """Delete the slot."""
        try:
            await self.store.remove(self.key)
        except Exception as e:
            self.logger.error(f"Error clearing slot: {e}", key=self.key)
            raise

    async def read_records(self) -> list:
        """Read the slot as a JSON array; an absent slot is empty."""
        raw = await self.read_slot()
        if not raw:
            return []
        try:
            records: Any = json.loads(raw)
        except json.JSONDecodeError as e:
            raise QueueCorruptedError(f"Slot {self.key} is not valid JSON: {e}") from e
        if not isinstance(records, list):
            raise QueueCorruptedError(f"Slot {self.key} does not hold a list")
        return records

    async def write_records(self, records: list):
        await self.write_slot(json.dumps(records, default=str))
