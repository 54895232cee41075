"""
Durable key-value stores backing the offline queue.

Every store holds named string slots. A single ``set`` is atomic; nothing
is transactional across calls. Backend failures surface as ``StorageError``.
Adapters that hold connections or handles also offer an async ``close``.
"""
import asyncio
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol
from urllib.parse import quote

from redis.exceptions import RedisError

from parksync.core.config import Settings, settings
from parksync.core.exceptions import StorageError
from parksync.core.logging import get_logger
from parksync.core.redis_client import RedisClient, redis_client

logger = get_logger(__name__)


class DurableStore(Protocol):
    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def remove(self, key: str) -> None:
        ...


class MemoryStore:
    """Process-local store, lost on exit."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def close(self) -> None:
        pass


class FileStore:
    """
    One file per slot under ``directory``.

    Writes land in a temporary file that is then renamed over the slot, so a
    crash mid-write leaves the previous value intact.
    """

    def __init__(self, directory):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='')}.json"

    def _read(self, path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _write(self, path: Path, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def get(self, key: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(self._read, self._path(key))
        except OSError as e:
            logger.error("Failed to read slot", key=key, error=str(e))
            raise StorageError(f"Failed to read {key}: {e}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._write, self._path(key), value)
        except OSError as e:
            logger.error("Failed to write slot", key=key, error=str(e))
            raise StorageError(f"Failed to write {key}: {e}") from e

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._path(key).unlink, missing_ok=True)
        except OSError as e:
            logger.error("Failed to remove slot", key=key, error=str(e))
            raise StorageError(f"Failed to remove {key}: {e}") from e

    async def close(self) -> None:
        pass


class RedisStore:
    """Slots kept as Redis string keys."""

    def __init__(self, client: RedisClient = None):
        self.redis = client or redis_client

    async def _ensure_connected(self):
        if not self.redis.client:
            await self.redis.connect()

    async def get(self, key: str) -> Optional[str]:
        try:
            await self._ensure_connected()
            return await self.redis.get(key)
        except RedisError as e:
            raise StorageError(f"Failed to read {key}: {e}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            await self._ensure_connected()
            await self.redis.set(key, value)
        except RedisError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e

    async def remove(self, key: str) -> None:
        try:
            await self._ensure_connected()
            await self.redis.delete(key)
        except RedisError as e:
            raise StorageError(f"Failed to remove {key}: {e}") from e

    async def close(self) -> None:
        await self.redis.disconnect()


def create_store(config: Settings = None) -> DurableStore:
    """Build the store selected by ``STORE_BACKEND``."""
    config = config or settings
    if config.STORE_BACKEND == "memory":
        return MemoryStore()
    if config.STORE_BACKEND == "redis":
        return RedisStore(RedisClient(config.REDIS_URL, config.REDIS_MAX_CONNECTIONS))
    return FileStore(config.STORE_PATH)
