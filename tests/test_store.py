"""
Tests for the durable store backends.
"""
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from parksync.core.config import Settings
from parksync.core.exceptions import StorageError
from parksync.core.store import FileStore, MemoryStore, RedisStore, create_store


class TestMemoryStore:

    @pytest.mark.asyncio
    async def test_round_trip(self):
        store = MemoryStore()

        assert await store.get("k") is None
        await store.set("k", "v")
        assert await store.get("k") == "v"
        await store.remove("k")
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_remove_missing_key(self):
        await MemoryStore().remove("missing")


class TestFileStore:

    @pytest.mark.asyncio
    async def test_set_get_remove(self, tmp_path):
        store = FileStore(tmp_path / "slots")

        assert await store.get("@offline_queue") is None
        await store.set("@offline_queue", '[{"id": "1"}]')
        assert await store.get("@offline_queue") == '[{"id": "1"}]'

        await store.remove("@offline_queue")
        assert await store.get("@offline_queue") is None

    @pytest.mark.asyncio
    async def test_keys_map_to_separate_files(self, tmp_path):
        store = FileStore(tmp_path)

        await store.set("@offline_queue", "a")
        await store.set("@offline_queue:dead_letter", "b")

        assert await store.get("@offline_queue") == "a"
        assert await store.get("@offline_queue:dead_letter") == "b"
        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "%40offline_queue%3Adead_letter.json",
            "%40offline_queue.json",
        ]

    @pytest.mark.asyncio
    async def test_overwrite_leaves_no_temp_files(self, tmp_path):
        store = FileStore(tmp_path)

        await store.set("k", "first")
        await store.set("k", "second")

        assert await store.get("k") == "second"
        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]

    @pytest.mark.asyncio
    async def test_survives_new_instance(self, tmp_path):
        await FileStore(tmp_path).set("k", "persisted")

        assert await FileStore(tmp_path).get("k") == "persisted"

    @pytest.mark.asyncio
    async def test_remove_missing_key(self, tmp_path):
        await FileStore(tmp_path).remove("missing")

    @pytest.mark.asyncio
    async def test_write_failure_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = FileStore(blocker)

        with pytest.raises(StorageError):
            await store.set("k", "v")


class TestRedisStore:

    @pytest.mark.asyncio
    async def test_delegates_to_client(self, mock_redis):
        mock_redis.get.return_value = "[]"
        store = RedisStore(mock_redis)

        assert await store.get("k") == "[]"
        await store.set("k", "v")
        await store.remove("k")

        mock_redis.get.assert_awaited_once_with("k")
        mock_redis.set.assert_awaited_once_with("k", "v")
        mock_redis.delete.assert_awaited_once_with("k")
        mock_redis.connect.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_connects_lazily(self, mock_redis):
        mock_redis.client = None
        store = RedisStore(mock_redis)

        await store.get("k")

        mock_redis.connect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_redis_errors_become_storage_errors(self, mock_redis):
        mock_redis.set.side_effect = RedisConnectionError("connection refused")
        store = RedisStore(mock_redis)

        with pytest.raises(StorageError, match="connection refused"):
            await store.set("k", "v")

    @pytest.mark.asyncio
    async def test_close_disconnects(self, mock_redis):
        await RedisStore(mock_redis).close()

        mock_redis.disconnect.assert_awaited_once()


class TestCreateStore:

    def test_memory_backend(self):
        assert isinstance(create_store(Settings(STORE_BACKEND="memory")), MemoryStore)

    def test_file_backend(self, tmp_path):
        store = create_store(Settings(STORE_BACKEND="file", STORE_PATH=str(tmp_path)))

        assert isinstance(store, FileStore)
        assert store.directory == tmp_path

    def test_redis_backend(self):
        store = create_store(Settings(STORE_BACKEND="redis", REDIS_URL="redis://cache:6379/2"))

        assert isinstance(store, RedisStore)

    def test_rejects_unknown_backend(self):
        with pytest.raises(ValueError):
            Settings(STORE_BACKEND="sqlite")
