"""
Pytest configuration and fixtures for the offline queue tests.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from parksync.core.connectivity import ConnectivityState, ManualConnectivityMonitor
from parksync.core.queue_policies import QueuePolicy
from parksync.core.redis_client import RedisClient
from parksync.core.store import MemoryStore
from parksync.services.cache_service import OfflineCache
from parksync.services.dead_letter_service import DeadLetterLog
from parksync.services.queue_service import ActionQueue


QUEUE_KEY = "test:offline_queue"
DEAD_LETTER_KEY = "test:offline_queue:dead_letter"


@pytest.fixture
def memory_store():
    """Empty in-memory durable store."""
    return MemoryStore()


@pytest.fixture
def online_monitor():
    """Connectivity monitor reporting a reachable network."""
    return ManualConnectivityMonitor(ConnectivityState(connected=True, reachable=True))


@pytest.fixture
def offline_monitor():
    """Connectivity monitor reporting no network."""
    return ManualConnectivityMonitor(ConnectivityState(connected=False, reachable=False))


@pytest.fixture
def policy():
    """Default retry policy with a short handler timeout."""
    return QueuePolicy(max_retries=3, handler_timeout_seconds=1.0)


@pytest.fixture
def dead_letters(memory_store):
    """Dead letter log sharing the queue's store."""
    return DeadLetterLog(memory_store, key=DEAD_LETTER_KEY, max_entries=5)


@pytest.fixture
def queue(memory_store, online_monitor, policy, dead_letters):
    """Action queue that is online."""
    return ActionQueue(
        memory_store,
        online_monitor,
        key=QUEUE_KEY,
        policy=policy,
        dead_letters=dead_letters,
    )


@pytest.fixture
def offline_queue(memory_store, offline_monitor, policy):
    """Action queue whose monitor reports offline."""
    return ActionQueue(memory_store, offline_monitor, key=QUEUE_KEY, policy=policy)


@pytest.fixture
def cache(memory_store):
    """Offline garage cache."""
    return OfflineCache(memory_store, key="test:cached_garages")


@pytest.fixture
def ok_handler():
    """Handler that always succeeds."""
    return AsyncMock(return_value=None)


@pytest.fixture
def failing_handler():
    """Handler that always raises."""
    return AsyncMock(side_effect=RuntimeError("server unavailable"))


@pytest.fixture
def mock_redis():
    """Mock Redis client."""
    redis_mock = MagicMock(spec=RedisClient)
    redis_mock.client = AsyncMock()
    redis_mock.connect = AsyncMock()
    redis_mock.disconnect = AsyncMock()
    redis_mock.get = AsyncMock(return_value=None)
    redis_mock.set = AsyncMock()
    redis_mock.delete = AsyncMock(return_value=1)
    return redis_mock


@pytest.fixture
def extend_payload():
    """Sample extend-session payload."""
    return {"sessionId": "abc", "minutes": 30}
