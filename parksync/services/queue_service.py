import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ValidationError

from parksync.core.config import settings
from parksync.core.connectivity import ConnectivityMonitor
from parksync.core.exceptions import DeliveryError, HandlerTimeoutError, QueueCorruptedError
from parksync.core.queue_policies import QueuePolicy, get_policy
from parksync.core.store import DurableStore
from parksync.schemas.queue import (
    QueuedAction,
    ProcessResult,
    REASON_MAX_RETRIES,
    REASON_UNREGISTERED,
    now_ms,
)
from .base_service import BaseService
from .dead_letter_service import DeadLetterLog

Handler = Callable[[Any], Awaitable[Any]]


class ActionQueue(BaseService):
    """
    Durable FIFO of pending write actions, replayed when the device is online.

    The whole list lives in one store slot and is re-read on every
    operation. Processing passes are serialized per instance, and each slot
    update happens under a lock that is never held across a handler call.
    """

    def __init__(
        self,
        store: DurableStore,
        monitor: ConnectivityMonitor,
        key: str = None,
        policy: QueuePolicy = None,
        dead_letters: Optional[DeadLetterLog] = None,
    ):
        super().__init__(store, key or settings.QUEUE_KEY)
        self.monitor = monitor
        self.policy = policy or get_policy(self.key)
        self.dead_letters = dead_letters
        self._pass_lock = asyncio.Lock()

    @property
    def is_processing(self) -> bool:
        return self._pass_lock.locked()

    async def _load(self) -> List[QueuedAction]:
        """Read the slot. Callers hold ``_slot_lock``.

        Records saved without an ``id`` are given one and written back right
        away, so the id stays the same on every later read.
        """
        records = await self.read_records()
        try:
            actions = [QueuedAction.model_validate(record) for record in records]
        except ValidationError as e:
            raise QueueCorruptedError(f"Queue {self.key} holds an invalid action: {e}") from e

        missing_ids = sum(1 for record in records if "id" not in record)
        if missing_ids:
            await self._persist(actions)
            self.logger.info("Assigned ids to stored actions", queue=self.key, count=missing_ids)
        return actions

    async def _persist(self, actions: List[QueuedAction]):
        await self.write_records([action.to_record() for action in actions])

    async def enqueue(self, action_type: str, payload: Any = None) -> str:
        """Append an action and return its id."""
        action = QueuedAction(type=action_type, payload=payload, enqueued_at=now_ms())

        async with self._slot_lock:
            actions = await self._load()
            actions.append(action)
            await self._persist(actions)

        self.logger.info("Action queued",
                         action_id=action.id,
                         action_type=action_type,
                         queue_depth=len(actions))
        return action.id

    async def list(self) -> List[QueuedAction]:
        """All pending actions in FIFO order."""
        async with self._slot_lock:
            return await self._load()

    async def remove(self, action_id: str) -> bool:
        """Drop an action by id. Returns False if it was not queued."""
        async with self._slot_lock:
            actions = await self._load()
            remaining = [action for action in actions if action.id != action_id]
            removed = len(remaining) != len(actions)
            await self._persist(remaining)

        if removed:
            self.logger.debug("Action removed", action_id=action_id)
        return removed

    async def clear(self):
        """Discard every pending action."""
        async with self._slot_lock:
            await self.clear_slot()
        self.logger.info("Queue cleared", queue=self.key)

    async def process_queue(self, handlers: Dict[str, Handler]) -> ProcessResult:
        """
        Deliver every queued action through its handler, oldest first.

        Returns the pass counts. Does nothing while offline. Concurrent
        calls wait for the running pass and then take their own snapshot.
        """
        async with self._pass_lock:
            state = await self.monitor.snapshot()
            if not state.is_online:
                self.logger.debug("Skipping queue processing while offline",
                                  connected=state.connected,
                                  reachable=state.reachable)
                return ProcessResult()

            return await self._run_pass(handlers)

    async def _run_pass(self, handlers: Dict[str, Handler]) -> ProcessResult:
        snapshot = await self.list()
        result = ProcessResult()

        for action in snapshot:
            handler = handlers.get(action.type)
            if handler is None:
                self.logger.warning("Dropping action with no registered handler",
                                    action_id=action.id,
                                    action_type=action.type)
                await self.remove(action.id)
                await self._dead_letter(action, REASON_UNREGISTERED,
                                        f"No handler registered for '{action.type}'")
                result.dropped += 1
                continue

            try:
                await self._deliver(handler, action)
            except Exception as e:
                await self._record_failure(action, e, result)
                continue

            await self.remove(action.id)
            result.succeeded += 1
            self.logger.info("Action delivered",
                             action_id=action.id,
                             action_type=action.type,
                             retry_count=action.retry_count)

        if snapshot:
            self.logger.info("Queue pass finished",
                             queue=self.key,
                             attempted=len(snapshot),
                             succeeded=result.succeeded,
                             failed=result.failed,
                             dropped=result.dropped)
        return result

    async def _deliver(self, handler: Handler, action: QueuedAction):
        outcome = handler(action.payload)
        if inspect.isawaitable(outcome):
            timeout = self.policy.handler_timeout_seconds
            try:
                outcome = await asyncio.wait_for(outcome, timeout) if timeout else await outcome
            except asyncio.TimeoutError as e:
                raise HandlerTimeoutError(
                    f"Handler for '{action.type}' timed out after {timeout}s"
                ) from e
        if outcome is False:
            raise DeliveryError(f"Handler for '{action.type}' reported failure")

    async def _record_failure(self, action: QueuedAction, error: Exception, result: ProcessResult):
        retry_count = action.retry_count + 1
        failed_action = action.model_copy(update={"retry_count": retry_count})

        if retry_count >= self.policy.max_retries:
            await self.remove(action.id)
            result.failed += 1
            self.logger.error("Action evicted after max retries",
                              action_id=action.id,
                              action_type=action.type,
                              retry_count=retry_count,
                              max_retries=self.policy.max_retries,
                              error=str(error))
            await self._dead_letter(failed_action, REASON_MAX_RETRIES, str(error))
            return

        self.logger.warning("Action delivery failed, will retry",
                            action_id=action.id,
                            action_type=action.type,
                            retry_count=retry_count,
                            max_retries=self.policy.max_retries,
                            error=str(error))

        async with self._slot_lock:
            current = await self._load()
            for index, queued in enumerate(current):
                if queued.id == action.id:
                    current[index] = failed_action
                    await self._persist(current)
                    break
            else:
                self.logger.debug("Action removed while in flight", action_id=action.id)

    async def _dead_letter(self, action: QueuedAction, reason: str, error_message: str):
        if self.dead_letters is not None:
            await self.dead_letters.record(action, reason, error_message, original_queue=self.key)
