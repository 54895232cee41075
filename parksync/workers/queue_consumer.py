import asyncio
from typing import Any, Callable, Dict, Optional

from parksync.core.connectivity import ConnectivityMonitor, ConnectivityState
from parksync.core.logging import get_logger
from parksync.schemas.queue import ProcessResult
from parksync.services.queue_service import ActionQueue, Handler


class QueueConsumer:
    """
    Replays the action queue whenever connectivity is (or comes back) online.

    At most one drain runs at a time. Triggers that arrive while one is
    running collapse into a single extra pass right after it.
    """

    def __init__(
        self,
        queue: ActionQueue,
        monitor: ConnectivityMonitor,
        handlers: Optional[Dict[str, Handler]] = None,
    ):
        self.queue = queue
        self.monitor = monitor
        self.handlers: Dict[str, Handler] = dict(handlers or {})
        self.logger = get_logger(self.__class__.__name__)
        self.last_result: Optional[ProcessResult] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._active: Optional[asyncio.Task] = None
        self._rerun = False

    def register(self, action_type: str, handler: Handler):
        self.handlers[action_type] = handler

    def unregister(self, action_type: str):
        self.handlers.pop(action_type, None)

    async def enqueue(self, action_type: str, payload: Any = None) -> str:
        return await self.queue.enqueue(action_type, payload)

    async def start(self):
        """Subscribe to connectivity changes and drain once if already online."""
        state = await self.monitor.snapshot()
        if self._unsubscribe is None:
            self._unsubscribe = self.monitor.subscribe(self._on_connectivity_change)
            self.logger.info("Queue consumer started", queue=self.queue.key)
        await self._on_connectivity_change(state)

    async def stop(self):
        """Stop listening and wait for an in-flight drain to finish."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._active is not None and not self._active.done():
            self._rerun = False
            await asyncio.gather(self._active, return_exceptions=True)
        self.logger.info("Queue consumer stopped", queue=self.queue.key)

    async def _on_connectivity_change(self, state: ConnectivityState):
        if state.is_online:
            self.trigger()

    def trigger(self) -> asyncio.Task:
        """Start a drain, or fold this request into the one already running."""
        if self._active is not None and not self._active.done():
            self._rerun = True
            self.logger.debug("Queue drain already running, re-run scheduled")
            return self._active

        self._rerun = False
        self._active = asyncio.create_task(self._drain())
        self._active.add_done_callback(self._on_drain_done)
        return self._active

    async def process(self) -> ProcessResult:
        """Drain now and return the combined counts."""
        return await self.trigger()

    async def _drain(self) -> ProcessResult:
        total = ProcessResult()
        while True:
            self._rerun = False
            result = await self.queue.process_queue(dict(self.handlers))
            self.last_result = result
            total = total.merge(result)
            if not self._rerun:
                return total
            self.logger.debug("Re-running queue drain for coalesced trigger")

    def _on_drain_done(self, task: asyncio.Task):
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.logger.error(f"Queue drain failed: {error}", queue=self.queue.key)
            return
        result = task.result()
        if result.succeeded or result.failed or result.dropped:
            self.logger.info("Queue drain completed",
                             succeeded=result.succeeded,
                             failed=result.failed,
                             dropped=result.dropped)
