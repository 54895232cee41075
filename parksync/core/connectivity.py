import asyncio
import inspect
from typing import Any, Callable, List, Optional, Protocol

import httpx
from pydantic import BaseModel, Field

from parksync.core.config import settings
from parksync.core.logging import get_logger

logger = get_logger(__name__)


class ConnectivityState(BaseModel):
    """Point-in-time view of the device's network."""

    connected: bool = Field(default=False, description="A network interface is up")
    reachable: Optional[bool] = Field(
        default=None, description="Internet reachability; None while unknown"
    )
    connection_type: str = Field(default="unknown", description="wifi, cellular, ...")

    @property
    def is_online(self) -> bool:
        """Connected, and reachability not known to be false."""
        return self.connected and self.reachable is not False


Listener = Callable[[ConnectivityState], Any]


class ConnectivityMonitor(Protocol):
    async def snapshot(self) -> ConnectivityState:
        ...

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        ...


class BaseConnectivityMonitor:
    """Listener bookkeeping shared by the concrete monitors."""

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _notify(self, state: ConnectivityState):
        for listener in list(self._listeners):
            try:
                result = listener(state)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("Connectivity listener failed", error=str(e))


class ManualConnectivityMonitor(BaseConnectivityMonitor):
    """
    Monitor whose state is pushed in by the host application.

    Every ``update`` is delivered to subscribers, changed or not, the same
    way platform reachability callbacks fire.
    """

    def __init__(self, state: ConnectivityState = None):
        super().__init__()
        self._state = state or ConnectivityState(connected=True)

    async def snapshot(self) -> ConnectivityState:
        return self._state

    async def update(
        self,
        connected: bool,
        reachable: Optional[bool] = None,
        connection_type: str = None,
    ) -> ConnectivityState:
        self._state = ConnectivityState(
            connected=connected,
            reachable=reachable,
            connection_type=connection_type or self._state.connection_type,
        )
        await self._notify(self._state)
        return self._state


class HttpReachabilityMonitor(BaseConnectivityMonitor):
    """
    Probes an HTTP endpoint to infer connectivity.

    Any HTTP response means the network and the server are reachable.
    A failed connection means we are offline; a timeout after connecting
    means a link exists but the internet is not usable.
    """

    def __init__(
        self,
        url: str = None,
        interval_seconds: float = None,
        timeout_seconds: float = None,
        transport: httpx.AsyncBaseTransport = None,
    ):
        super().__init__()
        self.url = url or settings.REACHABILITY_URL or settings.API_URL
        self.interval_seconds = interval_seconds or settings.REACHABILITY_INTERVAL_SECONDS
        self.timeout_seconds = timeout_seconds or settings.API_TIMEOUT_SECONDS
        self.transport = transport
        self._state: Optional[ConnectivityState] = None
        self._task: Optional[asyncio.Task] = None

    async def probe(self) -> ConnectivityState:
        """Issue one request and classify the outcome."""
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self.transport
            ) as client:
                await client.get(self.url)
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            logger.debug("Reachability probe could not connect", url=self.url, error=str(e))
            return ConnectivityState(connected=False, reachable=False)
        except httpx.TimeoutException as e:
            logger.debug("Reachability probe timed out", url=self.url, error=str(e))
            return ConnectivityState(connected=True, reachable=False)
        except httpx.TransportError as e:
            logger.debug("Reachability probe transport error", url=self.url, error=str(e))
            return ConnectivityState(connected=False, reachable=False)
        return ConnectivityState(connected=True, reachable=True)

    async def refresh(self) -> ConnectivityState:
        """
        Probe now and notify subscribers.

        Online results are delivered on every probe so pending work is picked
        up while the link stays up; offline results only when they are new.
        """
        state = await self.probe()
        changed = state != self._state
        self._state = state
        if changed:
            logger.info(
                "Connectivity changed",
                connected=state.connected,
                reachable=state.reachable,
            )
        if changed or state.is_online:
            await self._notify(state)
        return state

    async def snapshot(self) -> ConnectivityState:
        """Probe without notifying subscribers."""
        return await self.probe()

    async def _run(self):
        while True:
            try:
                await self.refresh()
            except Exception as e:
                logger.error("Reachability probe failed", error=str(e))
            await asyncio.sleep(self.interval_seconds)

    def start(self):
        """Start periodic probing in the background."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())

    async def stop(self):
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
