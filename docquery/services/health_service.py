"""Backend health checks and cold-start wake-up polling."""

import asyncio
from collections.abc import Callable

import httpx
import structlog

from docquery.api.client import ApiClient
from docquery.chat.scheduler import Scheduler, TimerHandle
from docquery.schemas.health_schema import DetailedHealth, ServiceHealth

logger = structlog.get_logger()

CHECK_INTERVAL = 5.0


class HealthService:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def detailed(self) -> DetailedHealth:
        response = await self._client.get("/health/detailed")
        return DetailedHealth.model_validate(response.json())


class ServiceWakeUp:
    """Polls the detailed health check until the backend and vector store are up.

    The first check runs on `start()`; later ones every `interval` seconds.
    Polling stops for good once both report healthy, or on `stop()`.
    """

    def __init__(
        self,
        health: HealthService,
        scheduler: Scheduler,
        interval: float = CHECK_INTERVAL,
        on_change: Callable[[ServiceHealth], None] | None = None,
    ) -> None:
        self._health = health
        self._scheduler = scheduler
        self._interval = interval
        self._on_change = on_change
        self._timer: TimerHandle | None = None
        self._task: asyncio.Task[ServiceHealth] | None = None
        self.state = ServiceHealth()

    @property
    def running(self) -> bool:
        return self._timer is not None

    def start(self) -> None:
        if self.running or self.state.all_healthy:
            return
        self._timer = self._scheduler.call_every(self._interval, self._on_tick)
        self._on_tick()

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def settled(self) -> ServiceHealth:
        """Wait for a check already in flight, then return the current state."""
        if self._task is not None and not self._task.done():
            await self._task
        return self.state

    def _on_tick(self) -> None:
        # Skip the tick while the previous check is still waiting on the network.
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.get_running_loop().create_task(self.check())

    async def check(self) -> ServiceHealth:
        """Run one health check and update `state`."""
        try:
            health = await self._health.detailed()
        except httpx.HTTPStatusError:
            # An error status still proves the backend process is up.
            state = self.state.model_copy(update={"backend": True})
        except (httpx.HTTPError, ValueError) as exc:
            logger.info("Services not ready, retrying", error=str(exc))
            state = ServiceHealth()
        else:
            state = ServiceHealth(backend=health.backend_healthy, milvus=health.milvus_healthy)

        if state != self.state:
            self.state = state
            if self._on_change is not None:
                self._on_change(state)
        if state.all_healthy and self._timer is not None:
            logger.info("All services healthy, stopping health checks")
            self._timer.cancel()
            self._timer = None
        return state
