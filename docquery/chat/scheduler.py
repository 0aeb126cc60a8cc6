"""Repeating-timer abstraction driving the reveal animation."""

import asyncio
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Runs a callback every `interval` seconds until its handle is cancelled."""

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle: ...


class _RepeatingTimer:
    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callable[[], None],
    ) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._handle = loop.call_later(interval, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._callback()
        # the callback may cancel us
        if not self._cancelled:
            self._handle = self._loop.call_later(self._interval, self._fire)

    def cancel(self) -> None:
        self._cancelled = True
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioScheduler:
    """Scheduler backed by the running event loop's `call_later`."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_every(self, interval: float, callback: Callable[[], None]) -> _RepeatingTimer:
        loop = self._loop or asyncio.get_running_loop()
        return _RepeatingTimer(loop, interval, callback)
