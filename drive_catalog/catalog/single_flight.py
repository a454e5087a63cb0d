"""
Per-key request coalescing.

The first caller for a key starts the work as a task; callers arriving while
it runs await the same task instead of starting their own. The task is
shielded, so a caller going away does not cancel work others are waiting on.

With ``cancel_when_abandoned`` the work is cancelled (and awaited) once the
last waiting caller is cancelled. Otherwise it runs to completion in the
background, and a failure nobody was waiting for is logged.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Flight:
    __slots__ = ("task", "waiters")

    def __init__(self, task: "asyncio.Task[Any]") -> None:
        self.task = task
        self.waiters = 0


class SingleFlight:
    def __init__(self, cancel_when_abandoned: bool = False) -> None:
        self.cancel_when_abandoned = cancel_when_abandoned
        self._inflight: Dict[str, _Flight] = {}

    def in_flight(self, key: str) -> bool:
        return key in self._inflight

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        flight = self._inflight.get(key)
        if flight is None:
            flight = _Flight(asyncio.ensure_future(fn()))
            self._inflight[key] = flight
            flight.task.add_done_callback(lambda done: self._finish(key, flight))

        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        finally:
            flight.waiters -= 1
            if self.cancel_when_abandoned and flight.waiters == 0 and not flight.task.done():
                if self._inflight.get(key) is flight:
                    del self._inflight[key]
                flight.task.cancel()
                await asyncio.wait([flight.task])

    def _finish(self, key: str, flight: _Flight) -> None:
        if self._inflight.get(key) is flight:
            del self._inflight[key]
        if flight.task.cancelled():
            return
        # Retrieve the exception so an orphaned failure is not reported as unhandled
        error = flight.task.exception()
        if error is not None and flight.waiters == 0:
            logger.error("Background work for %s failed with no caller waiting: %s", key, error)
