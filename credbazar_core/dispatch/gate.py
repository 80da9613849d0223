"""
Admission Gate
==============
Bounded-concurrency gate for outbound sends with FIFO hand-off.
"""

import asyncio
from collections import deque
from typing import Deque

from ..metrics import SENDS_INFLIGHT, SENDS_WAITING


class AdmissionGate:
    """
    Limit the number of in-flight sends.

    Callers beyond the limit queue in arrival order. ``release`` passes the
    freed slot straight to the longest-waiting caller instead of returning
    it to the pool, so a newcomer can never overtake a waiter and no slot
    stays idle while someone is queued.

    Example:
        gate = AdmissionGate(limit=2)

        async with gate:
            await notifier.send(message)
    """

    def __init__(self, limit: int = 2):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self._active = 0
        self._waiters: Deque[asyncio.Future] = deque()

    @property
    def in_flight(self) -> int:
        return self._active

    @property
    def waiting(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.done())

    def _publish(self) -> None:
        SENDS_INFLIGHT.set(self._active)
        SENDS_WAITING.set(self.waiting)

    async def acquire(self) -> None:
        """Take a slot, waiting in FIFO order when the gate is full."""
        if self._active < self.limit and not self._waiters:
            self._active += 1
            self._publish()
            return

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        self._publish()
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # The slot was already handed over; pass it on.
                self.release()
            else:
                try:
                    self._waiters.remove(waiter)
                except ValueError:
                    pass
                self._publish()
            raise

    def release(self) -> None:
        """Free a slot, handing it to the oldest waiter if there is one."""
        if self._active <= 0:
            raise RuntimeError("AdmissionGate released too many times")

        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                # Ownership moves to the waiter; the active count is unchanged.
                waiter.set_result(None)
                self._publish()
                return

        self._active -= 1
        self._publish()

    async def __aenter__(self) -> "AdmissionGate":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release()
