"""
Scheduler — the delay primitive behind reveal spacing and clock ticks.

AsyncioScheduler sleeps on the running event loop.
ManualScheduler keeps virtual time: sleepers wait until a test calls
advance(), so reveal spacing and clock ticks can be asserted exactly.
"""

import asyncio
import heapq
from typing import List, Protocol, Tuple


class Scheduler(Protocol):
    """Anything that can tell the time and suspend a coroutine for a while."""

    def now(self) -> float:
        ...

    async def sleep(self, seconds: float) -> None:
        ...


class AsyncioScheduler:
    """Real-time scheduler backed by the event loop's monotonic clock."""

    def now(self) -> float:
        return asyncio.get_running_loop().time()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class ManualScheduler:
    """
    Virtual-time scheduler for deterministic tests.

    Time only moves inside advance(). A sleeper whose task is cancelled has
    its waiter cancelled with it, so it is skipped instead of firing.
    """

    # Event-loop passes given to woken tasks so they reach their next await.
    SETTLE_PASSES = 20

    def __init__(self, start: float = 0.0):
        self._now = start
        self._seq = 0
        self._waiters: List[Tuple[float, int, asyncio.Future]] = []

    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        """Number of sleepers still waiting to be woken."""
        return sum(1 for _, _, fut in self._waiters if not fut.done())

    async def sleep(self, seconds: float) -> None:
        fut = asyncio.get_running_loop().create_future()
        self._seq += 1
        heapq.heappush(self._waiters, (self._now + max(0.0, seconds), self._seq, fut))
        await fut

    async def advance(self, seconds: float) -> None:
        """Move virtual time forward, waking sleepers in due order."""
        target = self._now + seconds
        while True:
            await self.settle()
            while self._waiters and self._waiters[0][2].done():
                heapq.heappop(self._waiters)
            if not self._waiters or self._waiters[0][0] > target:
                break
            due, _, fut = heapq.heappop(self._waiters)
            self._now = due
            fut.set_result(None)
        self._now = target
        await self.settle()

    async def settle(self) -> None:
        """Let ready tasks run until they block again."""
        for _ in range(self.SETTLE_PASSES):
            await asyncio.sleep(0)
