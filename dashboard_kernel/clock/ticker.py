"""
Clock Ticker — minute-granularity, timezone-localized time-of-day readout.

The first value is computed synchronously when a timezone is followed, so the
display is never blank. Changing timezone tears the ticking task down and
starts a new one; the old task can no longer publish.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dashboard_kernel.models.dashboard import ClockState
from dashboard_kernel.scheduling.scheduler import AsyncioScheduler, Scheduler

logger = logging.getLogger(__name__)

TIME_FORMAT = "%I:%M %p"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def resolve_zone(zone_name: str) -> ZoneInfo:
    """Look up an IANA zone, falling back to UTC for unknown names."""
    try:
        return ZoneInfo(zone_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, formatting clock as UTC", zone_name)
        return ZoneInfo("UTC")


def format_clock(zone_name: str, now: Optional[datetime] = None) -> str:
    """Format a two-digit 12-hour time of day, e.g. "09:05 AM"."""
    if now is None:
        now = _utc_now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(resolve_zone(zone_name)).strftime(TIME_FORMAT)


class ClockTicker:
    """Publishes a fresh time string for the followed timezone once per interval."""

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        interval_seconds: float = 60.0,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.scheduler = scheduler or AsyncioScheduler()
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._state: Optional[ClockState] = None
        self._task: Optional[asyncio.Task] = None
        self._generation = 0

    @property
    def state(self) -> Optional[ClockState]:
        return self._state

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def observe(self, zone_name: str) -> AsyncIterator[str]:
        """Infinite sequence of time strings: one now, then one per interval."""
        yield format_clock(zone_name, self._clock())
        while True:
            await self.scheduler.sleep(self.interval_seconds)
            yield format_clock(zone_name, self._clock())

    def follow(
        self, zone_name: str, on_tick: Callable[[ClockState], None]
    ) -> ClockState:
        """
        Start ticking against a timezone.

        Following the zone already being ticked is a no-op. Must be called
        from inside a running event loop.
        """
        if self._state is not None and self._state.timezone == zone_name and self.running:
            return self._state

        self.stop()
        generation = self._generation
        state = ClockState(
            timezone=zone_name,
            current_time_string=format_clock(zone_name, self._clock()),
        )
        self._state = state
        on_tick(state)
        self._task = asyncio.get_running_loop().create_task(
            self._tick(generation, zone_name, on_tick)
        )
        return state

    async def _tick(
        self, generation: int, zone_name: str, on_tick: Callable[[ClockState], None]
    ) -> None:
        ticks = self.observe(zone_name)
        try:
            await ticks.__anext__()  # first value was published synchronously
            async for text in ticks:
                if generation != self._generation:
                    return
                self._state = ClockState(timezone=zone_name, current_time_string=text)
                on_tick(self._state)
        finally:
            await ticks.aclose()

    def stop(self) -> None:
        """Tear down the ticking task. The last state is kept for inspection."""
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
