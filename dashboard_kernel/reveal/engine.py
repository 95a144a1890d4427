"""
Sequential Reveal Engine — discloses recommended actions one at a time.

States:
  IDLE → REVEALING(index) → DONE
                          ↘ CANCELLED   (superseded by a newer run)

The first item is appended synchronously by start(); each later item waits a
fixed delay on the scheduler. Before every append the run must still be the
engine's current run and still REVEALING; a superseded run's task is also
cancelled so no timer of it is left pending.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from dashboard_kernel.models.building import ActionItem
from dashboard_kernel.scheduling.scheduler import AsyncioScheduler, Scheduler

logger = logging.getLogger(__name__)


class RevealState(str, Enum):
    IDLE = "idle"
    REVEALING = "revealing"
    DONE = "done"
    CANCELLED = "cancelled"


class RevealStateError(Exception):
    """An append or transition was attempted on a run that no longer allows it."""
    pass


class RevealRun:
    """One disclosure of an action list. `revealed` is always a prefix of `items`."""

    def __init__(self, run_id: int, items: Iterable[ActionItem]):
        self.run_id = run_id
        self.items: Tuple[ActionItem, ...] = tuple(items)
        self.revealed: List[ActionItem] = []
        self.state = RevealState.IDLE

    @property
    def running(self) -> bool:
        return self.state == RevealState.REVEALING

    @property
    def index(self) -> int:
        """Position of the next item to reveal."""
        return len(self.revealed)

    @property
    def finished(self) -> bool:
        return self.state in (RevealState.DONE, RevealState.CANCELLED)

    def begin(self) -> None:
        if self.state != RevealState.IDLE:
            raise RevealStateError(f"run {self.run_id} already started ({self.state.value})")
        self.state = RevealState.REVEALING

    def append_next(self) -> ActionItem:
        if self.state != RevealState.REVEALING:
            raise RevealStateError(
                f"run {self.run_id} cannot reveal while {self.state.value}"
            )
        if self.index >= len(self.items):
            raise RevealStateError(f"run {self.run_id} has nothing left to reveal")
        item = self.items[self.index]
        self.revealed.append(item)
        return item

    def complete(self) -> None:
        if self.state == RevealState.REVEALING:
            self.state = RevealState.DONE

    def cancel(self) -> None:
        if not self.finished:
            self.state = RevealState.CANCELLED

    def to_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "state": self.state.value,
            "revealed": len(self.revealed),
            "total": len(self.items),
        }


RevealListener = Callable[[RevealRun], None]


class SequentialRevealEngine:
    """Runs at most one RevealRun at a time; start() supersedes the previous run."""

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        delay_seconds: float = 10.0,
    ):
        self.scheduler = scheduler or AsyncioScheduler()
        self.delay_seconds = delay_seconds
        self._listeners: List[RevealListener] = []
        self._current: Optional[RevealRun] = None
        self._task: Optional[asyncio.Task] = None
        self._run_ids = 0

    @property
    def current(self) -> Optional[RevealRun]:
        return self._current

    def subscribe(self, listener: RevealListener) -> None:
        """Register a callback invoked on every visible change of the current run."""
        self._listeners.append(listener)

    def _notify(self, run: RevealRun) -> None:
        for listener in self._listeners:
            listener(run)

    def _is_current(self, run: RevealRun) -> bool:
        return run is self._current and run.running

    def start(self, items: Iterable[ActionItem]) -> RevealRun:
        """
        Begin revealing `items`, superseding any run in progress.

        The first item (if any) is visible when this returns. Runs with more
        than one item continue on a task, which needs a running event loop.
        """
        self.cancel()
        self._run_ids += 1
        run = RevealRun(self._run_ids, items)
        self._current = run
        run.begin()
        logger.debug("Reveal run %d started with %d items", run.run_id, len(run.items))

        if run.items:
            run.append_next()
        self._notify(run)

        if run.index >= len(run.items):
            self._finish(run)
        else:
            self._task = asyncio.get_running_loop().create_task(self._drive(run))
        return run

    async def _drive(self, run: RevealRun) -> None:
        while run.index < len(run.items):
            await self.scheduler.sleep(self.delay_seconds)
            if not self._is_current(run):
                return
            run.append_next()
            self._notify(run)
        self._finish(run)

    def _finish(self, run: RevealRun) -> None:
        run.complete()
        logger.debug("Reveal run %d complete", run.run_id)
        self._notify(run)

    def cancel(self) -> None:
        """Freeze the current run. Its pending delay is cancelled and it never appends again."""
        run = self._current
        if run is not None and not run.finished:
            run.cancel()
            logger.debug("Reveal run %d cancelled at %d/%d", run.run_id, run.index, len(run.items))
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the current run's task, if any, to finish or be cancelled."""
        await _join(self._task)

    async def aclose(self) -> None:
        task = self._task
        self.cancel()
        await _join(task)


async def _join(task: Optional[asyncio.Task]) -> None:
    if task is None:
        return
    try:
        await task
    except asyncio.CancelledError:
        # Only absorb the task's own cancellation, never the caller's.
        if not task.cancelled():
            raise
