"""
Building-Switch Orchestrator — the dashboard's top-level controller.

On every building change:
  persist choice → loading=True → fetch metadata → publish metadata + follow
  its timezone → fetch actions → start a fresh reveal run → loading=False

Each switch takes a new selection generation. Every await is followed by a
generation check, and a continuation whose generation is no longer the latest
drops its result without touching the dashboard state.
"""

import logging
from typing import Callable, List, Optional

from dashboard_kernel.clock.ticker import ClockTicker
from dashboard_kernel.gateway.client import DataFetchGateway, FetchError
from dashboard_kernel.models.building import ActionItem, BuildingMetadata
from dashboard_kernel.models.config import DashboardConfig
from dashboard_kernel.models.dashboard import ClockState, DashboardState
from dashboard_kernel.reveal.engine import RevealRun, SequentialRevealEngine
from dashboard_kernel.scheduling.scheduler import AsyncioScheduler, Scheduler
from dashboard_kernel.selection.store import BuildingSelectionStore, StorageError

logger = logging.getLogger(__name__)

StateListener = Callable[[DashboardState], None]


class SelectionContext:
    """Carried through one building switch; identifies which selection it serves."""

    def __init__(self, generation: int, building_id: str, lookup_name: str):
        self.generation = generation
        self.building_id = building_id
        self.lookup_name = lookup_name

    def to_dict(self) -> dict:
        return {
            "generation": self.generation,
            "building_id": self.building_id,
            "lookup_name": self.lookup_name,
        }


class DashboardOrchestrator:
    """Owns DashboardState and accepts one command: select_building()."""

    def __init__(
        self,
        gateway: DataFetchGateway,
        selection_store: BuildingSelectionStore,
        config: Optional[DashboardConfig] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[ClockTicker] = None,
    ):
        self.gateway = gateway
        self.selection_store = selection_store
        self.config = config or DashboardConfig()
        self.scheduler = scheduler or AsyncioScheduler()

        self.reveal = SequentialRevealEngine(
            scheduler=self.scheduler,
            delay_seconds=self.config.reveal_delay_seconds,
        )
        self.reveal.subscribe(self._on_reveal_change)
        self.clock = clock or ClockTicker(
            scheduler=self.scheduler,
            interval_seconds=self.config.clock_interval_seconds,
        )

        # Nothing is displayed until the initial selection settles.
        self._state = DashboardState(loading=True)
        self._generation = 0
        self._listeners: List[StateListener] = []

    # --- Observable state ---

    @property
    def generation(self) -> int:
        """The latest selection generation."""
        return self._generation

    def snapshot(self) -> DashboardState:
        """A detached copy of the current dashboard state."""
        return self._state.model_copy(deep=True)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call `listener` with a snapshot after every state change. Returns an unsubscriber."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        for listener in list(self._listeners):
            listener(self.snapshot())

    # --- Lifecycle ---

    async def start(self) -> None:
        """Initial selection: the stored building, or the configured default."""
        building_id = self.selection_store.get() or self.config.default_building
        await self.select_building(building_id, persist=False)

    async def aclose(self) -> None:
        self._generation += 1
        self.clock.stop()
        await self.reveal.aclose()
        self._state.loading = False
        self._state.reveal_in_progress = False
        self._publish()

    # --- Building switch ---

    def _is_current(self, ctx: SelectionContext) -> bool:
        return ctx.generation == self._generation

    async def select_building(self, building_id: str, persist: bool = True) -> None:
        """
        Switch the dashboard to `building_id`.

        Never raises for fetch failures: they are logged and the previous
        display is left as it was. The loading flag is always cleared by the
        latest selection.
        """
        if not building_id or not building_id.strip():
            raise ValueError("building_id must be a non-empty string")

        self._generation += 1
        ctx = SelectionContext(
            generation=self._generation,
            building_id=building_id,
            lookup_name=f"{building_id}{self.config.building_name_suffix}",
        )

        if persist:
            self._persist(building_id)

        self._state.loading = True
        self._publish()
        try:
            metadata = await self.gateway.fetch_building_metadata(ctx.lookup_name)
            if not self._is_current(ctx):
                logger.debug("Discarding stale metadata for %s", ctx.to_dict())
                return
            self._commit_metadata(ctx, metadata)

            actions = await self.gateway.fetch_recommended_actions(ctx.lookup_name)
            if not self._is_current(ctx):
                logger.debug("Discarding stale actions for %s", ctx.to_dict())
                return
            self._commit_actions(ctx, actions)
        except FetchError as e:
            if self._is_current(ctx):
                logger.error("Error fetching data for building %r: %s", building_id, e)
            else:
                logger.debug("Ignoring fetch failure of superseded selection %s: %s", ctx.to_dict(), e)
        except Exception:
            # Errors a gateway did not translate to FetchError are absorbed too.
            if self._is_current(ctx):
                logger.exception("Unexpected gateway failure for building %r", building_id)
        finally:
            if self._is_current(ctx):
                self._state.loading = False
                self._publish()

    def _persist(self, building_id: str) -> None:
        try:
            self.selection_store.set(building_id)
        except StorageError as e:
            logger.warning("Could not persist building selection %r: %s", building_id, e)

    def _commit_metadata(self, ctx: SelectionContext, metadata: BuildingMetadata) -> None:
        # The previous building's reveal run is frozen where it is.
        self.reveal.cancel()
        self._state.building_id = ctx.building_id
        self._state.building_metadata = metadata
        self._state.reveal_in_progress = False
        self.clock.follow(metadata.timezone, self._on_clock_tick)
        self._publish()

    def _commit_actions(self, ctx: SelectionContext, actions: List[ActionItem]) -> None:
        logger.debug("Revealing %d actions for %s", len(actions), ctx.building_id)
        self.reveal.start(actions)

    # --- Derived sub-fields ---

    def _on_reveal_change(self, run: RevealRun) -> None:
        if run is not self.reveal.current:
            return
        self._state.revealed_actions = list(run.revealed)
        self._state.reveal_in_progress = run.running
        self._state.total_actions = len(run.items)
        self._publish()

    def _on_clock_tick(self, clock_state: ClockState) -> None:
        metadata = self._state.building_metadata
        if metadata is None or metadata.timezone != clock_state.timezone:
            return
        self._state.clock_string = clock_state.current_time_string
        self._publish()
