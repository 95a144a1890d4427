"""Tests for the Sequential Reveal Engine."""

import asyncio

import pytest

from dashboard_kernel.models.building import ActionItem
from dashboard_kernel.reveal.engine import (
    RevealRun,
    RevealState,
    RevealStateError,
    SequentialRevealEngine,
)
from dashboard_kernel.scheduling.scheduler import ManualScheduler


def _make_actions(count: int, prefix: str = "action") -> list:
    return [
        ActionItem(
            title=f"{prefix} {i}",
            description=f"Do {prefix} {i}",
            impact=f"{i} kWh",
        )
        for i in range(count)
    ]


class TestRevealRun:
    def test_prefix_grows_in_order(self):
        items = _make_actions(3)
        run = RevealRun(1, items)
        run.begin()
        run.append_next()
        run.append_next()
        assert run.revealed == items[:2]
        assert run.index == 2

    def test_cannot_append_before_begin(self):
        run = RevealRun(1, _make_actions(1))
        with pytest.raises(RevealStateError):
            run.append_next()

    def test_cancelled_run_refuses_appends(self):
        run = RevealRun(1, _make_actions(2))
        run.begin()
        run.append_next()
        run.cancel()
        with pytest.raises(RevealStateError):
            run.append_next()
        assert len(run.revealed) == 1

    def test_cannot_exceed_source(self):
        run = RevealRun(1, _make_actions(1))
        run.begin()
        run.append_next()
        with pytest.raises(RevealStateError):
            run.append_next()

    def test_cancel_after_done_keeps_done(self):
        run = RevealRun(1, [])
        run.begin()
        run.complete()
        run.cancel()
        assert run.state == RevealState.DONE


class TestSequentialRevealEngine:
    def test_items_spaced_by_fixed_delay(self):
        """N items: N appends, first at t=0, then one per delay."""
        items = _make_actions(3)

        async def scenario():
            scheduler = ManualScheduler()
            engine = SequentialRevealEngine(scheduler, delay_seconds=10)
            appends = []
            lengths = []

            def on_change(run):
                if not lengths or len(run.revealed) != lengths[-1]:
                    appends.append(scheduler.now())
                lengths.append(len(run.revealed))

            engine.subscribe(on_change)
            run = engine.start(items)
            assert run.revealed == items[:1]

            await scheduler.advance(9)
            assert len(run.revealed) == 1
            await scheduler.advance(1)
            assert len(run.revealed) == 2
            await scheduler.advance(10)
            await engine.wait()
            await scheduler.advance(100)
            return run, appends, lengths

        run, appends, lengths = asyncio.run(scenario())
        assert appends == [0, 10, 20]
        assert run.revealed == items
        assert run.state == RevealState.DONE
        assert lengths == sorted(lengths)
        assert lengths.count(3) == 2  # the last append, then the completion notice
        assert max(lengths) == 3

    def test_completion_clears_running(self):
        async def scenario():
            scheduler = ManualScheduler()
            engine = SequentialRevealEngine(scheduler, delay_seconds=10)
            states = []
            engine.subscribe(lambda run: states.append(run.running))
            engine.start(_make_actions(2))
            await scheduler.advance(10)
            await engine.wait()
            return states

        states = asyncio.run(scenario())
        assert states == [True, True, False]

    def test_empty_list_completes_immediately(self):
        async def scenario():
            scheduler = ManualScheduler()
            engine = SequentialRevealEngine(scheduler, delay_seconds=10)
            states = []
            engine.subscribe(lambda run: states.append((run.running, len(run.revealed))))
            run = engine.start([])
            return run, states, scheduler.pending

        run, states, pending = asyncio.run(scenario())
        assert run.state == RevealState.DONE
        assert states == [(True, 0), (False, 0)]
        assert pending == 0

    def test_single_item_needs_no_timer(self):
        async def scenario():
            scheduler = ManualScheduler()
            engine = SequentialRevealEngine(scheduler, delay_seconds=10)
            run = engine.start(_make_actions(1))
            return run, scheduler.pending

        run, pending = asyncio.run(scenario())
        assert run.state == RevealState.DONE
        assert len(run.revealed) == 1
        assert pending == 0

    def test_new_run_cancels_old_mid_delay(self):
        """A superseded run appends nothing more, however long time runs on."""
        old_items = _make_actions(4, "old")
        new_items = _make_actions(2, "new")

        async def scenario():
            scheduler = ManualScheduler()
            engine = SequentialRevealEngine(scheduler, delay_seconds=10)
            seen = []
            engine.subscribe(lambda run: seen.append((run.run_id, list(run.revealed))))

            old = engine.start(old_items)
            await scheduler.advance(15)
            frozen = list(old.revealed)

            new = engine.start(new_items)
            await scheduler.advance(100)
            await engine.wait()
            return old, frozen, new, seen, scheduler.pending

        old, frozen, new, seen, pending = asyncio.run(scenario())
        assert frozen == old_items[:2]
        assert old.revealed == frozen
        assert old.state == RevealState.CANCELLED
        assert new.revealed == new_items
        assert new.state == RevealState.DONE
        assert pending == 0

        # Once the new run began, every notification belongs to it.
        first_new = next(i for i, (run_id, _) in enumerate(seen) if run_id == new.run_id)
        assert all(run_id == new.run_id for run_id, _ in seen[first_new:])

    def test_cancel_freezes_without_notifying(self):
        async def scenario():
            scheduler = ManualScheduler()
            engine = SequentialRevealEngine(scheduler, delay_seconds=10)
            run = engine.start(_make_actions(3))
            seen = []
            engine.subscribe(lambda r: seen.append(r.state))
            engine.cancel()
            await scheduler.advance(60)
            return run, seen

        run, seen = asyncio.run(scenario())
        assert run.state == RevealState.CANCELLED
        assert len(run.revealed) == 1
        assert seen == []

    def test_aclose_cancels_pending_delay(self):
        async def scenario():
            scheduler = ManualScheduler()
            engine = SequentialRevealEngine(scheduler, delay_seconds=10)
            run = engine.start(_make_actions(3))
            await scheduler.settle()
            assert scheduler.pending == 1
            await engine.aclose()
            return run, scheduler.pending

        run, pending = asyncio.run(scenario())
        assert run.state == RevealState.CANCELLED
        assert pending == 0
