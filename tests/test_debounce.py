"""Tests for the debounced remote-save task."""
import asyncio

import pytest

from family_trip.services.debounce import DebouncedTask


class Counter:
    def __init__(self):
        self.calls = 0

    async def __call__(self):
        self.calls += 1


class SlowSave:
    """Action that takes a while and records how many copies overlap."""

    def __init__(self, duration: float):
        self.duration = duration
        self.calls = 0
        self.active = 0
        self.peak = 0

    async def __call__(self):
        self.calls += 1
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.duration)
        finally:
            self.active -= 1


class TestDebouncedTask:
    """Test the quiet-period scheduling."""

    @pytest.mark.asyncio
    async def test_burst_runs_once(self):
        """Test that a burst of schedules runs the action once."""
        counter = Counter()
        task = DebouncedTask(counter, delay=0.05)

        for _ in range(5):
            task.schedule()
            await asyncio.sleep(0.01)
        await asyncio.sleep(0.15)

        assert counter.calls == 1
        assert not task.pending
        assert not task.running

    @pytest.mark.asyncio
    async def test_cancel(self):
        """Test that a cancelled run never happens."""
        counter = Counter()
        task = DebouncedTask(counter, delay=0.05)

        task.schedule()
        task.cancel()
        await asyncio.sleep(0.1)

        assert counter.calls == 0

    @pytest.mark.asyncio
    async def test_flush_runs_now(self):
        """Test that flush runs a waiting action without the delay."""
        counter = Counter()
        task = DebouncedTask(counter, delay=60)

        task.schedule()
        await task.flush()

        assert counter.calls == 1
        assert not task.pending

    @pytest.mark.asyncio
    async def test_flush_without_pending(self):
        """Test that flush with nothing scheduled does nothing."""
        counter = Counter()
        await DebouncedTask(counter, delay=0.01).flush()
        assert counter.calls == 0

    def test_schedule_needs_running_loop(self):
        """Test that scheduling outside an event loop raises."""
        with pytest.raises(RuntimeError):
            DebouncedTask(Counter(), delay=0.01).schedule()


class TestOneRunAtATime:
    """Test that runs never overlap."""

    @pytest.mark.asyncio
    async def test_schedule_during_run_queues_behind_it(self):
        """Test that a schedule while a run is in flight waits for it to finish."""
        save = SlowSave(duration=0.1)
        task = DebouncedTask(save, delay=0.01)

        task.schedule()
        await asyncio.sleep(0.05)
        assert task.running
        task.schedule()
        await asyncio.sleep(0.3)

        assert save.calls == 2
        assert save.peak == 1
        assert not task.running

    @pytest.mark.asyncio
    async def test_flush_waits_for_run_in_flight(self):
        """Test that flush returns only after the running action is done."""
        save = SlowSave(duration=0.1)
        task = DebouncedTask(save, delay=0.01)

        task.schedule()
        await asyncio.sleep(0.05)
        await task.flush()

        assert save.calls == 1
        assert save.active == 0

    @pytest.mark.asyncio
    async def test_flush_runs_waiting_after_run_in_flight(self):
        """Test that flush finishes the running action, then runs the waiting one."""
        save = SlowSave(duration=0.1)
        task = DebouncedTask(save, delay=0.01)

        task.schedule()
        await asyncio.sleep(0.05)
        task.schedule()
        await task.flush()

        assert save.calls == 2
        assert save.peak == 1
        assert save.active == 0
        assert not task.pending

    @pytest.mark.asyncio
    async def test_cancel_leaves_run_in_flight(self):
        """Test that cancel drops the waiting run but lets the running one finish."""
        save = SlowSave(duration=0.05)
        task = DebouncedTask(save, delay=0.01)

        task.schedule()
        await asyncio.sleep(0.03)
        task.cancel()
        await task.join()

        assert save.calls == 1
        assert save.active == 0
