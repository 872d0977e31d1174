"""Tests for CountdownRunner with a short tick interval."""

import asyncio

from aiqo.core.timers import TimerKind, TimerStatus
from aiqo.shell.countdown import CountdownRunner


INTERVAL = 0.01


async def _wait_for(predicate, timeout=1.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(INTERVAL)


class TestCountdownRunner:
    """Tests for CountdownRunner."""

    async def test_runs_to_expiry(self):
        """A countdown ticks down and fires the expiry callback once."""
        expired = []
        runner = CountdownRunner(interval=INTERVAL, on_expire=expired.append)
        runner.start(TimerKind.REST, 3)

        await _wait_for(lambda: expired)
        assert expired == [TimerKind.REST]
        assert runner.state(TimerKind.REST).status is TimerStatus.EXPIRED
        assert runner.state(TimerKind.REST).remaining == 0

    async def test_async_callback_awaited(self):
        """Coroutine callbacks are awaited."""
        fired = asyncio.Event()

        async def on_expire(kind):
            fired.set()

        runner = CountdownRunner(interval=INTERVAL, on_expire=on_expire)
        runner.start(TimerKind.COOK, 1)
        await asyncio.wait_for(fired.wait(), timeout=1.0)

    async def test_restart_replaces_previous(self):
        """Starting the same kind again cancels the old countdown."""
        runner = CountdownRunner(interval=INTERVAL)
        runner.start(TimerKind.REST, 1000)
        runner.start(TimerKind.REST, 500)
        assert runner.state(TimerKind.REST).remaining == 500
        assert len(runner._tasks) == 1
        await runner.shutdown()

    async def test_kinds_are_independent(self):
        """A cook countdown does not stop a rest countdown."""
        runner = CountdownRunner(interval=INTERVAL)
        runner.start(TimerKind.REST, 1000)
        runner.start(TimerKind.COOK, 1000)
        runner.cancel(TimerKind.COOK)
        assert runner.state(TimerKind.REST).status is TimerStatus.RUNNING
        assert runner.state(TimerKind.COOK).status is TimerStatus.IDLE
        await runner.shutdown()

    async def test_cancel_stops_ticking(self):
        """A cancelled countdown stays idle."""
        runner = CountdownRunner(interval=INTERVAL)
        runner.start(TimerKind.REST, 1000)
        runner.cancel(TimerKind.REST)
        await asyncio.sleep(INTERVAL * 3)
        assert runner.state(TimerKind.REST).status is TimerStatus.IDLE

    async def test_shutdown(self):
        """Shutdown cancels every countdown."""
        expired = []
        runner = CountdownRunner(interval=INTERVAL, on_expire=expired.append)
        runner.start(TimerKind.REST, 1000)
        runner.start(TimerKind.COOK, 1000)
        await runner.shutdown()
        assert all(runner.state(kind).status is TimerStatus.IDLE for kind in TimerKind)
        assert expired == []

    async def test_zero_seconds(self):
        """A zero-length countdown expires without a task."""
        runner = CountdownRunner(interval=INTERVAL)
        assert runner.start(TimerKind.REST, 0).status is TimerStatus.EXPIRED
        assert runner._tasks == {}

    async def test_failing_callback_logged(self, caplog):
        """A raising expiry callback is logged and the task ends cleanly."""

        def on_expire(kind):
            raise RuntimeError("speaker unavailable")

        runner = CountdownRunner(interval=INTERVAL, on_expire=on_expire)
        runner.start(TimerKind.REST, 1)
        task = runner._tasks[TimerKind.REST]

        await asyncio.wait_for(task, timeout=1.0)
        assert task.exception() is None
        assert runner.state(TimerKind.REST).status is TimerStatus.EXPIRED
        assert "Expiry callback failed for rest countdown" in caplog.text
