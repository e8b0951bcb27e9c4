import asyncio
import random
import threading

import pytest

from patientchat.scheduler import AsyncioScheduler, ManualScheduler, ReplyDelay, ScheduledTask, ThreadScheduler


class TestScheduledTask:
    def test_runs_once(self):
        calls = []
        task = ScheduledTask(lambda: calls.append(1))
        task.run()
        task.run()
        assert calls == [1]
        assert task.done

    def test_cancel_prevents_run(self):
        calls = []
        task = ScheduledTask(lambda: calls.append(1))
        task.cancel()
        task.run()
        assert calls == []
        assert task.cancelled


class TestManualScheduler:
    def test_fires_only_when_due(self):
        s = ManualScheduler()
        calls = []
        s.schedule(1.5, lambda: calls.append("a"))
        assert s.advance(1.0) == 0
        assert calls == []
        assert s.next_due_in() == pytest.approx(0.5)
        assert s.advance(0.5) == 1
        assert calls == ["a"]
        assert s.next_due_in() is None

    def test_runs_in_due_order(self):
        s = ManualScheduler()
        calls = []
        s.schedule(2.0, lambda: calls.append("late"))
        s.schedule(1.0, lambda: calls.append("early"))
        s.advance(5.0)
        assert calls == ["early", "late"]

    def test_external_clock(self):
        now = [10.0]
        s = ManualScheduler(clock=lambda: now[0])
        calls = []
        s.schedule(1.0, lambda: calls.append(1))
        assert s.run_due() == 0
        now[0] = 11.0
        assert s.run_due() == 1
        with pytest.raises(RuntimeError):
            s.advance(1.0)

    def test_cancelled_tasks_drop_out(self):
        s = ManualScheduler()
        task = s.schedule(1.0, lambda: None)
        task.cancel()
        assert s.pending == []
        assert s.run_all() == 0


class TestReplyDelay:
    def test_within_window(self):
        delay = ReplyDelay()
        rng = random.Random(0)
        for _ in range(50):
            assert 1.2 <= delay.sample(rng) <= 2.0

    def test_none(self):
        assert ReplyDelay.none().sample(random.Random(1)) == 0.0


def test_thread_scheduler_fires():
    fired = threading.Event()
    ThreadScheduler().schedule(0.01, fired.set)
    assert fired.wait(2.0)


def test_thread_scheduler_cancel():
    fired = threading.Event()
    task = ThreadScheduler().schedule(0.2, fired.set)
    task.cancel()
    assert not fired.wait(0.4)


def test_asyncio_scheduler_fires_after_submission():
    async def scenario():
        order = []
        AsyncioScheduler().schedule(0.01, lambda: order.append("delivered"))
        order.append("submitted")
        await asyncio.sleep(0.05)
        return order

    assert asyncio.run(scenario()) == ["submitted", "delivered"]
