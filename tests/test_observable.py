"""Unit tests for the latest-value Observable.

WHY: The engine publishes every word through Observable; a subscriber
that replays stale values, misses cross-thread updates, or lets an
exception escape into the timing loop would break the display.

HOW: Synchronous subscriber tests, then watch() tests driven with
asyncio.run inside synchronous test functions.
"""

import asyncio
import threading

from rsvp_reader.core.observable import Observable


class TestSubscribe:
    """set() notifies current subscribers synchronously."""

    def test_value_tracks_latest_set(self):
        obs = Observable(0)
        obs.set(3)
        assert obs.value == 3

    def test_subscriber_receives_future_values_only(self):
        obs = Observable("a")
        obs.set("b")
        seen = []
        obs.subscribe(seen.append)
        obs.set("c")
        assert seen == ["c"]

    def test_unsubscribe_stops_notifications(self):
        obs = Observable(0)
        seen = []
        unsubscribe = obs.subscribe(seen.append)
        obs.set(1)
        unsubscribe()
        obs.set(2)
        assert seen == [1]

    def test_unsubscribe_twice_is_harmless(self):
        obs = Observable(0)
        unsubscribe = obs.subscribe(lambda v: None)
        unsubscribe()
        unsubscribe()

    def test_repeated_values_notified_by_default(self):
        obs = Observable(0)
        seen = []
        obs.subscribe(seen.append)
        obs.set(1)
        obs.set(1)
        assert seen == [1, 1]

    def test_distinct_suppresses_equal_values(self):
        obs = Observable(0, distinct=True)
        seen = []
        obs.subscribe(seen.append)
        obs.set(0)
        obs.set(5)
        obs.set(5)
        assert seen == [5]

    def test_failing_subscriber_does_not_block_others(self, caplog):
        obs = Observable(0)
        seen = []

        def broken(value):
            raise RuntimeError("display gone")

        obs.subscribe(broken)
        obs.subscribe(seen.append)
        obs.set(7)
        assert seen == [7]
        assert obs.value == 7
        assert "subscriber" in caplog.text


class TestWatch:
    """watch() yields future values, conflated to the newest."""

    def test_conflates_to_latest(self):
        async def scenario():
            obs = Observable(0)
            obs.set(1)
            received = []

            async def consume():
                async for value in obs.watch():
                    received.append(value)
                    if value == 3:
                        return

            task = asyncio.create_task(consume())
            await asyncio.sleep(0)
            obs.set(2)
            obs.set(3)
            await asyncio.wait_for(task, timeout=1.0)
            return received

        assert asyncio.run(scenario()) == [3]

    def test_wakes_on_set_from_another_thread(self):
        async def scenario():
            obs = Observable(None)

            async def first():
                async for value in obs.watch():
                    return value

            task = asyncio.create_task(first())
            await asyncio.sleep(0)
            setter = threading.Thread(target=obs.set, args=("from thread",))
            setter.start()
            setter.join()
            return await asyncio.wait_for(task, timeout=1.0)

        assert asyncio.run(scenario()) == "from thread"

    def test_unsubscribes_when_cancelled(self):
        async def scenario():
            obs = Observable(0)

            async def consume():
                async for _ in obs.watch():
                    pass

            task = asyncio.create_task(consume())
            await asyncio.sleep(0)
            assert len(obs._subscribers) == 1
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            return len(obs._subscribers)

        assert asyncio.run(scenario()) == 0
