import asyncio

from playstore_agent.workflow.scheduler import RatingCheckScheduler

from conftest import FakeHistory, FakeLookup, make_record


async def test_run_once_uses_a_fresh_listener():
    listeners = []

    class Listener:
        def __init__(self):
            self.states = []
            listeners.append(self)

        async def transition(self, run_id, state, step_id, payload):
            self.states.append(state)

        async def step_output(self, run_id, step_id, output):
            pass

    history = FakeHistory()
    scheduler = RatingCheckScheduler(
        ["AppA"],
        lookup=FakeLookup({"AppA": make_record()}),
        history_store=history,
        listener_factory=Listener,
    )

    result = await scheduler.run_once()
    await scheduler.run_once()

    assert result.ok
    assert len(listeners) == 2
    assert listeners[0].states == ["pending", "fetching", "formatting", "storing", "completed"]
    assert len(history.entries) == 2


async def test_start_runs_immediately_and_stop_cancels():
    lookup = FakeLookup({"AppA": make_record()})
    scheduler = RatingCheckScheduler(["AppA"], lookup=lookup, interval_hours=24)

    await scheduler.start()
    assert scheduler.running
    for _ in range(50):
        if lookup.calls:
            break
        await asyncio.sleep(0.01)
    await scheduler.stop()

    assert lookup.calls == ["AppA"]
    assert not scheduler.running


async def test_no_apps_means_disabled():
    scheduler = RatingCheckScheduler([], lookup=FakeLookup())

    await scheduler.start()

    assert not scheduler.running
