"""Location tracker tests."""

import asyncio

import pytest

from fakes import FakeProvider, coordinates, denied, wait_until
from libs.core.application.location_tracker import LocationTracker


class Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.asyncio
async def test_refresh_stores_latest_fix() -> None:
    fix = coordinates()
    tracker = LocationTracker(FakeProvider(coordinates=fix))

    assert await tracker.refresh() == fix
    assert tracker.latest == fix
    assert tracker.error is None


@pytest.mark.asyncio
async def test_timeout_leaves_location_unavailable() -> None:
    provider = FakeProvider(coordinates=coordinates())
    provider.location_delay = 1.0
    tracker = LocationTracker(provider, timeout=0.01)

    assert await tracker.refresh() is None
    assert tracker.latest is None
    assert tracker.error == "Location request timed out"
    assert tracker.enabled


@pytest.mark.asyncio
async def test_permission_denied_disables_tracking() -> None:
    provider = FakeProvider(coordinates=coordinates())
    provider.location_error = denied("location")
    tracker = LocationTracker(provider, poll_interval=0.001)

    tracker.start()
    await wait_until(lambda: tracker.permission_denied)
    await wait_until(lambda: not tracker.watching)

    assert tracker.enabled is False
    assert tracker.latest is None
    assert await tracker.refresh() is None


@pytest.mark.asyncio
async def test_provider_error_keeps_previous_fix() -> None:
    fix = coordinates()
    provider = FakeProvider(coordinates=fix)
    tracker = LocationTracker(provider)
    await tracker.refresh()

    provider.location_error = RuntimeError("gps glitch")

    assert await tracker.refresh() == fix
    assert tracker.error == "Location error: gps glitch"


@pytest.mark.asyncio
async def test_stale_fix_is_not_reported() -> None:
    clock = Clock()
    tracker = LocationTracker(
        FakeProvider(coordinates=coordinates()),
        max_age=60,
        clock=clock,
    )
    await tracker.refresh()

    clock.now += 61

    assert tracker.latest is None


@pytest.mark.asyncio
async def test_watch_updates_until_disabled() -> None:
    tracker = LocationTracker(
        FakeProvider(coordinates=coordinates()),
        poll_interval=0.001,
    )

    tracker.start()
    await wait_until(lambda: tracker.latest is not None)
    await tracker.set_enabled(False)

    assert not tracker.watching
    assert tracker.latest is None

    await tracker.set_enabled(True)
    assert tracker.watching
    await tracker.stop()


@pytest.mark.asyncio
async def test_repeated_start_stop_always_terminates() -> None:
    tracker = LocationTracker(
        FakeProvider(coordinates=coordinates()),
        poll_interval=0.0,
    )

    for attempt in range(200):
        tracker.start()
        for _ in range(attempt % 5):
            await asyncio.sleep(0)
        await asyncio.wait_for(asyncio.shield(tracker.stop()), timeout=0.5)
        assert not tracker.watching
