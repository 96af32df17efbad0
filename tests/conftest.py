"""Shared fixtures: in-memory store, fixed clock, fake scheduler."""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List

import pytest

from jobtrack.config import Settings
from jobtrack.context import TrackerContext
from jobtrack.storage.store import PersistentStore

# A Wednesday, mid-month, midday UTC
FIXED_NOW = datetime(2025, 6, 18, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class FakeHandle:
    def __init__(self, when: float, callback: Callable[..., Any], args: tuple):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """`call_later` compatible scheduler driven by `advance()`."""

    def __init__(self):
        self.time = 0.0
        self.handles: List[FakeHandle] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeHandle:
        handle = FakeHandle(self.time + delay, callback, args)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> List[FakeHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, seconds: float) -> None:
        self.time += seconds
        for handle in sorted(self.pending, key=lambda h: h.when):
            if handle.when <= self.time + 1e-9:
                handle.fired = True
                handle.callback(*handle.args)


def application_data(**overrides: Any) -> Dict[str, Any]:
    """Raw application fields for create()."""
    data: Dict[str, Any] = {
        "position": "Backend Engineer",
        "company": {"id": "c-acme", "name": "Acme", "industry": "Technology"},
        "date_applied": FIXED_NOW - timedelta(days=1),
        "stage": "applied",
    }
    data.update(overrides)
    return data


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def store():
    s = PersistentStore(":memory:")
    assert s.init()
    yield s
    s.teardown()


@pytest.fixture
def ctx(settings, store, clock) -> TrackerContext:
    return TrackerContext(settings=settings, store=store, clock=clock)


@pytest.fixture
def write_counter(store):
    """List of keys written since the fixture was requested."""
    writes: List[str] = []
    store.subscribe(writes.append)
    return writes
