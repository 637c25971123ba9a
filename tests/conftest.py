# tests/conftest.py - shared fixtures: manual clock, fake timers, engine
import pytest

from ghost_complete.core.autocompleter import GhostComplete
from ghost_complete.utils.config_manager import ConfigRegistry
from ghost_complete.utils.model_store import MemoryBlobStore


class ManualClock:
    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeTimer:
    """Stands in for threading.Timer; tests fire it by hand."""

    def __init__(self, delay, fn):
        self.delay = delay
        self.fn = fn
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.fired = True
        self.fn()


class FakeTimers:
    def __init__(self):
        self.created = []

    def __call__(self, delay, fn):
        t = FakeTimer(delay, fn)
        self.created.append(t)
        return t

    def live(self):
        return [t for t in self.created if t.started and not (t.cancelled or t.fired)]


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def timers():
    return FakeTimers()


@pytest.fixture
def store():
    return MemoryBlobStore()


@pytest.fixture
def config():
    return ConfigRegistry()


@pytest.fixture
def engine(store, config, clock, timers):
    return GhostComplete(store, config, clock=clock, timer_factory=timers)
