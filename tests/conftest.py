# tests/conftest.py
# Shared fakes: virtual clock, Tk-style scheduler, recording ticker, temp database

import itertools

import pytest

from core.timer_engine import Durations
from services.settings_service import AutoStartPolicy
from services.timer_service import TimerService
from storage.db import Database
from storage.repos import AppStateRepo, SessionRepo, TaskRepo, TimerStateStore

T0 = 1_700_000_000_000


class FakeClock:
    def __init__(self, start: int = T0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeScheduler:
    """after()/after_cancel() on the fake clock; jobs run only in advance()."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self._jobs = {}
        self._ids = itertools.count(1)

    def after(self, ms, fn):
        job = f"after#{next(self._ids)}"
        self._jobs[job] = (self.clock.now + int(ms), job, fn)
        return job

    def after_cancel(self, job):
        self._jobs.pop(job, None)

    @property
    def pending(self):
        return len(self._jobs)

    def advance(self, ms: int) -> None:
        target = self.clock.now + ms
        while True:
            due = [j for j in self._jobs.values() if j[0] <= target]
            if not due:
                break
            when, job, fn = min(due, key=lambda j: (j[0], int(j[1].split("#")[1])))
            del self._jobs[job]
            self.clock.now = max(self.clock.now, when)
            fn()
        self.clock.now = target


class FakeTicker:
    def __init__(self):
        self.commands = []
        self.listener = None
        self.closed = False

    def set_listener(self, fn):
        self.listener = fn

    def send(self, command):
        self.commands.append(command)

    def emit(self, event):
        self.listener(event)

    def close(self):
        self.closed = True

    @property
    def types(self):
        return [c.type for c in self.commands]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return FakeScheduler(clock)


@pytest.fixture
def ticker():
    return FakeTicker()


@pytest.fixture
def db(tmp_path):
    database = Database(db_path=str(tmp_path / "test.db"))
    database.init_schema()
    yield database
    database.close()


@pytest.fixture
def state_repo(db):
    return AppStateRepo(db)


@pytest.fixture
def store(state_repo):
    return TimerStateStore(state_repo)


@pytest.fixture
def task_repo(db):
    return TaskRepo(db)


@pytest.fixture
def session_repo(db):
    return SessionRepo(db)


@pytest.fixture
def durations():
    return Durations(focus=1500, short_break=300, long_break=900)


@pytest.fixture
def make_service(store, scheduler, ticker, clock, durations):
    def _make(**kwargs):
        kwargs.setdefault("durations", durations)
        kwargs.setdefault("auto_start", AutoStartPolicy())
        return TimerService(
            store=store,
            scheduler=scheduler,
            ticker=ticker,
            clock=clock,
            **kwargs,
        )

    return _make
