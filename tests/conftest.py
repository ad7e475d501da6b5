from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from remindme.datamodel import ReminderDraft
from remindme.metrics import RuntimeMetrics
from remindme.storage.reminder_store import ReminderStore

TZ = "Asia/Shanghai"
START = datetime(2026, 3, 10, 12, 0, tzinfo=ZoneInfo(TZ))


class FakeClock:
    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_draft(title: str = "Buy groceries", due_at: datetime = START, **kwargs) -> ReminderDraft:
    return ReminderDraft(title=title, due_at=due_at, **kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def metrics() -> RuntimeMetrics:
    return RuntimeMetrics()


@pytest.fixture
def store(clock: FakeClock, metrics: RuntimeMetrics) -> ReminderStore:
    return ReminderStore(owner_id="tester", timezone=TZ, clock=clock, metrics=metrics)


@pytest.fixture
def due(store: ReminderStore):
    return store.due_events.subscribe()
