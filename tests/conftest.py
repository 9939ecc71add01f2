"""Shared fixtures: a fake clock and an in-memory store"""
import pytest
from datetime import datetime, timedelta, timezone
from planner.models.task import PlannerItemCreate
from planner.services.persistence import InMemoryPersistence
from planner.services.planner_store import PlannerStore
from planner.utils.monitoring import PersistenceMetrics

# Fixed offset so local-day boundaries do not depend on the machine running the tests
LOCAL_TZ = timezone(timedelta(hours=-5))


class FakeClock:
    """Clock that only moves when told to"""

    def __init__(self, start: datetime):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current

    def set(self, value: datetime) -> None:
        self.current = value


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 15, 10, 0, tzinfo=LOCAL_TZ))


@pytest.fixture
def persistence():
    return InMemoryPersistence()


@pytest.fixture
def metrics():
    return PersistenceMetrics()


@pytest.fixture
def store(clock, persistence, metrics):
    return PlannerStore(persistence=persistence, clock=clock, tz=LOCAL_TZ, metrics=metrics)


@pytest.fixture
def make_item():
    def _make_item(**overrides) -> PlannerItemCreate:
        data = {
            "title": "Test Task",
            "description": "Test Description",
            "category": "today",
            "tags": ["test"],
        }
        data.update(overrides)
        return PlannerItemCreate(**data)
    return _make_item


@pytest.fixture
def track(store, clock):
    """Record a closed time log of `seconds` starting at `start`"""
    def _track(task_id: str, start: datetime, seconds: float):
        clock.set(start)
        log = store.start_time_log(task_id)
        clock.advance(seconds=seconds)
        return store.end_time_log(log.id)
    return _track
