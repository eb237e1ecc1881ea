"""Shared fixtures for the Stitchwise test suite."""

from datetime import datetime, timedelta, timezone

import pytest

from stitchwise.schemas import LearningPath
from stitchwise.tracker import (
    InMemoryProgressStore,
    MasteryTracker,
    SQLiteProgressStore,
    StaticPathConfig,
    fixed_jitter,
)

START = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


ADDITION = LearningPath(
    path_id="addition",
    content_ids=["add-01", "add-02", "add-03", "shared"],
    weight=2.0,
)
DOUBLING = LearningPath(
    path_id="doubling",
    content_ids=["dbl-01", "shared"],
    weight=1.0,
)
EXPECTED_TIMES_MS = {
    "add-01": 30000,
    "add-02": 30000,
    "add-03": 45000,
    "shared": 20000,
    # no expected time for dbl-01
}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def paths():
    return StaticPathConfig([ADDITION, DOUBLING], EXPECTED_TIMES_MS)


@pytest.fixture
def store():
    return InMemoryProgressStore(users=["alice", "bob"])


@pytest.fixture
def tracker(store, paths, clock):
    return MasteryTracker(store, paths, jitter=fixed_jitter(1.0), clock=clock)


@pytest.fixture
def sqlite_store(tmp_path):
    return SQLiteProgressStore(tmp_path / "progress.db")


@pytest.fixture
def sqlite_tracker(sqlite_store, paths, clock):
    sqlite_store.register_user("alice")
    return MasteryTracker(sqlite_store, paths, jitter=fixed_jitter(1.0), clock=clock)


def perfect(content_id="add-01", path_id="addition", **overrides):
    """A fully correct session completed exactly in the expected time."""
    data = {
        "path_id": path_id,
        "content_id": content_id,
        "correct_count": 10,
        "total_count": 10,
        "completion_time_ms": EXPECTED_TIMES_MS.get(content_id, 30000),
    }
    data.update(overrides)
    return data


@pytest.fixture(params=["memory", "sqlite"])
def any_store(request, tmp_path):
    """Each storage implementation in turn, with alice registered."""
    if request.param == "memory":
        store = InMemoryProgressStore()
    else:
        store = SQLiteProgressStore(tmp_path / "progress.db")
    store.register_user("alice")
    return store
