import itertools
import os
import time
from datetime import datetime, timedelta, timezone

import pytest

from zenith_cli.zenith_api.store import MemoryStore
from zenith_cli.zenith_api.task_operations import TaskService

# run in UTC; DST tests switch zones with ``local_zone``
if hasattr(time, "tzset"):
    os.environ["TZ"] = "UTC"
    time.tzset()


class FakeClock:
    """Settable clock; call it to read the current time."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 15, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock):
    counter = itertools.count(1)
    return MemoryStore(clock=clock, id_factory=lambda: f"id{next(counter):03d}")


@pytest.fixture
def service(store):
    svc = TaskService(store, "user-1")
    svc.create_profile(username="tester")
    return svc


@pytest.fixture
def local_zone():
    """Switch the process-local timezone for one test, e.g. ``local_zone("Europe/Berlin")``."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    saved = os.environ.get("TZ")

    def use(name):
        os.environ["TZ"] = name
        time.tzset()

    yield use
    if saved is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = saved
    time.tzset()
