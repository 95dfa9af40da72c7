from datetime import datetime, timezone

import pytest

from task_glitch.errors import PersistenceError
from task_glitch.models import Task
from task_glitch.storage import MemoryStorage
from task_glitch.store import TaskStore


FIXED_NOW = datetime(2026, 10, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_task(title="Task", revenue=100.0, time_taken=1.0, priority="Medium", status="Todo", roi=None, id=None):
    return Task(
        id=id or f"id-{title}",
        title=title,
        revenue=revenue,
        time_taken=time_taken,
        priority=priority,
        status=status,
        created_at="2026-09-01T00:00:00.000Z",
        roi=roi,
    )


class RecordingStorage(MemoryStorage):
    def __init__(self, initial=None):
        super().__init__(initial)
        self.writes = 0

    def set(self, key, value):
        self.writes += 1
        super().set(key, value)


class FailingStorage:
    def get(self, key):
        raise PersistenceError("disk on fire")

    def set(self, key, value):
        raise PersistenceError("disk on fire")


class FakeLoader:
    def __init__(self, records=None, exc=None):
        self.records = records if records is not None else []
        self.exc = exc
        self.calls = 0

    def load(self):
        self.calls += 1
        if self.exc is not None:
            raise self.exc
        return self.records


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def store(storage):
    s = TaskStore(storage, FakeLoader(), clock=lambda: FIXED_NOW)
    return s
