import pytest

from task_glitch.errors import PersistenceError
from task_glitch.storage import MemoryStorage, SqlStorage


def test_memory_storage_copies_values():
    storage = MemoryStorage()
    value = [{"id": "a"}]
    storage.set("k", value)
    value[0]["id"] = "changed"
    out = storage.get("k")
    assert out == [{"id": "a"}]
    out.append({"id": "b"})
    assert storage.get("k") == [{"id": "a"}]
    assert storage.get("missing") is None


@pytest.fixture
def sql_storage(tmp_path):
    s = SqlStorage(f"sqlite:///{(tmp_path / 'kv.db').as_posix()}")
    yield s
    s.dispose()


def test_sql_round_trip(sql_storage):
    assert sql_storage.get("tasks") is None
    sql_storage.set("tasks", [{"id": "a", "title": "Café"}])
    assert sql_storage.get("tasks") == [{"id": "a", "title": "Café"}]
    sql_storage.set("tasks", [])
    assert sql_storage.get("tasks") == []


def test_sql_rejects_unserializable(sql_storage):
    with pytest.raises(PersistenceError):
        sql_storage.set("tasks", [object()])


def test_sql_survives_reopen(tmp_path):
    url = f"sqlite:///{(tmp_path / 'kv.db').as_posix()}"
    first = SqlStorage(url)
    first.set("tasks", [{"id": "a"}])
    first.dispose()
    second = SqlStorage(url)
    assert second.get("tasks") == [{"id": "a"}]
    second.dispose()
