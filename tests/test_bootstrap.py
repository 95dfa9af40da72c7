from pathlib import Path

import pytest
import requests

from task_glitch.bootstrap import BootstrapLoader, FileTaskSource, HttpTaskSource, source_for
from task_glitch.errors import LoadError
from task_glitch.normalize import normalize_tasks
from task_glitch.storage import STORAGE_KEY, MemoryStorage

from conftest import FIXED_NOW, FailingStorage

DATA_FILE = Path(__file__).resolve().parents[1] / "data" / "tasks.json"


class StaticSource:
    def __init__(self, data):
        self.data = data
        self.calls = 0

    def fetch(self):
        self.calls += 1
        return self.data


class FakeResponse:
    def __init__(self, status_code=200, payload=None, bad_json=False):
        self.status_code = status_code
        self._payload = payload
        self._bad_json = bad_json

    def json(self):
        if self._bad_json:
            raise ValueError("Expecting value")
        return self._payload


def test_persisted_records_win_over_source():
    storage = MemoryStorage({STORAGE_KEY: [{"id": "saved"}]})
    source = StaticSource([{"id": "remote"}])
    records = BootstrapLoader(storage, source).load()
    assert records == [{"id": "saved"}]
    assert source.calls == 0


def test_empty_storage_falls_back_to_source():
    storage = MemoryStorage({STORAGE_KEY: []})
    records = BootstrapLoader(storage, StaticSource([{"id": "remote"}])).load()
    assert records == [{"id": "remote"}]


def test_unreadable_or_malformed_storage_is_ignored():
    assert BootstrapLoader(FailingStorage(), StaticSource([{"id": "r"}])).load() == [{"id": "r"}]
    storage = MemoryStorage({STORAGE_KEY: {"not": "a list"}})
    assert BootstrapLoader(storage, StaticSource([{"id": "r"}])).load() == [{"id": "r"}]


def test_non_list_source_is_empty():
    assert BootstrapLoader(MemoryStorage(), StaticSource({"tasks": []})).load() == []
    assert BootstrapLoader(MemoryStorage(), None).load() == []


def test_file_source(tmp_path):
    missing = FileTaskSource(tmp_path / "nope.json")
    assert missing.fetch() == []

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(LoadError):
        FileTaskSource(bad).fetch()

    good = tmp_path / "tasks.json"
    good.write_text('[{"id": "a", "title": "A"}]', encoding="utf-8")
    assert FileTaskSource(good).fetch() == [{"id": "a", "title": "A"}]


def test_http_source_non_2xx_is_empty(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **kw: FakeResponse(404))
    assert HttpTaskSource("http://example.test/tasks.json").fetch() == []


def test_http_source_ok(monkeypatch):
    seen = {}

    def fake_get(url, headers=None, timeout=None):
        seen.update(url=url, timeout=timeout)
        return FakeResponse(200, [{"id": "x"}])

    monkeypatch.setattr(requests, "get", fake_get)
    assert HttpTaskSource("http://example.test/tasks.json", timeout=3).fetch() == [{"id": "x"}]
    assert seen == {"url": "http://example.test/tasks.json", "timeout": 3}


def test_http_source_failures_raise_load_error(monkeypatch):
    def boom(*a, **kw):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests, "get", boom)
    with pytest.raises(LoadError):
        HttpTaskSource("http://example.test/tasks.json").fetch()

    monkeypatch.setattr(requests, "get", lambda *a, **kw: FakeResponse(200, bad_json=True))
    with pytest.raises(LoadError):
        HttpTaskSource("http://example.test/tasks.json").fetch()


def test_source_for():
    assert isinstance(source_for("https://example.test/t.json"), HttpTaskSource)
    assert isinstance(source_for("data/tasks.json"), FileTaskSource)


def test_bundled_data_file_normalizes_cleanly():
    records = BootstrapLoader(MemoryStorage(), FileTaskSource(DATA_FILE)).load()
    tasks = normalize_tasks(records, now=FIXED_NOW)
    assert len(tasks) == len(records) == 8
    assert len({t.id for t in tasks}) == 8
    assert all(t.time_taken > 0 for t in tasks)
    assert all(t.completed_at for t in tasks if t.status == "Done")
    by_id = {t.id: t for t in tasks}
    assert by_id["t-004"].revenue == 22000
    assert by_id["t-004"].time_taken == 1
    assert by_id["t-006"].time_taken == 3.5
