"""Initial population of the task store.

Lookup order:
1. records already persisted in storage (a previous session);
2. a static ``tasks.json`` file or a remote URL;
3. nothing, in which case the store falls back to seed data.

Sources raise :class:`LoadError` only for real failures (network down,
unparseable JSON). A missing file or a non-2xx response simply means
"no data".
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Protocol, Union

import requests

from task_glitch.errors import LoadError
from task_glitch.storage import STORAGE_KEY, KeyValueStorage


logger = logging.getLogger(__name__)


class TaskSource(Protocol):
    def fetch(self) -> Any: ...


class HttpTaskSource:
    def __init__(self, url: str, timeout: float = 10.0) -> None:
        self.url = url
        self.timeout = timeout

    def fetch(self) -> Any:
        try:
            resp = requests.get(self.url, headers={"Accept": "application/json"}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise LoadError(f"Failed to load tasks from {self.url}: {exc}") from exc
        if not (200 <= resp.status_code < 300):
            logger.warning("Task source %s answered HTTP %s; treating as empty", self.url, resp.status_code)
            return []
        try:
            return resp.json()
        except ValueError as exc:
            raise LoadError(f"Tasks at {self.url} are not valid JSON") from exc

    def __repr__(self) -> str:
        return f"HttpTaskSource({self.url!r})"


class FileTaskSource:
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def fetch(self) -> Any:
        if not self.path.exists():
            logger.info("Task file %s not found; treating as empty", self.path)
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except ValueError as exc:
            raise LoadError(f"{self.path.name} is not valid JSON: {exc}") from exc
        except OSError as exc:
            raise LoadError(f"Could not read {self.path}: {exc}") from exc

    def __repr__(self) -> str:
        return f"FileTaskSource({str(self.path)!r})"


def source_for(location: Union[str, Path], timeout: float = 10.0) -> TaskSource:
    loc = str(location).strip()
    if loc.lower().startswith(("http://", "https://")):
        return HttpTaskSource(loc, timeout=timeout)
    return FileTaskSource(Path(loc).expanduser())


class BootstrapLoader:
    """Produce the raw records the store normalizes on first load."""

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        source: Optional[TaskSource] = None,
        storage_key: str = STORAGE_KEY,
    ) -> None:
        self.storage = storage
        self.source = source
        self.storage_key = storage_key

    def _from_storage(self) -> List[Any]:
        if self.storage is None:
            return []
        try:
            stored = self.storage.get(self.storage_key)
        except Exception as exc:
            # Unreadable storage means a first run, not a failed load.
            logger.warning("Could not read persisted tasks (%s); ignoring", exc)
            return []
        if not isinstance(stored, list):
            if stored is not None:
                logger.warning("Persisted tasks under %r are not a list; ignoring", self.storage_key)
            return []
        return stored

    def load(self) -> List[Any]:
        stored = self._from_storage()
        if stored:
            logger.info("Loaded %d persisted task records", len(stored))
            return stored
        if self.source is None:
            return []
        data = self.source.fetch()
        if not isinstance(data, list):
            logger.warning("%r returned %s instead of a list; treating as empty", self.source, type(data).__name__)
            return []
        logger.info("Loaded %d task records from %r", len(data), self.source)
        return data
