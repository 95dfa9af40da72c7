"""In-memory task collection with a one-slot undo buffer.

One ``TaskStore`` is created per browser session and handed to every piece of
UI that needs it. The storage backend is a required constructor argument;
there is no module-level store to fall back on.

Derived views (``derived_sorted``, ``metrics``) are recomputed from the task
list on every access. After each successful mutation the full list is written
to storage; a failing write is logged and surfaced through ``error`` but the
in-memory change stands.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from task_glitch.bootstrap import BootstrapLoader
from task_glitch.errors import LoadError
from task_glitch.metrics import calculate_roi, compute_metrics, derive_all
from task_glitch.models import DONE_STATUS, PRIORITIES, STATUSES, DerivedTask, Metrics, Task
from task_glitch.normalize import (
    coerce_priority,
    coerce_revenue,
    coerce_status,
    coerce_time_taken,
    as_text,
    new_id,
    normalize_tasks,
    parse_timestamp,
    pick,
    records_from,
    to_iso,
    utcnow,
)
from task_glitch.ordering import sort_tasks
from task_glitch.seed import generate_sales_tasks
from task_glitch.storage import STORAGE_KEY, KeyValueStorage


logger = logging.getLogger(__name__)

DEFAULT_SEED_COUNT = 30

# attribute -> accepted patch keys
EDITABLE_FIELDS: Dict[str, tuple] = {
    "title": ("title",),
    "revenue": ("revenue",),
    "time_taken": ("timeTaken", "time_taken"),
    "priority": ("priority",),
    "status": ("status",),
    "notes": ("notes",),
    "completed_at": ("completedAt", "completed_at"),
}


class LoadPhase(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    ERRORED = "errored"


class TaskLoader(Protocol):
    def load(self) -> Any: ...


class TaskStore:
    def __init__(
        self,
        storage: KeyValueStorage,
        loader: Optional[TaskLoader] = None,
        *,
        storage_key: str = STORAGE_KEY,
        seed_count: int = DEFAULT_SEED_COUNT,
        seed_factory: Callable[[int], List[Dict[str, Any]]] = generate_sales_tasks,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if storage is None:
            raise TypeError("TaskStore requires a storage backend")
        self._storage = storage
        self._loader = loader if loader is not None else BootstrapLoader(storage, storage_key=storage_key)
        self._storage_key = storage_key
        self._seed_count = seed_count
        self._seed_factory = seed_factory
        self._clock = clock

        self._tasks: List[Task] = []
        self._last_deleted: Optional[Task] = None
        self.phase = LoadPhase.UNINITIALIZED
        self.error: Optional[str] = None

        self._load_started = False
        self._alive = True

    # ---- read side ----

    @property
    def tasks(self) -> List[Task]:
        return [replace(t) for t in self._tasks]

    @property
    def last_deleted(self) -> Optional[Task]:
        return replace(self._last_deleted) if self._last_deleted else None

    @property
    def loading(self) -> bool:
        return self.phase in (LoadPhase.UNINITIALIZED, LoadPhase.LOADING)

    @property
    def derived_sorted(self) -> List[DerivedTask]:
        return sort_tasks(derive_all(self._tasks))

    @property
    def metrics(self) -> Metrics:
        return compute_metrics(self._tasks)

    def get_task(self, task_id: str) -> Optional[Task]:
        idx = self._index_of(task_id)
        return replace(self._tasks[idx]) if idx is not None else None

    def __len__(self) -> int:
        return len(self._tasks)

    # ---- bootstrap ----

    async def load(self) -> None:
        """Populate the store once; later calls are ignored."""
        if self._load_started:
            logger.debug("Load already attempted (phase=%s); ignoring", self.phase.value)
            return
        self._load_started = True
        self.phase = LoadPhase.LOADING

        try:
            records = await asyncio.to_thread(self._loader.load)
        except LoadError as exc:
            self._fail_load(str(exc))
            return
        except Exception as exc:
            logger.exception("Unexpected error while loading tasks")
            self._fail_load(f"Failed to load tasks: {exc}")
            return

        if not self._alive:
            logger.info("Store closed before load finished; discarding %s records", _count(records))
            return

        try:
            tasks = self._prepare(records)
        except Exception as exc:
            logger.exception("Could not prepare loaded tasks")
            self._fail_load(f"Failed to load tasks: {exc}")
            return

        self._tasks = tasks
        self._last_deleted = None
        self.phase = LoadPhase.READY
        logger.info("Task store ready with %d tasks", len(tasks))

    def _prepare(self, records: Any) -> List[Task]:
        now = self._clock()
        tasks = normalize_tasks(records, now=now)
        if not tasks:
            logger.info("No task data found; generating %d seed tasks", self._seed_count)
            tasks = normalize_tasks(self._seed_factory(self._seed_count), now=now)
        for t in tasks:
            t.roi = calculate_roi(t.revenue, t.time_taken)
        return tasks

    def load_sync(self) -> None:
        asyncio.run(self.load())

    def _fail_load(self, message: str) -> None:
        if not self._alive:
            return
        logger.error("Task load failed: %s", message)
        self._tasks = []
        self._last_deleted = None
        self.error = message
        self.phase = LoadPhase.ERRORED

    def close(self) -> None:
        """Mark the store torn down; an in-flight load result is dropped."""
        self._alive = False

    # ---- mutations ----

    def add_task(self, payload: Mapping[str, Any]) -> Task:
        payload = payload or {}
        now = self._clock()

        task_id = as_text(pick(payload, "id")) or new_id()
        while self._index_of(task_id) is not None:
            task_id = new_id()

        status = coerce_status(pick(payload, "status"))
        completed = parse_timestamp(pick(payload, "completedAt", "completed_at"))
        if completed is None and status == DONE_STATUS:
            completed = now

        revenue = coerce_revenue(pick(payload, "revenue"))
        time_taken = coerce_time_taken(pick(payload, "timeTaken", "time_taken"))
        task = Task(
            id=task_id,
            title=as_text(pick(payload, "title")) or "",
            revenue=revenue,
            time_taken=time_taken,
            priority=coerce_priority(pick(payload, "priority")),
            status=status,
            notes=as_text(pick(payload, "notes")),
            created_at=to_iso(now),
            completed_at=to_iso(completed) if completed else None,
            roi=calculate_roi(revenue, time_taken),
        )
        self._tasks.append(task)
        logger.debug("Task added id=%s roi=%s", task.id, task.roi)
        self._persist()
        return replace(task)

    def update_task(self, task_id: str, patch: Mapping[str, Any]) -> bool:
        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("update_task: no task with id=%s", task_id)
            return False
        task = self._tasks[idx]
        changes = self._coerce_patch(patch or {})

        if changes.get("status") == DONE_STATUS and task.status != DONE_STATUS:
            if not changes.get("completed_at") and not task.completed_at:
                changes["completed_at"] = to_iso(self._clock())

        for attr, value in changes.items():
            setattr(task, attr, value)
        if "revenue" in changes or "time_taken" in changes:
            task.roi = calculate_roi(task.revenue, task.time_taken)

        logger.debug("Task updated id=%s fields=%s", task_id, sorted(changes))
        self._persist()
        return True

    def _coerce_patch(self, patch: Mapping[str, Any]) -> Dict[str, Any]:
        changes: Dict[str, Any] = {}
        for attr, keys in EDITABLE_FIELDS.items():
            key = next((k for k in keys if k in patch), None)
            if key is None:
                continue
            value = patch[key]
            if attr == "title":
                changes[attr] = as_text(value) or ""
            elif attr == "revenue":
                changes[attr] = coerce_revenue(value)
            elif attr == "time_taken":
                changes[attr] = coerce_time_taken(value)
            elif attr == "priority":
                if value in PRIORITIES:
                    changes[attr] = value
            elif attr == "status":
                if value in STATUSES:
                    changes[attr] = value
            elif attr == "notes":
                changes[attr] = as_text(value)
            elif attr == "completed_at":
                if value is None:
                    changes[attr] = None
                    continue
                parsed = parse_timestamp(value)
                if parsed is not None:
                    changes[attr] = to_iso(parsed)
        return changes

    def delete_task(self, task_id: str) -> bool:
        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("delete_task: no task with id=%s", task_id)
            return False
        removed = self._tasks.pop(idx)
        self._last_deleted = replace(removed)
        logger.debug("Task deleted id=%s (buffered for undo)", task_id)
        self._persist()
        return True

    def undo_delete(self) -> Optional[Task]:
        """Restore the buffered task at the front of the list."""
        if self._last_deleted is None:
            return None
        task = self._last_deleted
        if self._index_of(task.id) is not None:
            task.id = new_id()
        self._tasks.insert(0, task)
        self._last_deleted = None
        logger.debug("Task restored id=%s", task.id)
        self._persist()
        return replace(task)

    def clear_last_deleted(self) -> None:
        self._last_deleted = None

    def replace_all(self, records: Any) -> int:
        """Swap in an imported list of records (normalized like a load)."""
        tasks = normalize_tasks(records, now=self._clock())
        for t in tasks:
            t.roi = calculate_roi(t.revenue, t.time_taken)
        self._tasks = tasks
        self._last_deleted = None
        logger.info("Replaced task list with %d imported tasks", len(tasks))
        self._persist()
        return len(tasks)

    def dismiss_error(self) -> None:
        self.error = None

    # ---- internals ----

    def _index_of(self, task_id: Any) -> Optional[int]:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _persist(self) -> None:
        try:
            self._storage.set(self._storage_key, records_from(self._tasks))
        except Exception as exc:
            # Best effort: the in-memory change is kept even if the write fails.
            logger.warning("Could not persist %d tasks: %s", len(self._tasks), exc)
            self.error = f"Could not save tasks: {exc}"


def _count(records: Any) -> int:
    return len(records) if isinstance(records, list) else 0
