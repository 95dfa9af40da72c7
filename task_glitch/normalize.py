"""Turn loosely-typed task records into well-formed :class:`Task` objects.

Records come from ``tasks.json``, a remote URL, persisted storage or a JSON
import. Any of them may miss fields or carry junk, so every helper here
coerces instead of raising.
"""
from __future__ import annotations

import math
import uuid
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from task_glitch.models import (
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    DONE_STATUS,
    PRIORITIES,
    STATUSES,
    Task,
)


ONE_DAY = timedelta(days=1)


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO string or epoch milliseconds into an aware UTC datetime.

    Returns ``None`` for anything that cannot be interpreted.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, (int, float)):
        try:
            if not math.isfinite(value):
                return None
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        try:
            ts = pd.to_datetime(raw, errors="coerce", utc=True)
        except (ValueError, TypeError, OverflowError):
            return None
        if ts is None or pd.isna(ts):
            return None
        parsed = ts.to_pydatetime()
    return _as_utc(parsed)


def _as_utc(dt: datetime) -> Optional[datetime]:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except OverflowError:
        # offset pushes the instant past the datetime range
        return None


def to_number(value: Any) -> Optional[float]:
    """Finite float from a number or numeric string, else ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def coerce_revenue(value: Any) -> float:
    number = to_number(value)
    if number is None or number < 0:
        return 0.0
    return number


def coerce_time_taken(value: Any) -> float:
    number = to_number(value)
    if number is None or number <= 0:
        return 1.0
    return number


def coerce_priority(value: Any) -> str:
    return value if value in PRIORITIES else DEFAULT_PRIORITY


def coerce_status(value: Any) -> str:
    return value if value in STATUSES else DEFAULT_STATUS


def pick(record: Mapping, *keys: str) -> Any:
    """First non-``None`` value among ``keys`` (camelCase and snake_case)."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _day_after(dt: datetime) -> datetime:
    """``dt`` plus one day, or ``dt`` itself at the end of the datetime range."""
    try:
        return dt + ONE_DAY
    except OverflowError:
        return dt


def as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    try:
        return str(value)
    except ValueError:
        # ints beyond the interpreter's str() digit limit
        return None


def normalize_task(
    record: Any,
    index: int,
    *,
    now: Optional[datetime] = None,
    seen_ids: Optional[set] = None,
) -> Task:
    """Normalize one record at position ``index`` of its source list."""
    if not isinstance(record, Mapping):
        record = {}
    now = now or utcnow()

    task_id = as_text(pick(record, "id")) or new_id()
    if seen_ids is not None:
        while task_id in seen_ids:
            task_id = new_id()
        seen_ids.add(task_id)

    created = parse_timestamp(pick(record, "createdAt", "created_at"))
    if created is None:
        created = now - (index + 1) * ONE_DAY

    status = coerce_status(pick(record, "status"))
    completed_dt = parse_timestamp(pick(record, "completedAt", "completed_at"))
    if completed_dt is None and status == DONE_STATUS:
        completed_dt = _day_after(created)
    completed = to_iso(completed_dt) if completed_dt is not None else None

    return Task(
        id=task_id,
        title=as_text(pick(record, "title")) or "",
        revenue=coerce_revenue(pick(record, "revenue")),
        time_taken=coerce_time_taken(pick(record, "timeTaken", "time_taken")),
        priority=coerce_priority(pick(record, "priority")),
        status=status,
        notes=as_text(pick(record, "notes")),
        created_at=to_iso(created),
        completed_at=completed,
    )


def normalize_tasks(records: Any, *, now: Optional[datetime] = None) -> List[Task]:
    """Normalize a loaded list of records.

    Anything that is not a list/tuple is treated as empty. Every element of a
    list yields exactly one Task; ids are made unique across the result.
    """
    if not isinstance(records, (list, tuple)):
        return []
    now = now or utcnow()
    seen: set = set()
    return [normalize_task(r, idx, now=now, seen_ids=seen) for idx, r in enumerate(records)]


def records_from(tasks: Iterable[Task]) -> List[Dict[str, Any]]:
    return [t.to_dict() for t in tasks]
