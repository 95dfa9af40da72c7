"""Deterministic ordering and filter predicates for the task table."""
from __future__ import annotations

import math
import unicodedata
from typing import Iterable, List, Optional, Sequence, Tuple, TypeVar

from task_glitch.models import ALL, PRIORITY_RANK, Task


T = TypeVar("T", bound=Task)


def priority_rank(priority: Optional[str]) -> int:
    return PRIORITY_RANK.get(priority or "", 0)


def collation_key(text: Optional[str]) -> Tuple[str, str]:
    """Locale-style key: accents stripped and case folded, raw text breaks ties."""
    raw = text or ""
    decomposed = unicodedata.normalize("NFKD", raw)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), raw


def _roi_value(task: Task) -> float:
    roi = task.roi
    if roi is None:
        return 0.0
    try:
        value = float(roi)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def sort_key(task: Task):
    return (-_roi_value(task), -priority_rank(task.priority), collation_key(task.title))


def sort_tasks(tasks: Iterable[T]) -> List[T]:
    """ROI desc, then priority desc, then title asc.

    ``sorted`` is stable, so tasks equal on all three keys keep their input
    order.
    """
    return sorted(tasks, key=sort_key)


def matches_query(task: Task, query: str) -> bool:
    if not query:
        return True
    return query.casefold() in (task.title or "").casefold()


def matches_status(task: Task, status: str) -> bool:
    return status == ALL or task.status == status


def matches_priority(task: Task, priority: str) -> bool:
    return priority == ALL or task.priority == priority


def filter_tasks(
    tasks: Sequence[T],
    query: str = "",
    status: str = ALL,
    priority: str = ALL,
) -> List[T]:
    query = (query or "").strip()
    return [
        t for t in tasks
        if matches_query(t, query) and matches_status(t, status) and matches_priority(t, priority)
    ]
