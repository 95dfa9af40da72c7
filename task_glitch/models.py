"""Task entities shared by the store, derivation and presentation layers.

Python attributes are snake_case. The JSON wire format used for storage,
``tasks.json`` and JSON export uses camelCase keys (``timeTaken``,
``createdAt``, ``completedAt``).
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


PRIORITIES = ["High", "Medium", "Low"]
STATUSES = ["Todo", "In Progress", "Done"]
DONE_STATUS = "Done"
DEFAULT_PRIORITY = "Medium"
DEFAULT_STATUS = "Todo"

# Filter sentinel: a predicate set to this value is bypassed.
ALL = "All"

PRIORITY_RANK = {"High": 3, "Medium": 2, "Low": 1}

GRADE_EXCELLENT = "Excellent"
GRADE_GOOD = "Good"
GRADE_NEEDS_IMPROVEMENT = "Needs Improvement"

# attribute name -> wire key
WIRE_KEYS = {
    "id": "id",
    "title": "title",
    "revenue": "revenue",
    "time_taken": "timeTaken",
    "priority": "priority",
    "status": "status",
    "notes": "notes",
    "created_at": "createdAt",
    "completed_at": "completedAt",
    "roi": "roi",
}


@dataclass
class Task:
    id: str
    title: str
    revenue: float
    time_taken: float
    priority: str = DEFAULT_PRIORITY
    status: str = DEFAULT_STATUS
    notes: Optional[str] = None
    created_at: str = ""
    completed_at: Optional[str] = None
    roi: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation (camelCase keys, ``None`` values dropped)."""
        data = asdict(self)
        return {WIRE_KEYS[k]: v for k, v in data.items() if v is not None}


@dataclass
class DerivedTask(Task):
    """A Task whose ``roi`` was recomputed from revenue and time on read."""

    roi: float = 0.0


@dataclass(frozen=True)
class Metrics:
    total_revenue: float = 0.0
    total_time_taken: float = 0.0
    time_efficiency_pct: float = 0.0
    revenue_per_hour: float = 0.0
    average_roi: float = 0.0
    performance_grade: str = GRADE_NEEDS_IMPROVEMENT


EMPTY_METRICS = Metrics()


@dataclass(frozen=True)
class TaskFilters:
    """Current filter bar selection."""

    query: str = ""
    status: str = ALL
    priority: str = ALL
