"""Derived per-task and aggregate figures.

Everything here is a pure function of the tasks passed in. The store calls
these on every read instead of caching results, so a metric can never drift
from the task list it describes.
"""
from __future__ import annotations

import math
import sys
from dataclasses import asdict
from typing import Dict, Iterable, List, Sequence

from task_glitch.models import (
    DONE_STATUS,
    EMPTY_METRICS,
    GRADE_EXCELLENT,
    GRADE_GOOD,
    GRADE_NEEDS_IMPROVEMENT,
    PRIORITIES,
    STATUSES,
    DerivedTask,
    Metrics,
    Task,
)


EXCELLENT_ROI_THRESHOLD = 500.0
GOOD_ROI_THRESHOLD = 200.0


def _finite(value, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return number if math.isfinite(number) else default


def calculate_roi(revenue, time_taken) -> float:
    """Revenue earned per hour invested, rounded to cents.

    A non-positive or non-numeric ``time_taken`` is treated as 1 hour, so the
    result is always finite.
    """
    hours = _finite(time_taken, 1.0)
    if hours <= 0:
        hours = 1.0
    roi = _finite(revenue, 0.0) / hours
    # sub-hour times can push a huge revenue past float range
    return round(roi, 2) if math.isfinite(roi) else sys.float_info.max


def with_derived(task: Task) -> DerivedTask:
    data = asdict(task)
    data["roi"] = calculate_roi(task.revenue, task.time_taken)
    return DerivedTask(**data)


def compute_total_revenue(tasks: Sequence[Task]) -> float:
    return float(sum(_finite(t.revenue, 0.0) for t in tasks))


def compute_total_time(tasks: Sequence[Task]) -> float:
    return float(sum(_finite(t.time_taken, 0.0) for t in tasks))


def compute_time_efficiency(tasks: Sequence[Task]) -> float:
    """Share of tasks already Done, as a percentage."""
    if not tasks:
        return 0.0
    done = sum(1 for t in tasks if t.status == DONE_STATUS)
    return done / len(tasks) * 100.0


def compute_revenue_per_hour(tasks: Sequence[Task]) -> float:
    total_time = compute_total_time(tasks)
    if total_time <= 0:
        return 0.0
    return compute_total_revenue(tasks) / total_time


def compute_average_roi(tasks: Sequence[Task]) -> float:
    if not tasks:
        return 0.0
    rois = [calculate_roi(t.revenue, t.time_taken) for t in tasks]
    return sum(rois) / len(rois)


def compute_performance_grade(average_roi: float) -> str:
    if average_roi > EXCELLENT_ROI_THRESHOLD:
        return GRADE_EXCELLENT
    if average_roi >= GOOD_ROI_THRESHOLD:
        return GRADE_GOOD
    return GRADE_NEEDS_IMPROVEMENT


def compute_metrics(tasks: Iterable[Task]) -> Metrics:
    tasks = list(tasks)
    if not tasks:
        return EMPTY_METRICS
    average_roi = compute_average_roi(tasks)
    return Metrics(
        total_revenue=compute_total_revenue(tasks),
        total_time_taken=compute_total_time(tasks),
        time_efficiency_pct=compute_time_efficiency(tasks),
        revenue_per_hour=compute_revenue_per_hour(tasks),
        average_roi=average_roi,
        performance_grade=compute_performance_grade(average_roi),
    )


# ----- chart feeds -----

def revenue_by_priority(tasks: Iterable[Task]) -> Dict[str, float]:
    totals: Dict[str, float] = {p: 0.0 for p in PRIORITIES}
    for t in tasks:
        if t.priority in totals:
            totals[t.priority] += _finite(t.revenue, 0.0)
    return totals


def count_by_status(tasks: Iterable[Task]) -> Dict[str, int]:
    counts: Dict[str, int] = {s: 0 for s in STATUSES}
    for t in tasks:
        if t.status in counts:
            counts[t.status] += 1
    return counts


def derive_all(tasks: Iterable[Task]) -> List[DerivedTask]:
    return [with_derived(t) for t in tasks]
