"""Tabular and JSON export of an already filtered/sorted task list."""
from __future__ import annotations

import json
from dataclasses import asdict
from typing import Iterable, List

import pandas as pd

from task_glitch.models import Task


EXPORT_COLUMNS = [
    "id", "title", "revenue", "timeTaken", "roi", "priority", "status",
    "notes", "createdAt", "completedAt",
]

_ATTR_TO_COLUMN = {
    "time_taken": "timeTaken",
    "created_at": "createdAt",
    "completed_at": "completedAt",
}


def tasks_to_df(tasks: Iterable[Task]) -> pd.DataFrame:
    rows: List[dict] = []
    for t in tasks:
        row = {_ATTR_TO_COLUMN.get(k, k): v for k, v in asdict(t).items()}
        rows.append(row)
    if not rows:
        return pd.DataFrame(columns=EXPORT_COLUMNS)
    df = pd.DataFrame(rows)
    return df.reindex(columns=EXPORT_COLUMNS)


def to_csv(tasks: Iterable[Task]) -> str:
    return tasks_to_df(tasks).to_csv(index=False)


def to_json(tasks: Iterable[Task]) -> str:
    return json.dumps([t.to_dict() for t in tasks], indent=2, ensure_ascii=False)
