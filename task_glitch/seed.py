"""Synthetic sales tasks used when no real data is available."""
from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from task_glitch.models import DONE_STATUS, PRIORITIES, STATUSES
from task_glitch.normalize import new_id, to_iso, utcnow


SAMPLE_TITLES = [
    "Follow up with Acme Corp", "Demo for Globex", "Renewal call: Initech",
    "Prepare Q3 proposal", "Cold outreach batch", "Negotiate Umbrella contract",
    "Upsell analytics add-on", "Discovery call: Hooli", "Update CRM pipeline",
    "Send pricing to Stark Ltd", "Onboard Wayne Enterprises", "Trade show leads",
    "Partner webinar prep", "Quarterly business review", "Close Soylent deal",
    "Reactivate churned accounts", "Referral program push", "RFP response: Vandelay",
    "Contract redlines", "Expansion call: Massive Dynamic",
]

NOTES_POOL = [
    None, None, "Waiting on legal", "Champion is the CFO", "Needs a discount approval",
    "Send recap email", "Budget confirmed",
]


def generate_sales_tasks(
    count: int = 30,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Return ``count`` task records in wire format.

    Every record is valid as-is: known priority and status, positive time,
    and Done records carry a ``completedAt`` after ``createdAt``.
    """
    rng = rng or random.Random()
    now = now or utcnow()
    records: List[Dict[str, Any]] = []
    for i in range(max(0, int(count))):
        created = now - timedelta(days=rng.randint(1, 60), hours=rng.randint(0, 23))
        status = rng.choices(STATUSES, weights=[4, 3, 3])[0]
        record: Dict[str, Any] = {
            "id": new_id(),
            "title": f"{SAMPLE_TITLES[i % len(SAMPLE_TITLES)]} #{i + 1}",
            "revenue": float(rng.randrange(0, 50_000, 250)),
            "timeTaken": round(rng.uniform(0.5, 40.0), 1),
            "priority": rng.choices(PRIORITIES, weights=[3, 5, 2])[0],
            "status": status,
            "createdAt": to_iso(created),
        }
        notes = rng.choice(NOTES_POOL)
        if notes:
            record["notes"] = notes
        if status == DONE_STATUS:
            completed = min(created + timedelta(days=rng.randint(1, 10)), now)
            record["completedAt"] = to_iso(completed)
        records.append(record)
    return records
