import random

from task_glitch.models import PRIORITIES, STATUSES
from task_glitch.normalize import normalize_tasks, parse_timestamp
from task_glitch.seed import generate_sales_tasks

from conftest import FIXED_NOW


def test_seed_records_are_valid():
    records = generate_sales_tasks(30, rng=random.Random(7), now=FIXED_NOW)
    assert len(records) == 30
    assert len({r["id"] for r in records}) == 30
    for r in records:
        assert r["priority"] in PRIORITIES
        assert r["status"] in STATUSES
        assert r["timeTaken"] > 0
        assert r["revenue"] >= 0
        created = parse_timestamp(r["createdAt"])
        assert created < FIXED_NOW
        if r["status"] == "Done":
            completed = parse_timestamp(r["completedAt"])
            assert created <= completed <= FIXED_NOW
        else:
            assert "completedAt" not in r


def test_seed_is_reproducible_with_rng():
    a = generate_sales_tasks(5, rng=random.Random(1), now=FIXED_NOW)
    b = generate_sales_tasks(5, rng=random.Random(1), now=FIXED_NOW)
    strip = lambda rs: [{k: v for k, v in r.items() if k != "id"} for r in rs]
    assert strip(a) == strip(b)


def test_seed_survives_normalization_unchanged():
    records = generate_sales_tasks(10, rng=random.Random(3), now=FIXED_NOW)
    tasks = normalize_tasks(records, now=FIXED_NOW)
    assert [t.id for t in tasks] == [r["id"] for r in records]
    assert [t.time_taken for t in tasks] == [r["timeTaken"] for r in records]


def test_zero_or_negative_count():
    assert generate_sales_tasks(0) == []
    assert generate_sales_tasks(-3) == []
