from task_glitch.metrics import derive_all
from task_glitch.ordering import filter_tasks, sort_tasks

from conftest import make_task


def titles(tasks):
    return [t.title for t in tasks]


def test_equal_roi_and_priority_sorted_by_title():
    tasks = [make_task("Beta", roi=10, priority="High"), make_task("Alpha", roi=10, priority="High")]
    assert titles(sort_tasks(tasks)) == ["Alpha", "Beta"]


def test_roi_then_priority():
    tasks = [
        make_task("low-roi", roi=5, priority="High"),
        make_task("high-roi", roi=50, priority="Low"),
        make_task("mid-medium", roi=20, priority="Medium"),
        make_task("mid-high", roi=20, priority="High"),
    ]
    assert titles(sort_tasks(tasks)) == ["high-roi", "mid-high", "mid-medium", "low-roi"]


def test_missing_roi_counts_as_zero():
    tasks = [make_task("negative", roi=-1), make_task("missing", roi=None), make_task("positive", roi=1)]
    assert titles(sort_tasks(tasks)) == ["positive", "missing", "negative"]


def test_unknown_priority_ranks_below_low():
    tasks = [make_task("x", roi=1, priority="Whatever"), make_task("y", roi=1, priority="Low")]
    assert titles(sort_tasks(tasks)) == ["y", "x"]


def test_title_collation_ignores_case_and_accents():
    tasks = [make_task("banana", roi=0), make_task("Fudge", roi=0), make_task("Éclair", roi=0), make_task("apple", roi=0)]
    assert titles(sort_tasks(tasks)) == ["apple", "banana", "Éclair", "Fudge"]


def test_sort_is_stable_for_equal_keys():
    first = make_task("Same", roi=3, id="first")
    second = make_task("Same", roi=3, id="second")
    assert [t.id for t in sort_tasks([first, second])] == ["first", "second"]
    assert [t.id for t in sort_tasks([second, first])] == ["second", "first"]


def test_sort_is_idempotent():
    tasks = derive_all([
        make_task("c", revenue=10, time_taken=1, priority="Low"),
        make_task("a", revenue=10, time_taken=1, priority="High"),
        make_task("b", revenue=90, time_taken=3, priority="Medium"),
    ])
    once = sort_tasks(tasks)
    assert sort_tasks(once) == once


def test_sort_does_not_mutate_input():
    tasks = [make_task("b", roi=1), make_task("a", roi=2)]
    sort_tasks(tasks)
    assert titles(tasks) == ["b", "a"]


def test_filters_are_conjunctive_and_bypassable():
    tasks = [
        make_task("Call Acme", priority="High", status="Todo"),
        make_task("acme renewal", priority="Low", status="Done"),
        make_task("Demo Globex", priority="High", status="Done"),
    ]
    assert titles(filter_tasks(tasks)) == ["Call Acme", "acme renewal", "Demo Globex"]
    assert titles(filter_tasks(tasks, query="ACME")) == ["Call Acme", "acme renewal"]
    assert titles(filter_tasks(tasks, status="Done")) == ["acme renewal", "Demo Globex"]
    assert titles(filter_tasks(tasks, query="acme", status="Done", priority="Low")) == ["acme renewal"]
    assert filter_tasks(tasks, query="acme", priority="Medium") == []
    assert titles(filter_tasks(tasks, query="  ", status="All", priority="All")) == titles(tasks)
