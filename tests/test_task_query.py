# tests/test_task_query.py

from __future__ import annotations

import pytest

from pocket_todo.tasks.task_models import Priority, Task
from pocket_todo.tasks.task_query import SortKey, SortOrder, TaskQuery, query_tasks


def _task(id: int, text: str, category: str, date_added: int, priority: Priority = Priority.LOW) -> Task:
    return Task(id=id, text=text, category=category, completed=False, date_added=date_added, priority=priority)


@pytest.fixture()
def tasks() -> list[Task]:
    return [
        _task(1, "pay rent", "personal", 300, Priority.HIGH),
        _task(2, "draft slides", "work", 100),
        _task(3, "call dentist", "personal", 200),
        _task(4, "email boss", "work", 400, Priority.HIGH),
        _task(5, "buy milk", "default", 150),
    ]


def test_filter_keeps_only_matching_category(tasks: list[Task]) -> None:
    out = query_tasks(tasks, category="work")
    assert {t.category for t in out} == {"work"}
    assert len(out) == sum(1 for t in tasks if t.category == "work")


def test_filter_all_keeps_everything(tasks: list[Task]) -> None:
    assert len(query_tasks(tasks, category="all")) == len(tasks)


def test_filter_unknown_category_is_empty(tasks: list[Task]) -> None:
    assert query_tasks(tasks, category="nope") == []


def test_date_added_ascending_and_descending(tasks: list[Task]) -> None:
    asc = query_tasks(tasks, sort_key=SortKey.DATE_ADDED, order=SortOrder.ASC)
    desc = query_tasks(tasks, sort_key="date-added", order="desc")
    asc_dates = [t.date_added for t in asc]
    desc_dates = [t.date_added for t in desc]
    assert asc_dates == sorted(asc_dates)
    assert desc_dates == sorted(desc_dates, reverse=True)


def test_priority_ascending_puts_high_first(tasks: list[Task]) -> None:
    out = query_tasks(tasks, sort_key=SortKey.PRIORITY, order=SortOrder.ASC)
    assert [t.priority for t in out[:2]] == [Priority.HIGH, Priority.HIGH]
    # equal priorities keep their input order
    assert [t.id for t in out] == [1, 4, 2, 3, 5]


def test_priority_descending_puts_high_last(tasks: list[Task]) -> None:
    out = query_tasks(tasks, sort_key=SortKey.PRIORITY, order=SortOrder.DESC)
    assert [t.priority for t in out[-2:]] == [Priority.HIGH, Priority.HIGH]
    assert [t.id for t in out] == [2, 3, 5, 1, 4]


def test_alphabetical(tasks: list[Task]) -> None:
    asc = query_tasks(tasks, sort_key=SortKey.ALPHABETICAL, order=SortOrder.ASC)
    assert [t.text for t in asc] == ["buy milk", "call dentist", "draft slides", "email boss", "pay rent"]
    desc = query_tasks(tasks, sort_key=SortKey.ALPHABETICAL, order=SortOrder.DESC)
    assert [t.text for t in desc] == list(reversed([t.text for t in asc]))


def test_alphabetical_ignores_case_and_accents_first() -> None:
    mixed = [_task(i, text, "default", i) for i, text in enumerate(["banana", "Zebra", "apple", "Éclair"], start=1)]
    out = query_tasks(mixed, sort_key=SortKey.ALPHABETICAL, order=SortOrder.ASC)
    assert [t.text for t in out] == ["apple", "banana", "Éclair", "Zebra"]


def test_filter_then_sort(tasks: list[Task]) -> None:
    out = query_tasks(tasks, category="personal", sort_key=SortKey.DATE_ADDED, order=SortOrder.ASC)
    assert [t.id for t in out] == [3, 1]


def test_input_is_not_mutated(tasks: list[Task]) -> None:
    original = list(tasks)
    out = query_tasks(tasks, sort_key=SortKey.ALPHABETICAL)
    assert tasks == original
    assert out is not tasks


def test_unknown_sort_key_or_order_raises(tasks: list[Task]) -> None:
    with pytest.raises(ValueError):
        query_tasks(tasks, sort_key="size")
    with pytest.raises(ValueError):
        query_tasks(tasks, order="sideways")


def test_task_query_apply(tasks: list[Task]) -> None:
    view = TaskQuery(category="work", sort_key=SortKey.DATE_ADDED, order=SortOrder.DESC)
    assert [t.id for t in view.apply(tasks)] == [4, 2]
    assert TaskQuery().apply([]) == []
