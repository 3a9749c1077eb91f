# src/pocket_todo/tasks/task_query.py

"""
Filter + sort pipeline over a task collection.

Pure: takes the full list from TaskStore.get_all(), returns a new list, never
touches storage or mutates the inputs.

Priority ordering is a fixed contract: "asc" puts high-priority tasks FIRST and
"desc" puts them LAST. Tasks with equal priority keep their input order.
"""

from __future__ import annotations

import functools
import locale
import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from .task_models import Priority, Task

ALL_CATEGORIES = "all"


class SortKey(StrEnum):
    DATE_ADDED = "date-added"
    PRIORITY = "priority"
    ALPHABETICAL = "alphabetical"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


def _cmp_date_added(a: Task, b: Task) -> int:
    return (a.date_added > b.date_added) - (a.date_added < b.date_added)


def _cmp_priority_asc(a: Task, b: Task) -> int:
    if a.priority == b.priority:
        return 0
    return -1 if a.priority is Priority.HIGH else 1


def _text_key(text: str) -> tuple[str, str, str]:
    # Letters first, ignoring case and accents; then the active LC_COLLATE; then code points.
    base = "".join(ch for ch in unicodedata.normalize("NFKD", text) if not unicodedata.combining(ch))
    return base.casefold(), locale.strxfrm(text), text


def _cmp_text(a: Task, b: Task) -> int:
    ka, kb = _text_key(a.text), _text_key(b.text)
    return (ka > kb) - (ka < kb)


def _comparator(sort_key: SortKey, order: SortOrder):
    base = {
        SortKey.DATE_ADDED: _cmp_date_added,
        SortKey.PRIORITY: _cmp_priority_asc,
        SortKey.ALPHABETICAL: _cmp_text,
    }[sort_key]
    if order is SortOrder.ASC:
        return base
    return lambda a, b: base(b, a)


def query_tasks(
    tasks: Iterable[Task],
    *,
    category: str = ALL_CATEGORIES,
    sort_key: SortKey | str = SortKey.DATE_ADDED,
    order: SortOrder | str = SortOrder.ASC,
) -> list[Task]:
    """
    Keep tasks in `category` (or all of them for "all"), then sort by `sort_key`/`order`.

    Raises ValueError for an unknown sort key or order.
    """
    key = SortKey(sort_key)
    direction = SortOrder(order)

    if category == ALL_CATEGORIES:
        selected = list(tasks)
    else:
        selected = [t for t in tasks if t.category == category]

    return sorted(selected, key=functools.cmp_to_key(_comparator(key, direction)))


@dataclass(frozen=True, slots=True)
class TaskQuery:
    """The current view settings of a task list (filter + sort)."""

    category: str = ALL_CATEGORIES
    sort_key: SortKey = SortKey.DATE_ADDED
    order: SortOrder = SortOrder.ASC

    def apply(self, tasks: Iterable[Task]) -> list[Task]:
        return query_tasks(tasks, category=self.category, sort_key=self.sort_key, order=self.order)
