# src/pocket_todo/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the front end.

Commands and connectors depend on these Protocols rather than on the concrete
SQLite stores, so tests can swap in fakes.
"""

from typing import Protocol

from ..categories.category_models import Category
from ..tasks.task_models import Priority, Task


class TaskRepo(Protocol):
    async def add(self, text: str, category: str) -> Task | None: ...
    async def get(self, task_id: int) -> Task | None: ...
    async def get_all(self) -> list[Task]: ...
    async def set_completed(self, task_id: int, completed: bool) -> Task | None: ...
    async def set_priority(self, task_id: int, priority: Priority) -> Task | None: ...
    async def toggle_priority(
            self,
            task_id: int,
            current: Priority | None = None,
    ) -> Task | None: ...
    async def delete(self, task_id: int) -> bool: ...


class CategoryRepo(Protocol):
    async def load(self) -> list[Category]: ...
    async def list_all(self) -> list[Category]: ...
    async def add(self, name: str) -> Category: ...
    def display_name(self, slug: str) -> str: ...
