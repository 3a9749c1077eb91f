# src/pocket_todo/tasks/task_models.py

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import StrEnum


class Priority(StrEnum):
    LOW = "low"
    HIGH = "high"

    @classmethod
    def from_db(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.LOW
        try:
            return cls(raw)
        except ValueError:
            return cls.LOW

    def toggled(self) -> Priority:
        return Priority.LOW if self is Priority.HIGH else Priority.HIGH


def now_ms() -> int:
    """Milliseconds since epoch (the unit date_added is stored in)."""
    return int(time.time() * 1000)


@dataclass(slots=True)
class Task:
    id: int
    text: str
    category: str
    completed: bool
    date_added: int  # ms since epoch, immutable after insert
    priority: Priority = Priority.LOW
