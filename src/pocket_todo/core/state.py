# src/pocket_todo/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from ..categories.category_store import CategoryMirror
from ..storage.schema import StoreHandle
from ..tasks.task_query import TaskQuery
from .events import EventHub
from .ports import CategoryRepo, TaskRepo


class StorageStatus(StrEnum):
    ENABLED = "enabled"
    UNSUPPORTED = "unsupported"
    FAILED = "failed"


@dataclass
class AppState:
    """
    Everything that lives for the whole session, created once by the bootstrap
    and passed explicitly to commands and connectors.
    """

    settings: object

    handle: StoreHandle | None
    storage_status: StorageStatus
    storage_message: str

    task_store: TaskRepo
    category_store: CategoryRepo
    categories: CategoryMirror
    events: EventHub

    view: TaskQuery = field(default_factory=TaskQuery)

    @property
    def persistent(self) -> bool:
        return self.handle is not None
