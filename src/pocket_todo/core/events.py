# src/pocket_todo/core/events.py

"""
Change notifications from the stores.

Stores never touch the front end. After every committed write they emit a
ChangeEvent; the front end subscribes and re-queries through task_query.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class ChangeKind(StrEnum):
    LOADED = "loaded"
    ADDED = "added"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    collection: str  # "tasks" | "categories"
    kind: ChangeKind
    record_id: int | None = None
    record: Any = None


ChangeListener = Callable[[ChangeEvent], None]


class EventHub:
    """Synchronous fan-out; a failing listener is logged and skipped."""

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def emit(self, event: ChangeEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Change listener failed for %s/%s", event.collection, event.kind)
