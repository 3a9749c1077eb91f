# src/pocket_todo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- opens the store once through SchemaManager,
- maps the open result to a storage status (enabled / unsupported / failed),
- wires the stores, the category mirror and the event hub into AppState,
- loads categories so the mirror is ready before the first command.
"""

from __future__ import annotations

import contextlib
import logging

from ..categories.category_store import CategoryMirror, CategoryStore
from ..config import get_settings
from ..core.events import EventHub
from ..core.state import AppState, StorageStatus
from ..storage.errors import TodoStoreError
from ..storage.schema import OpenStatus, SchemaManager
from ..tasks.task_query import SortKey, SortOrder, TaskQuery
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)

_STATUS_BY_OPEN = {
    OpenStatus.OK: StorageStatus.ENABLED,
    OpenStatus.UNSUPPORTED: StorageStatus.UNSUPPORTED,
    OpenStatus.FAILED: StorageStatus.FAILED,
}


def _initial_view(settings) -> TaskQuery:
    try:
        sort_key = SortKey(getattr(settings, "sort_key", SortKey.DATE_ADDED))
    except ValueError:
        logger.warning("Unknown sort key in settings: %r", getattr(settings, "sort_key", None))
        sort_key = SortKey.DATE_ADDED
    try:
        order = SortOrder(getattr(settings, "sort_order", SortOrder.ASC))
    except ValueError:
        logger.warning("Unknown sort order in settings: %r", getattr(settings, "sort_order", None))
        order = SortOrder.ASC
    return TaskQuery(sort_key=sort_key, order=order)


async def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    data_dir = settings.data_dir if getattr(settings, "persist", True) else None
    result = await SchemaManager(data_dir).open(settings.db_name, settings.db_version)

    events = EventHub()
    mirror = CategoryMirror()
    task_store = TaskStore(result.handle, events=events)
    category_store = CategoryStore(result.handle, mirror=mirror, events=events)

    state = AppState(
        settings=settings,
        handle=result.handle,
        storage_status=_STATUS_BY_OPEN[result.status],
        storage_message=result.message,
        task_store=task_store,
        category_store=category_store,
        categories=mirror,
        events=events,
        view=_initial_view(settings),
    )

    try:
        await category_store.load()
    except TodoStoreError:
        # Mirror keeps the defaults; the store itself stays usable.
        logger.exception("Failed to load categories; using defaults.")

    logger.info("State ready storage=%s categories=%d", state.storage_status, len(mirror.slugs))
    return state


async def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    if state.handle is None:
        return
    with contextlib.suppress(Exception):
        await state.handle.close()
