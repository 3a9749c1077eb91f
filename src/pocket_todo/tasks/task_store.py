# src/pocket_todo/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable

import aiosqlite

from ..core.events import ChangeEvent, ChangeKind, EventHub
from ..storage.errors import TransactionError
from ..storage.schema import READONLY, READWRITE, StoreHandle
from .task_models import Priority, Task, now_ms

logger = logging.getLogger(__name__)

COLLECTION = "tasks"

_SELECT = "SELECT id, text, category, completed, date_added, priority FROM tasks"


class TaskStore:
    """
    CRUD over the tasks table.

    Every call is its own transaction on the shared StoreHandle. Updates are
    read-modify-write: fetch by id, change one field, write the mutable fields back.

    handle=None is ephemeral mode: tasks live in a dict for this session only and
    ids are derived from the current time in milliseconds.
    """

    def __init__(
        self,
        handle: StoreHandle | None,
        *,
        events: EventHub | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._handle = handle
        self._events = events or EventHub()
        self._clock = clock
        self._session: dict[int, Task] = {}
        self._last_session_id = 0

    @property
    def persistent(self) -> bool:
        return self._handle is not None

    # ---- low-level helpers ----

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        return Task(
            id=int(row["id"]),
            text=str(row["text"] or ""),
            category=str(row["category"] or ""),
            completed=bool(row["completed"]),
            date_added=int(row["date_added"] or 0),
            priority=Priority.from_db(row["priority"]),
        )

    @staticmethod
    def _copy(task: Task) -> Task:
        return Task(
            id=task.id,
            text=task.text,
            category=task.category,
            completed=task.completed,
            date_added=task.date_added,
            priority=task.priority,
        )

    def _next_session_id(self) -> int:
        # time-based, but never repeats within a session
        candidate = max(self._clock(), self._last_session_id + 1)
        self._last_session_id = candidate
        return candidate

    def _emit(self, kind: ChangeKind, task_id: int, task: Task | None) -> None:
        self._events.emit(ChangeEvent(collection=COLLECTION, kind=kind, record_id=task_id, record=task))

    # ---- public API ----

    async def count_tasks(self) -> int:
        if self._handle is None:
            return len(self._session)
        try:
            async with self._handle.transaction(READONLY) as conn:
                cur = await conn.execute("SELECT COUNT(*) FROM tasks")
                (n,) = await cur.fetchone()
        except aiosqlite.Error as e:
            logger.exception("Counting tasks failed")
            raise TransactionError("Failed to count tasks", original_error=e) from e
        return int(n)

    async def add(self, text: str, category: str) -> Task | None:
        """
        Create a task. Blank text is ignored (returns None, nothing written).
        """
        text = (text or "").strip()
        if not text:
            logger.debug("Ignoring add with blank text")
            return None

        task = Task(
            id=0,
            text=text,
            category=category,
            completed=False,
            date_added=self._clock(),
            priority=Priority.LOW,
        )

        if self._handle is None:
            task.id = self._next_session_id()
            self._session[task.id] = task
            logger.debug("Task added (session only) id=%s", task.id)
            self._emit(ChangeKind.ADDED, task.id, self._copy(task))
            return self._copy(task)

        try:
            async with self._handle.transaction(READWRITE) as conn:
                cur = await conn.execute(
                    """
                    INSERT INTO tasks(text, category, completed, date_added, priority)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (task.text, task.category, int(task.completed), task.date_added, task.priority.value),
                )
                rowid = cur.lastrowid
        except aiosqlite.Error as e:
            logger.exception("Adding task failed category=%s", category)
            raise TransactionError("Failed to add task", original_error=e) from e

        if rowid is None:
            raise TransactionError("SQLite did not return lastrowid for tasks insert")

        task.id = int(rowid)
        logger.debug("Task added id=%s category=%s", task.id, task.category)
        self._emit(ChangeKind.ADDED, task.id, self._copy(task))
        return task

    async def get(self, task_id: int) -> Task | None:
        if self._handle is None:
            found = self._session.get(int(task_id))
            return self._copy(found) if found else None
        try:
            async with self._handle.transaction(READONLY) as conn:
                cur = await conn.execute(f"{_SELECT} WHERE id = ?", (int(task_id),))
                row = await cur.fetchone()
        except aiosqlite.Error as e:
            logger.exception("Reading task failed id=%s", task_id)
            raise TransactionError("Failed to read task", original_error=e) from e
        return self._row_to_task(row) if row else None

    async def get_all(self) -> list[Task]:
        """Full scan; no ordering is implied (run the result through task_query)."""
        if self._handle is None:
            return [self._copy(t) for t in self._session.values()]
        try:
            async with self._handle.transaction(READONLY) as conn:
                cur = await conn.execute(_SELECT)
                rows = await cur.fetchall()
        except aiosqlite.Error as e:
            logger.exception("Listing tasks failed")
            raise TransactionError("Failed to list tasks", original_error=e) from e
        return [self._row_to_task(r) for r in rows]

    async def _update(self, task_id: int, change: Callable[[Task], None], what: str) -> Task | None:
        task_id = int(task_id)

        if self._handle is None:
            found = self._session.get(task_id)
            if found is None:
                logger.warning("Task %s: no task with id=%s", what, task_id)
                return None
            change(found)
            updated = self._copy(found)
        else:
            try:
                async with self._handle.transaction(READWRITE) as conn:
                    cur = await conn.execute(f"{_SELECT} WHERE id = ?", (task_id,))
                    row = await cur.fetchone()
                    if row is None:
                        logger.warning("Task %s: no task with id=%s", what, task_id)
                        return None
                    updated = self._row_to_task(row)
                    change(updated)
                    await conn.execute(
                        """
                        UPDATE tasks
                        SET text = ?, category = ?, completed = ?, priority = ?
                        WHERE id = ?
                        """,
                        (
                            updated.text,
                            updated.category,
                            int(updated.completed),
                            updated.priority.value,
                            task_id,
                        ),
                    )
            except aiosqlite.Error as e:
                logger.exception("Task %s failed id=%s", what, task_id)
                raise TransactionError(f"Failed to update task ({what})", original_error=e) from e

        logger.debug("Task %s id=%s completed=%s priority=%s", what, task_id, updated.completed, updated.priority)
        self._emit(ChangeKind.UPDATED, task_id, self._copy(updated))
        return updated

    async def set_completed(self, task_id: int, completed: bool) -> Task | None:
        def _set(task: Task) -> None:
            task.completed = bool(completed)

        return await self._update(task_id, _set, "set_completed")

    async def set_priority(self, task_id: int, priority: Priority | str) -> Task | None:
        """Assign `priority` outright. Flipping the current value is toggle_priority()."""
        new = Priority(priority)

        def _set(task: Task) -> None:
            task.priority = new

        return await self._update(task_id, _set, "set_priority")

    async def toggle_priority(self, task_id: int, current: Priority | str | None = None) -> Task | None:
        """
        Flip low<->high.

        With `current`, the new value is computed from the caller's (possibly stale)
        view of the task, the way a rendered list item toggles itself. Without it,
        the stored value is flipped inside the transaction.
        """
        given = Priority(current) if current is not None else None

        def _toggle(task: Task) -> None:
            base = given if given is not None else task.priority
            task.priority = base.toggled()

        return await self._update(task_id, _toggle, "toggle_priority")

    async def delete(self, task_id: int) -> bool:
        """Remove a task. Returns False (no-op) when the id does not exist."""
        task_id = int(task_id)

        if self._handle is None:
            removed = self._session.pop(task_id, None) is not None
        else:
            try:
                async with self._handle.transaction(READWRITE) as conn:
                    cur = await conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
                    removed = cur.rowcount == 1
            except aiosqlite.Error as e:
                logger.exception("Deleting task failed id=%s", task_id)
                raise TransactionError("Failed to delete task", original_error=e) from e

        if not removed:
            logger.warning("Task delete: no task with id=%s", task_id)
            return False

        logger.debug("Task deleted id=%s", task_id)
        self._emit(ChangeKind.DELETED, task_id, None)
        return True
