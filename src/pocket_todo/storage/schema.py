# src/pocket_todo/storage/schema.py

"""
Opening the persistent store and keeping its schema current.

The on-disk schema version lives in PRAGMA user_version. Migration steps run in
increasing order inside one write transaction, and every step is idempotent:
- tables/indexes use IF NOT EXISTS,
- added columns are detected with PRAGMA table_info,
- default categories are seeded only when the categories table is created by the step.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

import aiosqlite

from ..categories.category_models import DEFAULT_CATEGORIES
from .errors import StorageInitFailed, StorageUnavailable, TodoStoreError

logger = logging.getLogger(__name__)

CURRENT_VERSION = 2

READONLY = "readonly"
READWRITE = "readwrite"


class OpenStatus(StrEnum):
    OK = "ok"
    UNSUPPORTED = "unsupported"
    FAILED = "failed"


class StoreHandle:
    """
    The single process-wide connection to the store.

    Transactions are serialized with an asyncio.Lock: a readwrite transaction holds
    the lock from its first read to its commit, so two read-modify-write calls on the
    same record never interleave.
    """

    def __init__(self, conn: aiosqlite.Connection, *, name: str, path: Path, version: int) -> None:
        self._conn = conn
        self._lock = asyncio.Lock()
        self.name = name
        self.path = path
        self.version = version
        self.closed = False

    @contextlib.asynccontextmanager
    async def transaction(self, mode: str = READWRITE) -> AsyncIterator[aiosqlite.Connection]:
        if self.closed:
            raise StorageUnavailable(f"Store {self.name} is closed")
        if mode not in (READONLY, READWRITE):
            raise ValueError(f"Unknown transaction mode: {mode!r}")

        async with self._lock:
            await self._conn.execute("BEGIN IMMEDIATE" if mode == READWRITE else "BEGIN")
            try:
                yield self._conn
                await self._conn.commit()
            except BaseException:
                with contextlib.suppress(aiosqlite.Error):
                    await self._conn.rollback()
                raise

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        async with self._lock:
            await self._conn.close()
        logger.info("Store closed name=%s", self.name)


@dataclass(frozen=True, slots=True)
class OpenResult:
    status: OpenStatus
    handle: StoreHandle | None = None
    message: str = ""
    error: TodoStoreError | None = None
    seeded: bool = False

    @property
    def ok(self) -> bool:
        return self.status is OpenStatus.OK and self.handle is not None


# ---- migration steps ----


async def _table_exists(conn: aiosqlite.Connection, table: str) -> bool:
    cur = await conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
        (table,),
    )
    return await cur.fetchone() is not None


async def _columns(conn: aiosqlite.Connection, table: str) -> set[str]:
    cur = await conn.execute(f"PRAGMA table_info({table})")
    return {row["name"] for row in await cur.fetchall()}


async def _migrate_v1(conn: aiosqlite.Connection) -> bool:
    await conn.execute(
        """
        CREATE TABLE IF NOT EXISTS tasks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            text TEXT NOT NULL,
            category TEXT NOT NULL,
            completed INTEGER NOT NULL DEFAULT 0,
            date_added INTEGER NOT NULL
        )
        """
    )
    await conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_category ON tasks(category)")
    await conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_completed ON tasks(completed)")
    await conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_date_added ON tasks(date_added)")
    return False


async def _migrate_v2(conn: aiosqlite.Connection) -> bool:
    """Add task priority and the categories table. Returns True if categories were seeded."""
    await _migrate_v1(conn)

    if "priority" not in await _columns(conn, "tasks"):
        await conn.execute("ALTER TABLE tasks ADD COLUMN priority TEXT NOT NULL DEFAULT 'low'")
        logger.info("Schema migration: added column tasks.priority")
    await conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_priority ON tasks(priority)")

    created = not await _table_exists(conn, "categories")
    await conn.execute(
        """
        CREATE TABLE IF NOT EXISTS categories (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            slug TEXT NOT NULL
        )
        """
    )
    await conn.execute("CREATE UNIQUE INDEX IF NOT EXISTS idx_categories_name ON categories(name)")
    await conn.execute("CREATE UNIQUE INDEX IF NOT EXISTS idx_categories_slug ON categories(slug)")

    if created:
        await conn.executemany(
            "INSERT INTO categories(name, slug) VALUES (?, ?)",
            DEFAULT_CATEGORIES,
        )
        logger.info("Schema migration: seeded %d default categories", len(DEFAULT_CATEGORIES))
    return created


Migration = Callable[[aiosqlite.Connection], Awaitable[bool]]

MIGRATIONS: tuple[tuple[int, Migration], ...] = (
    (1, _migrate_v1),
    (2, _migrate_v2),
)


class SchemaManager:
    """
    Opens <data_dir>/<name>.sqlite3 and upgrades it to the requested version.

    data_dir=None means the host has no place to persist anything; open() then
    reports UNSUPPORTED and the caller runs in ephemeral mode.
    """

    def __init__(self, data_dir: str | Path | None) -> None:
        self._data_dir = Path(data_dir) if data_dir is not None else None

    def path_for(self, name: str) -> Path | None:
        if self._data_dir is None:
            return None
        return self._data_dir / f"{name}.sqlite3"

    async def open(self, name: str, version: int = CURRENT_VERSION) -> OpenResult:
        """Never raises: every failure is reported through the returned OpenResult."""
        path = self.path_for(name)
        if path is None:
            msg = "Persistent storage is not available; tasks will only last for this session."
            logger.warning(msg)
            return OpenResult(
                status=OpenStatus.UNSUPPORTED,
                message=msg,
                error=StorageUnavailable(msg),
            )

        conn: aiosqlite.Connection | None = None
        try:
            if not name or not name.strip():
                raise StorageInitFailed("Store name is required")
            if version < 1:
                raise StorageInitFailed(f"Invalid schema version: {version}")

            path.parent.mkdir(parents=True, exist_ok=True)
            conn = await aiosqlite.connect(str(path), isolation_level=None)
            conn.row_factory = aiosqlite.Row
            with contextlib.suppress(aiosqlite.Error):
                await conn.execute("PRAGMA journal_mode=WAL")

            seeded = await self._upgrade(conn, version)
        except (OSError, aiosqlite.Error, StorageInitFailed) as e:
            if conn is not None:
                with contextlib.suppress(Exception):
                    await conn.close()
            detail = e.message if isinstance(e, StorageInitFailed) else str(e) or type(e).__name__
            msg = f"Failed to open store {path}: {detail}"
            logger.error(msg)
            return OpenResult(
                status=OpenStatus.FAILED,
                message=msg,
                error=StorageInitFailed(msg, context={"path": str(path)}, original_error=e),
            )

        handle = StoreHandle(conn, name=name, path=path, version=version)
        logger.info("Store ready db=%s version=%s seeded=%s", path, version, seeded)
        return OpenResult(
            status=OpenStatus.OK,
            handle=handle,
            message=f"Data is stored locally in {path}.",
            seeded=seeded,
        )

    @staticmethod
    async def _upgrade(conn: aiosqlite.Connection, version: int) -> bool:
        cur = await conn.execute("PRAGMA user_version")
        row = await cur.fetchone()
        current = int(row[0]) if row else 0

        if current > version:
            raise StorageInitFailed(
                f"on-disk schema version {current} is newer than requested {version}"
            )
        if current == version:
            return False

        seeded = False
        await conn.execute("BEGIN IMMEDIATE")
        try:
            for step_version, step in MIGRATIONS:
                if current < step_version <= version:
                    seeded = await step(conn) or seeded
                    logger.info("Schema migration: applied v%d", step_version)
            await conn.execute(f"PRAGMA user_version = {int(version)}")
            await conn.commit()
        except BaseException:
            with contextlib.suppress(aiosqlite.Error):
                await conn.rollback()
            raise
        return seeded
