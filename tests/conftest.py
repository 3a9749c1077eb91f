# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest
import pytest_asyncio

from pocket_todo.categories.category_store import CategoryStore
from pocket_todo.cli.bootstrap import create_initial_state, shutdown_state
from pocket_todo.core.events import EventHub
from pocket_todo.core.state import AppState
from pocket_todo.storage.schema import SchemaManager, StoreHandle
from pocket_todo.tasks.task_store import TaskStore

from .fakes import RecordingListener


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the bootstrap and commands.

    A SimpleNamespace rather than the real Settings keeps tests independent of the environment.
    """
    return SimpleNamespace(
        app_name="pocket-todo-test",
        log_level="DEBUG",
        persist=True,
        data_dir=tmp_path / "data",
        db_name="TodoDB",
        db_version=2,
        default_category="default",
        sort_key="date-added",
        sort_order="asc",
        share_base_url="https://todo.example.com/app/",
    )


@pytest_asyncio.fixture()
async def handle(tmp_path: Path):
    result = await SchemaManager(tmp_path).open("TodoDB", 2)
    assert result.ok, result.message
    assert result.handle is not None
    yield result.handle
    await result.handle.close()


@pytest.fixture()
def events() -> EventHub:
    return EventHub()


@pytest.fixture()
def recorder(events: EventHub) -> RecordingListener:
    listener = RecordingListener()
    events.subscribe(listener)
    return listener


@pytest.fixture()
def task_store(handle: StoreHandle, events: EventHub) -> TaskStore:
    return TaskStore(handle, events=events)


@pytest.fixture()
def category_store(handle: StoreHandle, events: EventHub) -> CategoryStore:
    return CategoryStore(handle, events=events)


@pytest_asyncio.fixture()
async def state(settings: SimpleNamespace):
    """
    AppState built by the real bootstrap over a tmp SQLite file.
    """
    app_state: AppState = await create_initial_state(settings=settings)
    yield app_state
    await shutdown_state(app_state)
