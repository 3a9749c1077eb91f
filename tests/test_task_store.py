# tests/test_task_store.py

from __future__ import annotations

import asyncio

import pytest

from pocket_todo.core.events import ChangeKind
from pocket_todo.storage.errors import TransactionError
from pocket_todo.tasks.task_models import Priority
from pocket_todo.tasks.task_store import TaskStore

from .fakes import FakeClock


@pytest.mark.asyncio
async def test_add_get_and_defaults(task_store: TaskStore) -> None:
    task = await task_store.add("  Buy milk  ", "work")
    assert task is not None
    assert task.id > 0
    assert task.text == "Buy milk"
    assert task.category == "work"
    assert task.completed is False
    assert task.priority is Priority.LOW
    assert task.date_added > 1_600_000_000_000

    stored = await task_store.get(task.id)
    assert stored == task


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   ", "\n"])
async def test_blank_add_is_noop(task_store: TaskStore, recorder, text: str) -> None:
    before = len(await task_store.get_all())
    assert await task_store.add(text, "work") is None
    assert len(await task_store.get_all()) == before
    assert recorder.kinds("tasks") == []


@pytest.mark.asyncio
async def test_ids_are_increasing_and_never_reused(task_store: TaskStore) -> None:
    a = await task_store.add("a", "default")
    b = await task_store.add("b", "default")
    assert a is not None and b is not None
    assert b.id > a.id

    assert await task_store.delete(b.id) is True
    c = await task_store.add("c", "default")
    assert c is not None
    assert c.id > b.id


@pytest.mark.asyncio
async def test_set_completed_round_trip(task_store: TaskStore) -> None:
    task = await task_store.add("Write report", "work")
    assert task is not None

    done = await task_store.set_completed(task.id, True)
    assert done is not None and done.completed is True
    assert (await task_store.get(task.id)).completed is True

    undone = await task_store.set_completed(task.id, False)
    assert undone is not None and undone.completed is False
    # date_added never changes on update
    assert undone.date_added == task.date_added


@pytest.mark.asyncio
async def test_toggle_priority_scenario(task_store: TaskStore) -> None:
    task = await task_store.add("Buy milk", "work")
    assert task is not None

    first = await task_store.toggle_priority(task.id, Priority.LOW)
    assert first is not None and first.priority is Priority.HIGH

    second = await task_store.toggle_priority(task.id)
    assert second is not None and second.priority is Priority.LOW
    assert (await task_store.get(task.id)).priority is Priority.LOW


@pytest.mark.asyncio
async def test_toggle_with_stale_view_uses_callers_value(task_store: TaskStore) -> None:
    task = await task_store.add("Stale", "work")
    assert task is not None
    await task_store.set_priority(task.id, Priority.HIGH)

    # the caller still believes the task is low
    result = await task_store.toggle_priority(task.id, "low")
    assert result is not None and result.priority is Priority.HIGH


@pytest.mark.asyncio
async def test_set_priority_assigns_rather_than_flips(task_store: TaskStore) -> None:
    task = await task_store.add("Fixed", "work")
    assert task is not None

    for _ in range(2):
        result = await task_store.set_priority(task.id, "high")
        assert result is not None and result.priority is Priority.HIGH
    assert (await task_store.get(task.id)).priority is Priority.HIGH


@pytest.mark.asyncio
async def test_concurrent_toggles_do_not_lose_updates(task_store: TaskStore) -> None:
    task = await task_store.add("Busy", "work")
    assert task is not None

    await asyncio.gather(
        task_store.toggle_priority(task.id),
        task_store.set_completed(task.id, True),
    )

    stored = await task_store.get(task.id)
    assert stored is not None
    assert stored.priority is Priority.HIGH
    assert stored.completed is True


@pytest.mark.asyncio
async def test_updates_on_missing_id_are_noops(task_store: TaskStore, recorder) -> None:
    assert await task_store.set_completed(9999, True) is None
    assert await task_store.set_priority(9999, Priority.HIGH) is None
    assert await task_store.toggle_priority(9999) is None
    assert await task_store.delete(9999) is False
    assert recorder.kinds("tasks") == []


@pytest.mark.asyncio
async def test_events_follow_writes(task_store: TaskStore, recorder) -> None:
    task = await task_store.add("Evented", "study")
    assert task is not None
    await task_store.set_completed(task.id, True)
    await task_store.delete(task.id)

    assert recorder.kinds("tasks") == [ChangeKind.ADDED, ChangeKind.UPDATED, ChangeKind.DELETED]
    assert recorder.events[0].record_id == task.id
    assert await task_store.get_all() == []


@pytest.mark.asyncio
async def test_orphaned_category_is_kept(task_store: TaskStore) -> None:
    task = await task_store.add("No such category", "gone")
    assert task is not None
    assert (await task_store.get(task.id)).category == "gone"


@pytest.mark.asyncio
async def test_engine_failure_becomes_transaction_error(task_store: TaskStore, handle) -> None:
    async with handle.transaction() as conn:
        await conn.execute("DROP TABLE tasks")

    with pytest.raises(TransactionError) as exc_info:
        await task_store.add("anything", "work")
    assert exc_info.value.original_error is not None

    with pytest.raises(TransactionError):
        await task_store.get_all()


@pytest.mark.asyncio
async def test_invalid_priority_is_rejected(task_store: TaskStore) -> None:
    task = await task_store.add("x", "work")
    assert task is not None
    with pytest.raises(ValueError):
        await task_store.set_priority(task.id, "urgent")


@pytest.mark.asyncio
async def test_ephemeral_mode_keeps_session_tasks() -> None:
    clock = FakeClock(start=1_700_000_000_000, step=0)
    store = TaskStore(None, clock=clock)
    assert store.persistent is False

    a = await store.add("first", "work")
    b = await store.add("second", "work")
    assert a is not None and b is not None
    # same millisecond -> still unique, still increasing
    assert a.id == 1_700_000_000_000
    assert b.id == a.id + 1

    await store.set_completed(a.id, True)
    await store.toggle_priority(b.id)
    tasks = {t.id: t for t in await store.get_all()}
    assert tasks[a.id].completed is True
    assert tasks[b.id].priority is Priority.HIGH
    assert await store.count_tasks() == 2

    assert await store.delete(a.id) is True
    assert [t.id for t in await store.get_all()] == [b.id]
    assert await store.add("   ", "work") is None


@pytest.mark.asyncio
async def test_returned_tasks_are_copies(task_store: TaskStore) -> None:
    task = await task_store.add("Copy me", "work")
    assert task is not None
    listed = await task_store.get_all()
    listed[0].text = "mutated"
    assert (await task_store.get(task.id)).text == "Copy me"
