# tests/test_category_store.py

from __future__ import annotations

import pytest

from pocket_todo.categories.category_models import slugify
from pocket_todo.categories.category_store import CategoryMirror, CategoryStore
from pocket_todo.core.events import ChangeKind
from pocket_todo.storage.errors import DuplicateCategory, StorageUnavailable, ValidationError


@pytest.mark.parametrize(
    ("name", "slug"),
    [
        ("Work", "work"),
        ("Home Chores!!", "home-chores-"),
        ("  Side   project  ", "-side-project-"),
        ("Q3 2024 Goals", "q3-2024-goals"),
        ("Café", "caf-"),
        ("学习", "-"),
    ],
)
def test_slugify(name: str, slug: str) -> None:
    assert slugify(name) == slug


@pytest.mark.asyncio
async def test_add_then_list_contains_one_slug(category_store: CategoryStore) -> None:
    created = await category_store.add("Home Chores!!")
    assert created.id > 0
    assert created.name == "Home Chores!!"
    assert created.slug == "home-chores-"

    categories = await category_store.list_all()
    assert [c.slug for c in categories].count("home-chores-") == 1
    assert len(categories) == 6


@pytest.mark.asyncio
async def test_same_slug_different_case_is_duplicate(category_store: CategoryStore) -> None:
    await category_store.add("Groceries")
    before = await category_store.list_all()

    with pytest.raises(DuplicateCategory) as exc_info:
        await category_store.add("GROCERIES")
    assert exc_info.value.slug == "groceries"

    after = await category_store.list_all()
    assert len(after) == len(before)


@pytest.mark.asyncio
async def test_seeded_work_collides_with_user_work(category_store: CategoryStore) -> None:
    with pytest.raises(DuplicateCategory):
        await category_store.add("Work")
    with pytest.raises(DuplicateCategory):
        await category_store.add("work")


@pytest.mark.asyncio
async def test_different_names_same_slug_are_duplicates(category_store: CategoryStore) -> None:
    await category_store.add("Side Project")
    with pytest.raises(DuplicateCategory):
        await category_store.add("side-project")


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
async def test_blank_name_is_rejected(category_store: CategoryStore, name: str) -> None:
    with pytest.raises(ValidationError):
        await category_store.add(name)
    assert len(await category_store.list_all()) == 5


@pytest.mark.asyncio
async def test_name_is_trimmed(category_store: CategoryStore) -> None:
    created = await category_store.add("  Reading  ")
    assert created.name == "Reading"
    assert created.slug == "reading"


@pytest.mark.asyncio
async def test_mirror_follows_load_and_add(category_store: CategoryStore, recorder) -> None:
    await category_store.load()
    assert category_store.mirror.slugs == ["default", "work", "personal", "study", "other"]

    await category_store.add("Fitness")
    assert category_store.mirror.slugs[-1] == "fitness"
    assert category_store.display_name("fitness") == "Fitness"

    with pytest.raises(DuplicateCategory):
        await category_store.add("fitness")
    assert category_store.mirror.slugs.count("fitness") == 1

    assert recorder.kinds("categories") == [ChangeKind.LOADED, ChangeKind.ADDED]


@pytest.mark.asyncio
async def test_get_by_slug(category_store: CategoryStore) -> None:
    work = await category_store.get_by_slug("work")
    assert work is not None and work.name == "Work"
    assert await category_store.get_by_slug("missing") is None


def test_display_name_falls_back_to_slug() -> None:
    mirror = CategoryMirror()
    assert mirror.display_name("study") == "Study"
    assert mirror.display_name("deleted-category") == "deleted-category"
    assert "study" in mirror


@pytest.mark.asyncio
async def test_ephemeral_mode_has_defaults_only() -> None:
    store = CategoryStore(None)
    categories = await store.list_all()
    assert [c.slug for c in categories] == ["default", "work", "personal", "study", "other"]

    await store.load()
    assert store.mirror.slugs == [c.slug for c in categories]

    with pytest.raises(StorageUnavailable):
        await store.add("Fitness")
    with pytest.raises(ValidationError):
        await store.add("  ")
