# src/pocket_todo/categories/category_store.py

from __future__ import annotations

import logging

import aiosqlite

from ..core.events import ChangeEvent, ChangeKind, EventHub
from ..storage.errors import (
    DuplicateCategory,
    StorageUnavailable,
    TransactionError,
    ValidationError,
)
from ..storage.schema import READONLY, READWRITE, StoreHandle
from .category_models import DEFAULT_CATEGORIES, Category, slugify

logger = logging.getLogger(__name__)

COLLECTION = "categories"


class CategoryMirror:
    """
    In-memory view of the categories the front end offers: slug order + slug->name.

    Rebuilt from the store on load, appended to after each successful add.
    """

    def __init__(self) -> None:
        self.slugs: list[str] = []
        self.names: dict[str, str] = {}
        self.reset_to_defaults()

    def reset_to_defaults(self) -> None:
        self.slugs = [slug for _, slug in DEFAULT_CATEGORIES]
        self.names = {slug: name for name, slug in DEFAULT_CATEGORIES}

    def replace(self, categories: list[Category]) -> None:
        self.slugs = [c.slug for c in categories]
        self.names = {c.slug: c.name for c in categories}

    def append(self, category: Category) -> None:
        if category.slug not in self.names:
            self.slugs.append(category.slug)
        self.names[category.slug] = category.name

    def display_name(self, slug: str) -> str:
        return self.names.get(slug) or slug

    def __contains__(self, slug: object) -> bool:
        return slug in self.names


class CategoryStore:
    """
    CRUD over the categories table.

    handle=None is ephemeral mode: only the default set exists and nothing can be added.
    """

    def __init__(
        self,
        handle: StoreHandle | None,
        *,
        mirror: CategoryMirror | None = None,
        events: EventHub | None = None,
    ) -> None:
        self._handle = handle
        self.mirror = mirror if mirror is not None else CategoryMirror()
        self._events = events or EventHub()

    @staticmethod
    def _row_to_category(row: aiosqlite.Row) -> Category:
        return Category(id=int(row["id"]), name=str(row["name"]), slug=str(row["slug"]))

    def _defaults(self) -> list[Category]:
        return [
            Category(id=i, name=name, slug=slug)
            for i, (name, slug) in enumerate(DEFAULT_CATEGORIES, start=1)
        ]

    async def list_all(self) -> list[Category]:
        if self._handle is None:
            return self._defaults()
        try:
            async with self._handle.transaction(READONLY) as conn:
                cur = await conn.execute("SELECT id, name, slug FROM categories ORDER BY id")
                rows = await cur.fetchall()
        except aiosqlite.Error as e:
            logger.exception("Listing categories failed")
            raise TransactionError("Failed to list categories", original_error=e) from e
        return [self._row_to_category(r) for r in rows]

    async def load(self) -> list[Category]:
        """Read every category and rebuild the mirror from it."""
        categories = await self.list_all()
        if self._handle is None:
            self.mirror.reset_to_defaults()
        else:
            self.mirror.replace(categories)
        logger.debug("Loaded categories: %s", self.mirror.slugs)
        self._events.emit(ChangeEvent(collection=COLLECTION, kind=ChangeKind.LOADED))
        return categories

    async def get_by_slug(self, slug: str) -> Category | None:
        if self._handle is None:
            return next((c for c in self._defaults() if c.slug == slug), None)
        try:
            async with self._handle.transaction(READONLY) as conn:
                cur = await conn.execute(
                    "SELECT id, name, slug FROM categories WHERE slug = ?",
                    (slug,),
                )
                row = await cur.fetchone()
        except aiosqlite.Error as e:
            logger.exception("Category lookup failed slug=%s", slug)
            raise TransactionError("Failed to look up category", original_error=e) from e
        return self._row_to_category(row) if row else None

    async def add(self, name: str) -> Category:
        """
        Insert a new category.

        Raises ValidationError for a blank name, DuplicateCategory when the slug
        (or the exact name) is taken, StorageUnavailable in ephemeral mode.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        if self._handle is None:
            raise StorageUnavailable("Categories cannot be added without persistent storage")

        slug = slugify(name)
        try:
            async with self._handle.transaction(READWRITE) as conn:
                cur = await conn.execute("SELECT 1 FROM categories WHERE slug = ?", (slug,))
                if await cur.fetchone() is not None:
                    raise DuplicateCategory(slug)
                cur = await conn.execute(
                    "INSERT INTO categories(name, slug) VALUES (?, ?)",
                    (name, slug),
                )
                rowid = cur.lastrowid
        except aiosqlite.IntegrityError as e:
            # unique indexes on name/slug
            logger.warning("Category insert hit a unique index name=%r slug=%s", name, slug)
            raise DuplicateCategory(slug, original_error=e) from e
        except aiosqlite.Error as e:
            logger.exception("Adding category failed name=%r", name)
            raise TransactionError("Failed to add category", original_error=e) from e

        if rowid is None:
            raise TransactionError("SQLite did not return lastrowid for categories insert")

        category = Category(id=int(rowid), name=name, slug=slug)
        self.mirror.append(category)
        logger.info("Category added id=%s slug=%s", category.id, slug)
        self._events.emit(
            ChangeEvent(
                collection=COLLECTION,
                kind=ChangeKind.ADDED,
                record_id=category.id,
                record=category,
            )
        )
        return category

    def display_name(self, slug: str) -> str:
        return self.mirror.display_name(slug)
