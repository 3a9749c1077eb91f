# src/pocket_todo/categories/category_models.py

from __future__ import annotations

import re
from dataclasses import dataclass

_NON_SLUG_RUN = re.compile(r"[^a-z0-9]+")

# (display name, slug) seeded once when the categories table is created.
DEFAULT_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("Default", "default"),
    ("Work", "work"),
    ("Personal", "personal"),
    ("Study", "study"),
    ("Other", "other"),
)


def slugify(name: str) -> str:
    """
    Lowercase, then collapse every run of characters outside [a-z0-9] into one "-".

    Leading/trailing hyphens are kept: "Home Chores!!" -> "home-chores-".
    """
    return _NON_SLUG_RUN.sub("-", name.lower())


@dataclass(frozen=True, slots=True)
class Category:
    id: int
    name: str
    slug: str
