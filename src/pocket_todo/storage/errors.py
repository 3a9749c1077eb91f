# src/pocket_todo/storage/errors.py

"""
Error taxonomy for the storage layer.

Every failure coming out of SQLite/aiosqlite is converted into one of these at the
store boundary, so the front end only ever handles TodoStoreError subclasses.
"""

from __future__ import annotations

from typing import Any


class TodoStoreError(Exception):
    """Base class for all storage/codec errors."""

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_error = original_error

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"error_type": type(self).__name__, "message": self.message}
        if self.context:
            out["context"] = dict(self.context)
        return out


class StorageUnavailable(TodoStoreError):
    """No persistence capability on this host; running in ephemeral mode."""


class StorageInitFailed(TodoStoreError):
    """Persistence exists but the store could not be opened/migrated."""


class DuplicateCategory(TodoStoreError):
    """A category with the same slug (or name) already exists."""

    def __init__(self, slug: str, *, original_error: BaseException | None = None) -> None:
        super().__init__(
            f"Category already exists: {slug}",
            context={"slug": slug},
            original_error=original_error,
        )
        self.slug = slug


class ValidationError(TodoStoreError):
    """Input rejected before touching the store (e.g. blank category name)."""


class TransactionError(TodoStoreError):
    """A CRUD transaction failed and was rolled back."""


class DecodeError(TodoStoreError):
    """A share token could not be decoded into a snapshot."""
