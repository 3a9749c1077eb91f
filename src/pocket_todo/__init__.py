"""
pocket-todo: a single-user task tracker backed by a local SQLite store.

Subpackages:
- storage/: opening + migrating the store, error taxonomy
- tasks/: Task model, TaskStore, filter/sort pipeline
- categories/: Category model, slug rules, CategoryStore + in-memory mirror
- sharing/: share-link codec
- core/: AppState, change events, ports
- cli/, connectors/: console front end
"""

__version__ = "0.1.0"
