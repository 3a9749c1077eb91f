"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority)
- task_store.py: SQLite-backed CRUD (with a session-only fallback)
- task_query.py: pure filter/sort pipeline used before rendering
"""
