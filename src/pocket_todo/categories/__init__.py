"""
Category subsystem.

Components:
- category_models.py: Category, slugify(), the default set
- category_store.py: SQLite-backed CRUD + CategoryMirror (slug list / display names)
"""
