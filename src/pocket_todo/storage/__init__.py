"""
Storage plumbing.

Components:
- schema.py: SchemaManager (open + versioned migrations), StoreHandle (shared connection)
- errors.py: error taxonomy raised at the store boundary
"""
