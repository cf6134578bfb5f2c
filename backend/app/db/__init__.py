"""Database Infrastructure - declarative base and standalone session factory.

Invariants:
    - Single async engine per API process (initialized via init_db)
    - All sessions are async (AsyncSession)
"""
