"""ORM Models - SQLAlchemy declarative models.

Invariants:
    - All models inherit from Base (db/base.py)
    - Every model imported here so Base.metadata is complete for Alembic and tests
"""

from app.models.user import User  # noqa: F401
