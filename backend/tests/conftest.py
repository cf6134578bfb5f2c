"""Root conftest - shared test configuration.

Environment is set before any app module is imported: settings are read once
and a missing JWT_SECRET would abort collection.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-key-0123456789abcdef")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_MAX", "100000")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_FORMAT", "text")
