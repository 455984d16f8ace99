"""Root conftest - shared test configuration."""

import os

# Never talk to a real database or mail server from tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")
os.environ.setdefault("REPORT_TIMEZONE", "Europe/Istanbul")
