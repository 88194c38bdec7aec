"""Root conftest - shared test configuration."""

import os

# Tests never touch a real calls.db or start the file watcher
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("FALLBACK_DATABASE_URL", "sqlite://")
os.environ.setdefault("WATCH_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")
