"""Test environment: must be set before app.core.config builds the cached settings."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("OWNER_ID", "1")
os.environ.setdefault("APP_ENV", "dev")
