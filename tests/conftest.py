"""Shared pytest configuration and fixtures."""

import os

# Must be set before the application modules load their configuration
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from tests.fixtures import *  # noqa: E402,F401,F403
