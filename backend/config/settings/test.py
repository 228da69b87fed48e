"""
Test settings.

In-memory SQLite, in-process relay backend and fast, deterministic tokens.
"""

from apps.core.logging import configure_logging

from .base import *  # noqa: F403

DEBUG = False
ALLOWED_HOSTS = ["testserver", "localhost"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

JWT_SECRET = "test-jwt-secret-with-enough-bytes-for-hs256"
JWT_ALGORITHM = "HS256"
JWT_ACCESS_TOKEN_TTL_SECONDS = 3600

REALTIME_BACKEND = "memory"

LIST_DEFAULT_LIMIT = 50
LIST_MAX_LIMIT = 100

configure_logging(json_format=False, log_level="WARNING")
