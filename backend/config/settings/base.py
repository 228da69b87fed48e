"""
Base Django settings for the project management API.

Shared configuration for all environments.
"""

from pathlib import Path

from pydantic_settings import BaseSettings

from apps.core.logging import configure_logging


class Settings(BaseSettings):
    """Environment-based configuration using pydantic-settings."""

    SECRET_KEY: str = "django-insecure-change-me-in-production"
    DEBUG: bool = False
    ALLOWED_HOSTS: str = "localhost,127.0.0.1"

    # Database
    DATABASE_NAME: str = "projects"
    DATABASE_USER: str = "postgres"
    DATABASE_PASSWORD: str = "postgres"
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: str = "5432"

    # Access tokens
    JWT_SECRET: str = "change-me-jwt-secret-at-least-32-bytes"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_TTL_SECONDS: int = 3600

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Real-time relay backend: local | memory
    REALTIME_BACKEND: str = "local"

    # List endpoints
    LIST_DEFAULT_LIMIT: int = 50
    LIST_MAX_LIMIT: int = 100

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = settings.SECRET_KEY

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = settings.DEBUG

ALLOWED_HOSTS = [h.strip() for h in settings.ALLOWED_HOSTS.split(",") if h.strip()]

# Application definition
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # Local apps
    "apps.core",
    "apps.companies",
    "apps.accounts",
    "apps.projects",
    "apps.tasks",
    "apps.bugs",
    "apps.timetracking",
    "apps.notifications",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "apps.core.middleware.CorrelationIdMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES: list[dict] = []

WSGI_APPLICATION = "config.wsgi.application"

# Database
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": settings.DATABASE_NAME,
        "USER": settings.DATABASE_USER,
        "PASSWORD": settings.DATABASE_PASSWORD,
        "HOST": settings.DATABASE_HOST,
        "PORT": settings.DATABASE_PORT,
    }
}

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Access tokens
JWT_SECRET = settings.JWT_SECRET
JWT_ALGORITHM = settings.JWT_ALGORITHM
JWT_ACCESS_TOKEN_TTL_SECONDS = settings.JWT_ACCESS_TOKEN_TTL_SECONDS

# Real-time relay
REALTIME_BACKEND = settings.REALTIME_BACKEND

# List endpoints
LIST_DEFAULT_LIMIT = settings.LIST_DEFAULT_LIMIT
LIST_MAX_LIMIT = settings.LIST_MAX_LIMIT

# Logging - structlog over stdlib logging, configured once at import
LOGGING_CONFIG = None
configure_logging(json_format=settings.LOG_JSON, log_level=settings.LOG_LEVEL)
