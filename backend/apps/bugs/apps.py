"""Bugs app configuration."""

from django.apps import AppConfig


class BugsConfig(AppConfig):
    """Configuration for bugs app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bugs"
