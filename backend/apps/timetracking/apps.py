"""Time tracking app configuration."""

from django.apps import AppConfig


class TimetrackingConfig(AppConfig):
    """Configuration for timetracking app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.timetracking"
