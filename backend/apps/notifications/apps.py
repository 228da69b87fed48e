"""Notifications app configuration."""

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    """Configuration for notifications app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.notifications"
