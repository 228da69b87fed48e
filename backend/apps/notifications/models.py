"""
Notifications models - per-user inbox entries.
"""

from django.db import models

from apps.core.models import TenantScopedModel


class Notification(TenantScopedModel):
    """Message delivered to one user; hard-deleted when the user dismisses it."""

    class Type(models.TextChoices):
        TASK_ASSIGNED = "task_assigned"
        BUG_ASSIGNED = "bug_assigned"
        COMMENT_MENTION = "comment_mention"
        TIMESHEET_STATUS = "timesheet_status"
        DEADLINE_REMINDER = "deadline_reminder"
        PROJECT_UPDATE = "project_update"

    class ResourceType(models.TextChoices):
        TASK = "task"
        BUG = "bug"
        TIMESHEET = "timesheet"
        PROJECT = "project"
        COMMENT = "comment"

    recipient = models.ForeignKey(
        "accounts.User",
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    type = models.CharField(max_length=32, choices=Type.choices)
    title = models.CharField(max_length=200)
    message = models.CharField(max_length=1000)
    resource_type = models.CharField(
        max_length=16, choices=ResourceType.choices, blank=True, default=""
    )
    resource_id = models.UUIDField(null=True, blank=True)
    is_read = models.BooleanField(default=False)

    class Meta(TenantScopedModel.Meta):
        indexes = [
            models.Index(fields=["recipient", "is_read"], name="notification_unread_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.type} -> {self.recipient_id}"
