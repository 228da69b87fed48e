"""
Bugs models.
"""

from django.db import models

from apps.core.models import TenantScopedModel


class Bug(TenantScopedModel):
    """Defect reported against a project, optionally tied to a task."""

    class Status(models.TextChoices):
        OPEN = "Open"
        IN_PROGRESS = "In Progress"
        TESTING = "Testing"
        MOVED_TO_UAT = "Moved to UAT"
        READY_FOR_PRODUCTION = "Ready for Production"
        CLOSED = "Closed"
        REOPEN = "Reopen"

    class Severity(models.TextChoices):
        NONE = "None"
        MINOR = "Minor"
        MAJOR = "Major"
        CRITICAL = "Critical"
        BLOCKER = "Blocker"

    class Classification(models.TextChoices):
        FUNCTIONAL = "Functional Bug"
        UI = "UI Bug"
        PERFORMANCE = "Performance"
        SECURITY = "Security"
        OTHER = "Other"

    class Reproducible(models.TextChoices):
        ALWAYS = "Always"
        SOMETIMES = "Sometimes"
        RARELY = "Rarely"
        UNABLE = "Unable"

    bug_key = models.CharField(max_length=20, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(max_length=2000, blank=True, default="")
    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.CASCADE,
        related_name="bugs",
    )
    task = models.ForeignKey(
        "tasks.Task",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="bugs",
    )
    reporter = models.ForeignKey(
        "accounts.User",
        on_delete=models.PROTECT,
        related_name="reported_bugs",
    )
    assignee = models.ForeignKey(
        "accounts.User",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="assigned_bugs",
    )
    status = models.CharField(max_length=32, choices=Status.choices, default=Status.OPEN)
    severity = models.CharField(max_length=16, choices=Severity.choices, default=Severity.NONE)
    classification = models.CharField(
        max_length=32, choices=Classification.choices, default=Classification.FUNCTIONAL
    )
    reproducible = models.CharField(
        max_length=16, choices=Reproducible.choices, default=Reproducible.ALWAYS
    )
    module = models.CharField(max_length=100, blank=True, default="")
    due_date = models.DateField(null=True, blank=True)
    tags = models.JSONField(default=list, blank=True)

    class Meta(TenantScopedModel.Meta):
        constraints = [
            models.UniqueConstraint(
                fields=["company", "bug_key"],
                name="uniq_bug_key_per_company",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "status"], name="bug_company_status_idx"),
            models.Index(fields=["project", "status"], name="bug_project_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.bug_key} {self.title}"
