"""
Tasks models - tasks and the comments attached to tasks and bugs.
"""

from django.db import models

from apps.core.models import TenantScopedModel


class Task(TenantScopedModel):
    """Unit of work inside a project, optionally nested under a parent task."""

    class Status(models.TextChoices):
        DEV_OPEN = "1-Dev/Open"
        DEV_APPROVED = "1-Dev/Appd Task"
        DEV_IN_PROGRESS = "1-Dev/In Progrs"
        DEV_UNIT_TESTING = "1-Dev/Unit Tstg"
        TESTING_MOVED = "2-TSTG/Mvd to Tstg"
        TESTING_IN_PROGRESS = "2-TSTG/Tstg In Progrs"
        DEV_BUG_ESCALATED = "1-Dev/Bug Escltd"
        ON_HOLD = "On Hold"
        READY_FOR_UAT = "2-Tstg/Rdy for UAT"
        MOVED_TO_UAT = "2-Tstg/Mvd to UAT"
        READY_FOR_PROD = "2-Tstg/Rdy for Prod"
        CLOSED = "Closed"
        WAITING_FOR_LIVE_INPUT = "Wtg for Lv Inpt"
        PENDING_INTERNAL = "Pdg Int. Resp"
        PENDING_CUSTOMER = "Pdg Cust. Resp"
        RECURRING = "Recurring task"
        YET_TO_START = "Yet to St"
        IDEATION = "Ideation"
        FEASIBILITY = "2-ATM/Feasibility"
        PLANNED = "Planned"
        CREATION = "Creation"
        TO_REVIEW = "To Review"
        RESOLVED = "Resolved"

    class Priority(models.TextChoices):
        NONE = "None"
        LOW = "Low"
        MEDIUM = "Medium"
        HIGH = "High"
        URGENT = "Urgent"

    class BillingType(models.TextChoices):
        NONE = "None"
        BILLABLE = "Billable"
        NON_BILLABLE = "Non-Billable"

    DONE_STATUSES = frozenset({Status.CLOSED, Status.RESOLVED})
    NOT_STARTED_STATUSES = frozenset({Status.DEV_OPEN, Status.YET_TO_START})

    task_key = models.CharField(max_length=24, editable=False)
    name = models.CharField(max_length=500)
    description = models.TextField(blank=True, default="")
    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.CASCADE,
        related_name="tasks",
    )
    task_list = models.ForeignKey(
        "projects.TaskList",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="tasks",
    )
    parent_task = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="subtasks",
    )
    assignees = models.ManyToManyField(
        "accounts.User",
        blank=True,
        related_name="assigned_tasks",
    )
    status = models.CharField(max_length=32, choices=Status.choices, default=Status.DEV_OPEN)
    priority = models.CharField(max_length=16, choices=Priority.choices, default=Priority.NONE)
    start_date = models.DateField(null=True, blank=True)
    due_date = models.DateField(null=True, blank=True)
    estimated_hours = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    billing_type = models.CharField(
        max_length=16, choices=BillingType.choices, default=BillingType.NONE
    )
    completion_percentage = models.PositiveSmallIntegerField(default=0)
    tags = models.JSONField(default=list, blank=True)

    class Meta(TenantScopedModel.Meta):
        constraints = [
            models.UniqueConstraint(
                fields=["project", "task_key"],
                name="uniq_task_key_per_project",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "status"], name="task_company_status_idx"),
            models.Index(fields=["project", "status"], name="task_project_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.task_key} {self.name}"

    @property
    def is_subtask(self) -> bool:
        return self.parent_task_id is not None

    def sync_completion(self) -> None:
        """Derive completion_percentage from status; other statuses keep their value."""
        if self.status in self.DONE_STATUSES:
            self.completion_percentage = 100
        elif self.status in self.NOT_STARTED_STATUSES:
            self.completion_percentage = 0


class Comment(TenantScopedModel):
    """Discussion entry on a task or a bug (exactly one of the two)."""

    content = models.TextField()
    task = models.ForeignKey(
        Task,
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="comments",
    )
    bug = models.ForeignKey(
        "bugs.Bug",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="comments",
    )
    mentions = models.ManyToManyField(
        "accounts.User",
        blank=True,
        related_name="mentioned_in_comments",
    )

    class Meta(TenantScopedModel.Meta):
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(task__isnull=False, bug__isnull=True)
                    | models.Q(task__isnull=True, bug__isnull=False)
                ),
                name="comment_targets_task_xor_bug",
            ),
        ]

    def __str__(self) -> str:
        return self.content[:50]

    @property
    def project_id(self):
        target = self.task or self.bug
        return target.project_id if target else None
