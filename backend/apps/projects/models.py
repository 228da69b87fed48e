"""
Projects models - project groups, projects, milestones and task lists.
"""

from django.db import models
from django.db.models.functions import Lower

from apps.core.models import TenantScopedModel

DEFAULT_GROUP_COLOR = "#6366f1"


class ProjectGroup(TenantScopedModel):
    """
    Named bucket of projects.

    Unlike other resources, groups are hard-deleted; deleting one clears the
    group reference from its projects rather than deleting them.
    """

    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True, default="")
    color = models.CharField(max_length=20, default=DEFAULT_GROUP_COLOR)
    project_count = models.PositiveIntegerField(default=0)

    class Meta(TenantScopedModel.Meta):
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                Lower("name"),
                "company",
                name="uniq_project_group_name_per_company",
            ),
        ]

    def __str__(self) -> str:
        return self.name

    def refresh_project_count(self) -> None:
        """Recount active projects in this group."""
        self.project_count = Project.objects.alive().filter(project_group=self).count()
        self.save(update_fields=["project_count", "updated_at"])


class Project(TenantScopedModel):
    """A project owned by a user and worked on by a team."""

    class Status(models.TextChoices):
        ACTIVE = "Active"
        IN_PROGRESS = "In Progress"
        ON_TRACK = "On Track"
        DELAYED = "Delayed"
        IN_TESTING = "In Testing"
        ON_HOLD = "On Hold"
        APPROVED = "Approved"
        CANCELLED = "Cancelled"
        PLANNING = "Planning"
        COMPLETED = "Completed"
        INVOICED = "Invoiced"
        YET_TO_START = "Yet to Start"
        COMPLETED_YET_TO_MOVE = "Compl Yet to Mov"
        WAITING_FOR_LIVE_INPUT = "Waiting for Live Input"

    class Visibility(models.TextChoices):
        PRIVATE = "Private"
        PUBLIC = "Public"

    project_key = models.CharField(max_length=20, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(max_length=5000, blank=True, default="")
    owner = models.ForeignKey(
        "accounts.User",
        on_delete=models.PROTECT,
        related_name="owned_projects",
    )
    team_members = models.ManyToManyField(
        "accounts.User",
        blank=True,
        related_name="projects",
    )
    status = models.CharField(max_length=32, choices=Status.choices, default=Status.ACTIVE)
    visibility = models.CharField(
        max_length=16, choices=Visibility.choices, default=Visibility.PRIVATE
    )
    strict_project = models.BooleanField(default=False)
    project_group = models.ForeignKey(
        ProjectGroup,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="projects",
    )
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    allocated_hours = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    progress = models.PositiveSmallIntegerField(default=0)
    tags = models.JSONField(default=list, blank=True)

    class Meta(TenantScopedModel.Meta):
        constraints = [
            models.UniqueConstraint(
                fields=["company", "project_key"],
                name="uniq_project_key_per_company",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "status"], name="project_company_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.project_key} {self.title}"

    @property
    def initials(self) -> str:
        """First letter of each title word, used as the task key prefix."""
        initials = "".join(word[0].upper() for word in self.title.split() if word)
        return initials[:10] or "TSK"

    def refresh_progress(self) -> None:
        """Percentage of active tasks in a done status."""
        from apps.tasks.models import Task

        tasks = Task.objects.alive().filter(project=self)
        total = tasks.count()
        done = tasks.filter(status__in=Task.DONE_STATUSES).count()
        self.progress = round(done * 100 / total) if total else 0
        self.save(update_fields=["progress", "updated_at"])


class Milestone(TenantScopedModel):
    """Checkpoint within a project."""

    class Status(models.TextChoices):
        NOT_STARTED = "Not Started"
        IN_PROGRESS = "In Progress"
        COMPLETED = "Completed"
        ON_HOLD = "On Hold"

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name="milestones")
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True, default="")
    due_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.NOT_STARTED)

    def __str__(self) -> str:
        return self.name


class TaskList(TenantScopedModel):
    """Ordered grouping of tasks within a project."""

    class Flag(models.TextChoices):
        INTERNAL = "Internal"
        EXTERNAL = "External"
        NONE = "None"

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name="task_lists")
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True, default="")
    related_milestone = models.ForeignKey(
        Milestone,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="task_lists",
    )
    flag = models.CharField(max_length=16, choices=Flag.choices, default=Flag.INTERNAL)
    order = models.PositiveIntegerField(default=0)
    tags = models.JSONField(default=list, blank=True)

    class Meta(TenantScopedModel.Meta):
        ordering = ["order", "created_at"]

    def __str__(self) -> str:
        return self.name
