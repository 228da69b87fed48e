"""
Time tracking models - individual time logs and the timesheets that roll them up.
"""

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from apps.core.models import TenantScopedModel


class BillingType(models.TextChoices):
    BILLABLE = "Billable"
    NON_BILLABLE = "Non-Billable"


class TimeLog(TenantScopedModel):
    """Hours a user spent on a project, optionally against a task or bug."""

    class ApprovalStatus(models.TextChoices):
        PENDING = "Pending"
        APPROVED = "Approved"
        REJECTED = "Rejected"

    log_key = models.CharField(max_length=20, editable=False)
    title = models.CharField(max_length=200, blank=True, default="")
    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.CASCADE,
        related_name="time_logs",
    )
    task = models.ForeignKey(
        "tasks.Task",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="time_logs",
    )
    bug = models.ForeignKey(
        "bugs.Bug",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="time_logs",
    )
    user = models.ForeignKey(
        "accounts.User",
        on_delete=models.CASCADE,
        related_name="time_logs",
    )
    date = models.DateField()
    hours = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("24"))],
    )
    start_time = models.CharField(max_length=8, blank=True, default="")
    end_time = models.CharField(max_length=8, blank=True, default="")
    billing_type = models.CharField(
        max_length=16, choices=BillingType.choices, default=BillingType.BILLABLE
    )
    approval_status = models.CharField(
        max_length=16, choices=ApprovalStatus.choices, default=ApprovalStatus.PENDING
    )
    approved_by = models.ForeignKey(
        "accounts.User",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.CharField(max_length=500, blank=True, default="")
    notes = models.CharField(max_length=1000, blank=True, default="")

    class Meta(TenantScopedModel.Meta):
        ordering = ["-date", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "log_key"],
                name="uniq_time_log_key_per_company",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "date"], name="timelog_company_date_idx"),
            models.Index(fields=["user", "date"], name="timelog_user_date_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.log_key} {self.hours}h on {self.date}"


class Timesheet(TenantScopedModel):
    """A user's hours over a date range, moved through a review workflow."""

    class Status(models.TextChoices):
        DRAFT = "Draft"
        PENDING = "Pending"
        APPROVED = "Approved"
        REJECTED = "Rejected"

    user = models.ForeignKey(
        "accounts.User",
        on_delete=models.CASCADE,
        related_name="timesheets",
    )
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.DRAFT)
    total_hours = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    billable_hours = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    non_billable_hours = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    submitted_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        "accounts.User",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.CharField(max_length=500, blank=True, default="")

    class Meta(TenantScopedModel.Meta):
        ordering = ["-start_date", "-created_at"]

    def __str__(self) -> str:
        return f"Timesheet {self.start_date}..{self.end_date} ({self.status})"
