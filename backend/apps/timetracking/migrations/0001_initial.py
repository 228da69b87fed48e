from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import uuid6
from django.db import migrations, models


def tenant_fields():
    return [
        (
            "deleted_at",
            models.DateTimeField(
                blank=True,
                db_index=True,
                help_text="Timestamp when the record was soft-deleted. NULL = active.",
                null=True,
            ),
        ),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        ("id", models.UUIDField(default=uuid6.uuid7, editable=False, primary_key=True, serialize=False)),
        (
            "company",
            models.ForeignKey(
                on_delete=django.db.models.deletion.CASCADE,
                related_name="%(class)s_set",
                to="companies.company",
            ),
        ),
        (
            "created_by",
            models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to="accounts.user",
            ),
        ),
    ]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        ("bugs", "0001_initial"),
        ("companies", "0001_initial"),
        ("projects", "0001_initial"),
        ("tasks", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="TimeLog",
            fields=[
                *tenant_fields(),
                ("log_key", models.CharField(editable=False, max_length=20)),
                ("title", models.CharField(blank=True, default="", max_length=200)),
                ("date", models.DateField()),
                (
                    "hours",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("24")),
                        ],
                    ),
                ),
                ("start_time", models.CharField(blank=True, default="", max_length=8)),
                ("end_time", models.CharField(blank=True, default="", max_length=8)),
                (
                    "billing_type",
                    models.CharField(
                        choices=[("Billable", "Billable"), ("Non-Billable", "Non Billable")],
                        default="Billable",
                        max_length=16,
                    ),
                ),
                (
                    "approval_status",
                    models.CharField(
                        choices=[("Pending", "Pending"), ("Approved", "Approved"), ("Rejected", "Rejected")],
                        default="Pending",
                        max_length=16,
                    ),
                ),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.CharField(blank=True, default="", max_length=500)),
                ("notes", models.CharField(blank=True, default="", max_length=1000)),
                (
                    "project",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="time_logs",
                        to="projects.project",
                    ),
                ),
                (
                    "task",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="time_logs",
                        to="tasks.task",
                    ),
                ),
                (
                    "bug",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="time_logs",
                        to="bugs.bug",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="time_logs",
                        to="accounts.user",
                    ),
                ),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="accounts.user",
                    ),
                ),
            ],
            options={
                "ordering": ["-date", "-created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["company", "date"], name="timelog_company_date_idx"),
                    models.Index(fields=["user", "date"], name="timelog_user_date_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "log_key"), name="uniq_time_log_key_per_company")
                ],
            },
        ),
        migrations.CreateModel(
            name="Timesheet",
            fields=[
                *tenant_fields(),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Draft", "Draft"),
                            ("Pending", "Pending"),
                            ("Approved", "Approved"),
                            ("Rejected", "Rejected"),
                        ],
                        default="Draft",
                        max_length=16,
                    ),
                ),
                ("total_hours", models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ("billable_hours", models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ("non_billable_hours", models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.CharField(blank=True, default="", max_length=500)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="timesheets",
                        to="accounts.user",
                    ),
                ),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="accounts.user",
                    ),
                ),
            ],
            options={
                "ordering": ["-start_date", "-created_at"],
                "abstract": False,
            },
        ),
    ]
