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
        ("companies", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                *tenant_fields(),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("task_assigned", "Task Assigned"),
                            ("bug_assigned", "Bug Assigned"),
                            ("comment_mention", "Comment Mention"),
                            ("timesheet_status", "Timesheet Status"),
                            ("deadline_reminder", "Deadline Reminder"),
                            ("project_update", "Project Update"),
                        ],
                        max_length=32,
                    ),
                ),
                ("title", models.CharField(max_length=200)),
                ("message", models.CharField(max_length=1000)),
                (
                    "resource_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("task", "Task"),
                            ("bug", "Bug"),
                            ("timesheet", "Timesheet"),
                            ("project", "Project"),
                            ("comment", "Comment"),
                        ],
                        default="",
                        max_length=16,
                    ),
                ),
                ("resource_id", models.UUIDField(blank=True, null=True)),
                ("is_read", models.BooleanField(default=False)),
                (
                    "recipient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to="accounts.user",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "abstract": False,
                "indexes": [models.Index(fields=["recipient", "is_read"], name="notification_unread_idx")],
            },
        ),
    ]
