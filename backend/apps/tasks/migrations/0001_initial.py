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
        ("projects", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Task",
            fields=[
                *tenant_fields(),
                ("task_key", models.CharField(editable=False, max_length=24)),
                ("name", models.CharField(max_length=500)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("1-Dev/Open", "Dev Open"),
                            ("1-Dev/Appd Task", "Dev Approved"),
                            ("1-Dev/In Progrs", "Dev In Progress"),
                            ("1-Dev/Unit Tstg", "Dev Unit Testing"),
                            ("2-TSTG/Mvd to Tstg", "Testing Moved"),
                            ("2-TSTG/Tstg In Progrs", "Testing In Progress"),
                            ("1-Dev/Bug Escltd", "Dev Bug Escalated"),
                            ("On Hold", "On Hold"),
                            ("2-Tstg/Rdy for UAT", "Ready For Uat"),
                            ("2-Tstg/Mvd to UAT", "Moved To Uat"),
                            ("2-Tstg/Rdy for Prod", "Ready For Prod"),
                            ("Closed", "Closed"),
                            ("Wtg for Lv Inpt", "Waiting For Live Input"),
                            ("Pdg Int. Resp", "Pending Internal"),
                            ("Pdg Cust. Resp", "Pending Customer"),
                            ("Recurring task", "Recurring"),
                            ("Yet to St", "Yet To Start"),
                            ("Ideation", "Ideation"),
                            ("2-ATM/Feasibility", "Feasibility"),
                            ("Planned", "Planned"),
                            ("Creation", "Creation"),
                            ("To Review", "To Review"),
                            ("Resolved", "Resolved"),
                        ],
                        default="1-Dev/Open",
                        max_length=32,
                    ),
                ),
                (
                    "priority",
                    models.CharField(
                        choices=[
                            ("None", "None"),
                            ("Low", "Low"),
                            ("Medium", "Medium"),
                            ("High", "High"),
                            ("Urgent", "Urgent"),
                        ],
                        default="None",
                        max_length=16,
                    ),
                ),
                ("start_date", models.DateField(blank=True, null=True)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("estimated_hours", models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                (
                    "billing_type",
                    models.CharField(
                        choices=[("None", "None"), ("Billable", "Billable"), ("Non-Billable", "Non Billable")],
                        default="None",
                        max_length=16,
                    ),
                ),
                ("completion_percentage", models.PositiveSmallIntegerField(default=0)),
                ("tags", models.JSONField(blank=True, default=list)),
                (
                    "project",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tasks",
                        to="projects.project",
                    ),
                ),
                (
                    "task_list",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="tasks",
                        to="projects.tasklist",
                    ),
                ),
                (
                    "parent_task",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="subtasks",
                        to="tasks.task",
                    ),
                ),
                (
                    "assignees",
                    models.ManyToManyField(blank=True, related_name="assigned_tasks", to="accounts.user"),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["company", "status"], name="task_company_status_idx"),
                    models.Index(fields=["project", "status"], name="task_project_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("project", "task_key"), name="uniq_task_key_per_project")
                ],
            },
        ),
        migrations.CreateModel(
            name="Comment",
            fields=[
                *tenant_fields(),
                ("content", models.TextField()),
                (
                    "task",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="comments",
                        to="tasks.task",
                    ),
                ),
                (
                    "mentions",
                    models.ManyToManyField(blank=True, related_name="mentioned_in_comments", to="accounts.user"),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "abstract": False,
            },
        ),
    ]
