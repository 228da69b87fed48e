import django.db.models.deletion
import django.db.models.functions.text
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
            name="ProjectGroup",
            fields=[
                *tenant_fields(),
                ("name", models.CharField(max_length=100)),
                ("description", models.CharField(blank=True, default="", max_length=500)),
                ("color", models.CharField(default="#6366f1", max_length=20)),
                ("project_count", models.PositiveIntegerField(default=0)),
            ],
            options={
                "ordering": ["name"],
                "abstract": False,
                "constraints": [
                    models.UniqueConstraint(
                        django.db.models.functions.text.Lower("name"),
                        models.F("company"),
                        name="uniq_project_group_name_per_company",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Project",
            fields=[
                *tenant_fields(),
                ("project_key", models.CharField(editable=False, max_length=20)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="", max_length=5000)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Active", "Active"),
                            ("In Progress", "In Progress"),
                            ("On Track", "On Track"),
                            ("Delayed", "Delayed"),
                            ("In Testing", "In Testing"),
                            ("On Hold", "On Hold"),
                            ("Approved", "Approved"),
                            ("Cancelled", "Cancelled"),
                            ("Planning", "Planning"),
                            ("Completed", "Completed"),
                            ("Invoiced", "Invoiced"),
                            ("Yet to Start", "Yet To Start"),
                            ("Compl Yet to Mov", "Completed Yet To Move"),
                            ("Waiting for Live Input", "Waiting For Live Input"),
                        ],
                        default="Active",
                        max_length=32,
                    ),
                ),
                (
                    "visibility",
                    models.CharField(
                        choices=[("Private", "Private"), ("Public", "Public")],
                        default="Private",
                        max_length=16,
                    ),
                ),
                ("strict_project", models.BooleanField(default=False)),
                ("start_date", models.DateField(blank=True, null=True)),
                ("end_date", models.DateField(blank=True, null=True)),
                ("allocated_hours", models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ("progress", models.PositiveSmallIntegerField(default=0)),
                ("tags", models.JSONField(blank=True, default=list)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="owned_projects",
                        to="accounts.user",
                    ),
                ),
                (
                    "project_group",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="projects",
                        to="projects.projectgroup",
                    ),
                ),
                (
                    "team_members",
                    models.ManyToManyField(blank=True, related_name="projects", to="accounts.user"),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "abstract": False,
                "indexes": [models.Index(fields=["company", "status"], name="project_company_status_idx")],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("company", "project_key"),
                        name="uniq_project_key_per_company",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Milestone",
            fields=[
                *tenant_fields(),
                ("name", models.CharField(max_length=100)),
                ("description", models.CharField(blank=True, default="", max_length=500)),
                ("due_date", models.DateField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Not Started", "Not Started"),
                            ("In Progress", "In Progress"),
                            ("Completed", "Completed"),
                            ("On Hold", "On Hold"),
                        ],
                        default="Not Started",
                        max_length=16,
                    ),
                ),
                (
                    "project",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="milestones",
                        to="projects.project",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="TaskList",
            fields=[
                *tenant_fields(),
                ("name", models.CharField(max_length=100)),
                ("description", models.CharField(blank=True, default="", max_length=500)),
                (
                    "flag",
                    models.CharField(
                        choices=[("Internal", "Internal"), ("External", "External"), ("None", "None")],
                        default="Internal",
                        max_length=16,
                    ),
                ),
                ("order", models.PositiveIntegerField(default=0)),
                ("tags", models.JSONField(blank=True, default=list)),
                (
                    "project",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="task_lists",
                        to="projects.project",
                    ),
                ),
                (
                    "related_milestone",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="task_lists",
                        to="projects.milestone",
                    ),
                ),
            ],
            options={
                "ordering": ["order", "created_at"],
                "abstract": False,
            },
        ),
    ]
