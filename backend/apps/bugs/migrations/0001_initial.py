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
        ("tasks", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Bug",
            fields=[
                *tenant_fields(),
                ("bug_key", models.CharField(editable=False, max_length=20)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="", max_length=2000)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Open", "Open"),
                            ("In Progress", "In Progress"),
                            ("Testing", "Testing"),
                            ("Moved to UAT", "Moved To Uat"),
                            ("Ready for Production", "Ready For Production"),
                            ("Closed", "Closed"),
                            ("Reopen", "Reopen"),
                        ],
                        default="Open",
                        max_length=32,
                    ),
                ),
                (
                    "severity",
                    models.CharField(
                        choices=[
                            ("None", "None"),
                            ("Minor", "Minor"),
                            ("Major", "Major"),
                            ("Critical", "Critical"),
                            ("Blocker", "Blocker"),
                        ],
                        default="None",
                        max_length=16,
                    ),
                ),
                (
                    "classification",
                    models.CharField(
                        choices=[
                            ("Functional Bug", "Functional"),
                            ("UI Bug", "Ui"),
                            ("Performance", "Performance"),
                            ("Security", "Security"),
                            ("Other", "Other"),
                        ],
                        default="Functional Bug",
                        max_length=32,
                    ),
                ),
                (
                    "reproducible",
                    models.CharField(
                        choices=[
                            ("Always", "Always"),
                            ("Sometimes", "Sometimes"),
                            ("Rarely", "Rarely"),
                            ("Unable", "Unable"),
                        ],
                        default="Always",
                        max_length=16,
                    ),
                ),
                ("module", models.CharField(blank=True, default="", max_length=100)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("tags", models.JSONField(blank=True, default=list)),
                (
                    "project",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bugs",
                        to="projects.project",
                    ),
                ),
                (
                    "task",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bugs",
                        to="tasks.task",
                    ),
                ),
                (
                    "reporter",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reported_bugs",
                        to="accounts.user",
                    ),
                ),
                (
                    "assignee",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="assigned_bugs",
                        to="accounts.user",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["company", "status"], name="bug_company_status_idx"),
                    models.Index(fields=["project", "status"], name="bug_project_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "bug_key"), name="uniq_bug_key_per_company")
                ],
            },
        ),
    ]
