import uuid6
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Company",
            fields=[
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
                ("name", models.CharField(max_length=200)),
                ("domain", models.CharField(blank=True, default="", max_length=255)),
                ("logo", models.URLField(blank=True, default="", max_length=500)),
                ("allow_user_registration", models.BooleanField(default=False)),
                (
                    "default_role",
                    models.CharField(
                        choices=[
                            ("Super_Admin", "Super Admin"),
                            ("Admin", "Admin"),
                            ("Project_Manager", "Project Manager"),
                            ("Team_Lead", "Team Lead"),
                            ("Team_Member", "Team Member"),
                            ("Client", "Client"),
                        ],
                        default="Team_Member",
                        max_length=32,
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "companies",
                "ordering": ["-created_at"],
            },
        ),
    ]
