"""
Attach comments to bugs.

Split from 0001 because bugs.Bug itself references tasks.Task.
"""

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("bugs", "0001_initial"),
        ("tasks", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="comment",
            name="bug",
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.CASCADE,
                related_name="comments",
                to="bugs.bug",
            ),
        ),
        migrations.AddConstraint(
            model_name="comment",
            constraint=models.CheckConstraint(
                condition=models.Q(
                    models.Q(("bug__isnull", True), ("task__isnull", False)),
                    models.Q(("bug__isnull", False), ("task__isnull", True)),
                    _connector="OR",
                ),
                name="comment_targets_task_xor_bug",
            ),
        ),
    ]
