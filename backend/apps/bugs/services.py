"""
Bugs services - defect tracking with assignment notifications.
"""

from typing import Any
from uuid import UUID

from django.db.models import Q

from apps.accounts.models import User
from apps.bugs.models import Bug
from apps.bugs.schemas import BugOut
from apps.core.auth import AuthContext
from apps.core.exceptions import InvalidReferenceError
from apps.core.guards import MutationGuard, Reference, current_value, fixed
from apps.core.listing import FilterField, status_columns
from apps.core.resources import Resource
from apps.core.utils import sequential_key
from apps.notifications.models import Notification
from apps.notifications.services import notify
from apps.projects.models import Project
from apps.realtime import relay
from apps.tasks.models import Task

KANBAN_COLUMN_LIMIT = 50


def _task_in_project(cleaned: dict[str, Any], existing: Bug | None) -> None:
    task = cleaned.get("task")
    project = current_value(cleaned, existing, "project")
    if task is not None and project is not None and task.project_id != project.pk:
        raise InvalidReferenceError("Task belongs to a different project", field="task_id")


class BugResource(Resource[Bug]):
    model = Bug
    event_prefix = "bug"
    out_schema = BugOut
    guard = MutationGuard(
        Bug,
        required=["title", "project_id", "reporter_id"],
        references=[
            Reference("project", Project),
            Reference("task", Task),
            Reference("reporter", User),
            Reference("assignee", User),
        ],
        consistency=[fixed("project", "A bug cannot be moved to another project"), _task_in_project],
        messages={"title": "Bug title is required", "project_id": "Project ID is required"},
    )
    search_fields = ("title", "description", "bug_key")
    filters = {
        "project_id": FilterField("project_id"),
        "task_id": FilterField("task_id"),
        "status": FilterField("status", many=True),
        "severity": FilterField("severity", many=True),
        "classification": FilterField("classification"),
        "assignee_id": FilterField("assignee_id"),
        "reporter_id": FilterField("reporter_id"),
        "module": FilterField("module__iexact"),
        "due_before": FilterField("due_date__lte"),
    }
    sort_fields = ("title", "bug_key", "status", "severity", "due_date", "created_at", "updated_at")

    def visibility(self, ctx: AuthContext) -> Q:
        return Q(assignee=ctx.user) | Q(reporter=ctx.user) | Q(created_by=ctx.user)

    def rooms(self, instance: Bug) -> list[str]:
        return [relay.company_room(instance.company_id), relay.project_room(instance.project_id)]

    def create(self, ctx: AuthContext, payload: dict[str, Any]) -> Bug:
        if payload.get("reporter_id") is None:
            payload = {**payload, "reporter_id": ctx.user_id}
        return super().create(ctx, payload)

    def before_create(self, instance: Bug, ctx: AuthContext) -> None:
        # Soft-deleted rows count too, so keys are never reused
        number = Bug.objects.filter(company_id=ctx.company_id).count() + 1
        instance.bug_key = sequential_key("BUG-", number, width=4)

    def after_create(self, instance: Bug, ctx: AuthContext) -> None:
        self._notify_assignee(instance, ctx)

    def after_update(self, instance: Bug, previous: dict[str, Any], ctx: AuthContext) -> None:
        if instance.assignee_id and previous["assignee_id"] != instance.assignee_id:
            self._notify_assignee(instance, ctx)
        if previous["status"] != instance.status:
            relay.emit(
                "bug:status_changed",
                instance.company_id,
                [relay.project_room(instance.project_id)],
                {"bug_id": str(instance.pk), "status": instance.status, "previous_status": previous["status"]},
            )

    def _notify_assignee(self, bug: Bug, ctx: AuthContext) -> None:
        notify(
            bug.company_id,
            [bug.assignee_id],
            Notification.Type.BUG_ASSIGNED,
            "Bug Assigned",
            f'You have been assigned to bug "{bug.title}"',
            resource_type=Notification.ResourceType.BUG,
            resource_id=bug.pk,
            actor_id=ctx.user_id,
        )

    # --- Workflow ---

    def assign(self, ctx: AuthContext, pk: UUID, assignee_id: UUID | None) -> Bug:
        return self.update(ctx, pk, {"assignee_id": assignee_id})

    def set_status(self, ctx: AuthContext, pk: UUID, status: str) -> Bug:
        return self.update(ctx, pk, {"status": status})

    def kanban(self, ctx: AuthContext, project_id: UUID | None = None) -> list[dict[str, Any]]:
        """Visible bugs grouped by status, at most KANBAN_COLUMN_LIMIT per column."""
        query = Q(project_id=project_id) if project_id else None
        return status_columns(self.visible(ctx, query), Bug.Status.values, KANBAN_COLUMN_LIMIT)


bug_resource = BugResource()
