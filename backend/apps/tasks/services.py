"""
Tasks services - tasks, their assignment and status workflow, and comments
on tasks and bugs.
"""

from typing import Any
from uuid import UUID

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.accounts.models import User
from apps.bugs.models import Bug
from apps.core.auth import AuthContext
from apps.core.exceptions import InvalidReferenceError, PermissionDeniedError, ValidationError
from apps.core.guards import MutationGuard, Reference, current_value, date_range, fixed
from apps.core.listing import FilterField, status_columns
from apps.core.resources import Resource
from apps.core.utils import sequential_key
from apps.notifications.models import Notification
from apps.notifications.services import notify
from apps.projects.models import Project, TaskList
from apps.realtime import relay
from apps.tasks.models import Comment, Task
from apps.tasks.schemas import CommentOut, TaskOut

KANBAN_COLUMN_LIMIT = 50


def _completion_in_range(values: dict[str, Any], existing) -> None:
    value = values.get("completion_percentage")
    if value is not None and not 0 <= value <= 100:
        raise ValidationError(
            "Completion percentage must be between 0 and 100",
            details={"field": "completion_percentage"},
        )



def _relations_in_project(cleaned: dict[str, Any], existing: Task | None) -> None:
    project = current_value(cleaned, existing, "project")
    if project is None:
        return
    task_list = cleaned.get("task_list")
    if task_list is not None and task_list.project_id != project.pk:
        raise InvalidReferenceError("Task list belongs to a different project", field="task_list_id")
    parent = cleaned.get("parent_task")
    if parent is not None:
        if parent.project_id != project.pk:
            raise InvalidReferenceError("Parent task belongs to a different project", field="parent_task_id")
        if existing is not None and _is_descendant_or_self(parent, existing):
            raise InvalidReferenceError("A task cannot be nested under itself", field="parent_task_id")


def _is_descendant_or_self(candidate: Task, task: Task) -> bool:
    seen = set()
    node = candidate
    while node is not None and node.pk not in seen:
        if node.pk == task.pk:
            return True
        seen.add(node.pk)
        node = node.parent_task
    return False


def _assignees_on_team(cleaned: dict[str, Any], existing: Task | None) -> None:
    """Strict projects only accept their owner and team members as assignees."""
    project = current_value(cleaned, existing, "project")
    assignees = cleaned.get("assignees")
    if project is None or not assignees or not project.strict_project:
        return
    allowed = {project.owner_id, *project.team_members.values_list("pk", flat=True)}
    outsiders = sorted(str(user.pk) for user in assignees if user.pk not in allowed)
    if outsiders:
        raise InvalidReferenceError(
            "Some assignees do not have access to this project",
            field="assignee_ids",
            details={"user_ids": outsiders},
        )


class TaskResource(Resource[Task]):
    model = Task
    event_prefix = "task"
    out_schema = TaskOut
    guard = MutationGuard(
        Task,
        required=["name", "project_id"],
        references=[
            Reference("project", Project),
            Reference("task_list", TaskList, label="task list"),
            Reference("parent_task", Task, label="parent task"),
            Reference("assignees", User, key="assignee_ids", many=True),
        ],
        validators=[
            date_range("start_date", "due_date", "Due date cannot be before start date"),
            _completion_in_range,
        ],
        consistency=[
            fixed("project", "A task cannot be moved to another project"),
            _relations_in_project,
            _assignees_on_team,
        ],
        messages={"name": "Task name is required", "project_id": "Project ID is required"},
    )
    search_fields = ("name", "task_key")
    filters = {
        "project_id": FilterField("project_id"),
        "task_list_id": FilterField("task_list_id"),
        "parent_task_id": FilterField("parent_task_id"),
        "status": FilterField("status", many=True),
        "priority": FilterField("priority", many=True),
        "assignee_id": FilterField("assignees", spans_many=True),
        "billing_type": FilterField("billing_type"),
        "due_from": FilterField("due_date__gte"),
        "due_to": FilterField("due_date__lte"),
    }
    sort_fields = ("name", "task_key", "status", "priority", "start_date", "due_date", "created_at", "updated_at")
    prefetch_related = ("assignees",)

    def visibility(self, ctx: AuthContext) -> Q:
        return Q(assignees=ctx.user) | Q(created_by=ctx.user)

    def rooms(self, instance: Task) -> list[str]:
        return [relay.company_room(instance.company_id), relay.project_room(instance.project_id)]

    def before_create(self, instance: Task, ctx: AuthContext) -> None:
        # Per project, soft-deleted rows included so keys are never reused
        number = Task.objects.filter(project_id=instance.project_id).count() + 1
        instance.task_key = sequential_key(f"{instance.project.initials}-T", number)
        instance.sync_completion()

    def after_create(self, instance: Task, ctx: AuthContext) -> None:
        instance.project.refresh_progress()
        self._notify_assignees(instance, [u.pk for u in instance.assignees.all()], ctx)

    def before_update(self, instance: Task, ctx: AuthContext) -> None:
        instance.sync_completion()

    def after_update(self, instance: Task, previous: dict[str, Any], ctx: AuthContext) -> None:
        if previous["status"] != instance.status:
            instance.project.refresh_progress()
            relay.emit(
                "task:status_changed",
                instance.company_id,
                [relay.project_room(instance.project_id)],
                {"task_id": str(instance.pk), "status": instance.status, "previous_status": previous["status"]},
            )

    def update(self, ctx: AuthContext, pk: UUID | str, payload: dict[str, Any]) -> Task:
        with transaction.atomic():
            before = None
            if "assignee_ids" in payload:
                before = set(self.get(ctx, pk).assignees.values_list("pk", flat=True))
            task = super().update(ctx, pk, payload)
            if before is not None:
                added = [u.pk for u in task.assignees.all() if u.pk not in before]
                self._notify_assignees(task, added, ctx)
        return task

    def delete_cascades(self, ctx: AuthContext):
        return [self._detach_subtasks]

    @staticmethod
    def _detach_subtasks(task: Task) -> None:
        Task.objects.filter(parent_task=task).update(parent_task=None, updated_at=timezone.now())

    def delete(self, ctx: AuthContext, pk: UUID | str) -> Task:
        with transaction.atomic():
            task = super().delete(ctx, pk)
            task.project.refresh_progress()
        return task

    def _notify_assignees(self, task: Task, user_ids: list[UUID], ctx: AuthContext) -> None:
        notify(
            task.company_id,
            user_ids,
            Notification.Type.TASK_ASSIGNED,
            "New Task Assigned",
            f'You have been assigned to task "{task.name}"',
            resource_type=Notification.ResourceType.TASK,
            resource_id=task.pk,
            actor_id=ctx.user_id,
        )

    # --- Workflow ---

    def assign(self, ctx: AuthContext, pk: UUID, assignee_ids: list[UUID]) -> Task:
        """Replace the assignee set; only newly added users are notified."""
        return self.update(ctx, pk, {"assignee_ids": assignee_ids})

    def set_status(self, ctx: AuthContext, pk: UUID, status: str) -> Task:
        return self.update(ctx, pk, {"status": status})

    def kanban(self, ctx: AuthContext, project_id: UUID | None = None) -> list[dict[str, Any]]:
        """
        Visible tasks grouped by status, in vocabulary order.

        Each column holds at most KANBAN_COLUMN_LIMIT tasks (newest first)
        and the full count.
        """
        query = Q(project_id=project_id) if project_id else None
        return status_columns(self.visible(ctx, query), Task.Status.values, KANBAN_COLUMN_LIMIT, ("assignees",))


def _comment_target(cleaned: dict[str, Any], existing: Comment | None) -> None:
    task = current_value(cleaned, existing, "task")
    bug = current_value(cleaned, existing, "bug")
    if (task is None) == (bug is None):
        raise ValidationError("A comment belongs to exactly one task or bug", details={"field": "task_id"})


class CommentResource(Resource[Comment]):
    """Comments on tasks and bugs; only the author may edit or delete one."""

    model = Comment
    event_prefix = "comment"
    out_schema = CommentOut
    guard = MutationGuard(
        Comment,
        required=["content"],
        references=[
            Reference("task", Task),
            Reference("bug", Bug),
            Reference("mentions", User, key="mention_ids", many=True, label="mentioned users"),
        ],
        consistency=[_comment_target],
        messages={"content": "Comment content is required"},
    )
    search_fields = ("content",)
    sort_fields = ("created_at", "updated_at")
    default_sort = "created_at"
    select_related = ("task", "bug")
    prefetch_related = ("mentions",)

    def visibility(self, ctx: AuthContext) -> Q:
        user = ctx.user
        return (
            Q(created_by=user)
            | Q(task__assignees=user)
            | Q(task__created_by=user)
            | Q(bug__assignee=user)
            | Q(bug__reporter=user)
            | Q(bug__created_by=user)
        )

    def rooms(self, instance: Comment) -> list[str]:
        return [relay.company_room(instance.company_id), relay.project_room(instance.project_id)]

    def check_update(self, instance: Comment, ctx: AuthContext) -> None:
        if instance.created_by_id != ctx.user_id:
            raise PermissionDeniedError("Only the author can edit this comment")

    def check_delete(self, instance: Comment, ctx: AuthContext) -> None:
        if instance.created_by_id != ctx.user_id:
            raise PermissionDeniedError("Only the author can delete this comment")

    def update(self, ctx: AuthContext, pk: UUID | str, payload: dict[str, Any]) -> Comment:
        if "task_id" in payload or "bug_id" in payload:
            raise ValidationError("A comment cannot be moved", details={"field": "task_id"})
        return super().update(ctx, pk, payload)

    def after_create(self, instance: Comment, ctx: AuthContext) -> None:
        target = instance.task or instance.bug
        label = "task" if instance.task_id else "bug"
        title = target.name if instance.task_id else target.title
        relay.emit(
            "comment:added",
            instance.company_id,
            [relay.project_room(target.project_id)],
            {"comment": self.serialize(instance), f"{label}_id": str(target.pk)},
        )
        notify(
            instance.company_id,
            [u.pk for u in instance.mentions.all()],
            Notification.Type.COMMENT_MENTION,
            "Mentioned in Comment",
            f'You were mentioned in a comment on {label} "{title}"',
            resource_type=label,
            resource_id=target.pk,
            actor_id=ctx.user_id,
        )

    def add(self, ctx: AuthContext, payload: dict[str, Any], *, task: Task | None = None, bug: Bug | None = None) -> Comment:
        """Comment on a task or bug the caller can already see."""
        target = {"task_id": task.pk} if task is not None else {"bug_id": bug.pk}
        return self.create(ctx, {**payload, **target})

    def list_for(self, ctx: AuthContext, *, task: Task | None = None, bug: Bug | None = None, **params: Any):
        base = Q(task=task) if task is not None else Q(bug=bug)
        # Seeing the parent is enough to read its discussion
        return self.builder.build(ctx.company_id, base=base, **params)


task_resource = TaskResource()
comment_resource = CommentResource()
