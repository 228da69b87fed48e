"""
Projects services - business logic for project groups, projects, milestones
and task lists.
"""

from typing import Any
from uuid import UUID

from django.db import transaction
from django.db.models import Count, Max, Q
from django.utils import timezone

from apps.accounts.constants import MANAGER_ROLES
from apps.accounts.models import User
from apps.core.auth import AuthContext
from apps.core.exceptions import InvalidReferenceError
from apps.core.guards import MutationGuard, Reference, Unique, date_range
from apps.core.listing import FilterField, parse_uuid
from apps.core.logging import get_logger
from apps.core.resources import Resource
from apps.core.store import ScopedStore
from apps.core.utils import sequential_key
from apps.projects.models import Milestone, Project, ProjectGroup, TaskList
from apps.projects.schemas import MilestoneOut, ProjectGroupOut, ProjectOut, TaskListOut
from apps.realtime import relay

logger = get_logger(__name__)


def _group_or_ungrouped(raw: str) -> UUID | None:
    return None if raw.strip().lower() == "none" else parse_uuid(raw)


def refresh_group_counts(*group_ids: UUID | None) -> None:
    for group in ProjectGroup.objects.filter(pk__in=[g for g in group_ids if g]):
        group.refresh_project_count()


class ProjectGroupResource(Resource[ProjectGroup]):
    """
    Project groups are hard-deleted; deleting one ungroups its projects.
    """

    model = ProjectGroup
    event_prefix = "project_group"
    out_schema = ProjectGroupOut
    guard = MutationGuard(
        ProjectGroup,
        required=["name"],
        unique=[Unique("name", "A project group with this name already exists")],
        read_only=["project_count"],
        messages={"name": "Project group name is required"},
    )
    search_fields = ("name", "description")
    sort_fields = ("name", "project_count", "created_at", "updated_at")
    default_sort = "name"
    hard_delete = True

    def delete_cascades(self, ctx: AuthContext):
        return [self._ungroup_projects]

    @staticmethod
    def _ungroup_projects(group: ProjectGroup) -> None:
        count = Project.objects.filter(project_group=group).update(
            project_group=None,
            updated_at=timezone.now(),
        )
        logger.info("project_group_projects_ungrouped", project_group_id=str(group.pk), count=count)


class ProjectResource(Resource[Project]):
    model = Project
    event_prefix = "project"
    out_schema = ProjectOut
    guard = MutationGuard(
        Project,
        required=["title", "owner_id"],
        references=[
            Reference("owner", User),
            Reference("team_members", User, key="team_member_ids", many=True, label="team members"),
            Reference("project_group", ProjectGroup, label="project group"),
        ],
        validators=[date_range("start_date", "end_date", "End date cannot be before start date")],
        read_only=["progress"],
        messages={"owner_id": "Project owner is required"},
    )
    search_fields = ("title", "project_key")
    filters = {
        "status": FilterField("status", many=True),
        "visibility": FilterField("visibility"),
        "project_group_id": FilterField("project_group_id", parse=_group_or_ungrouped),
        "owner_id": FilterField("owner_id"),
        "team_member_id": FilterField("team_members", spans_many=True),
        "start_date_from": FilterField("start_date__gte"),
        "start_date_to": FilterField("start_date__lte"),
        "end_date_from": FilterField("end_date__gte"),
        "end_date_to": FilterField("end_date__lte"),
        "created_from": FilterField("created_at__date__gte"),
        "created_to": FilterField("created_at__date__lte"),
        "modified_from": FilterField("updated_at__date__gte"),
        "modified_to": FilterField("updated_at__date__lte"),
    }
    sort_fields = ("title", "project_key", "status", "start_date", "end_date", "progress", "created_at", "updated_at")
    prefetch_related = ("team_members",)
    create_roles = MANAGER_ROLES
    update_roles = MANAGER_ROLES
    delete_roles = MANAGER_ROLES

    def visibility(self, ctx: AuthContext) -> Q:
        return (
            Q(owner=ctx.user)
            | Q(team_members=ctx.user)
            | Q(created_by=ctx.user)
            | Q(visibility=Project.Visibility.PUBLIC)
        )

    def rooms(self, instance: Project) -> list[str]:
        return [relay.company_room(instance.company_id), relay.project_room(instance.pk)]

    def create(self, ctx: AuthContext, payload: dict[str, Any]) -> Project:
        if payload.get("owner_id") is None:
            payload = {**payload, "owner_id": ctx.user_id}
        return super().create(ctx, payload)

    def before_create(self, instance: Project, ctx: AuthContext) -> None:
        # Soft-deleted rows count too, so keys are never reused
        number = Project.objects.filter(company_id=ctx.company_id).count() + 1
        instance.project_key = sequential_key("PR-", number)

    def after_create(self, instance: Project, ctx: AuthContext) -> None:
        refresh_group_counts(instance.project_group_id)

    def after_update(self, instance: Project, previous: dict[str, Any], ctx: AuthContext) -> None:
        if previous["project_group_id"] != instance.project_group_id:
            refresh_group_counts(previous["project_group_id"], instance.project_group_id)

    def delete(self, ctx: AuthContext, pk: UUID | str) -> Project:
        with transaction.atomic():
            project = super().delete(ctx, pk)
            refresh_group_counts(project.project_group_id)
        return project

    # --- Team membership ---

    def add_team_member(self, ctx: AuthContext, pk: UUID, user_id: UUID) -> Project:
        ctx.require_roles(*MANAGER_ROLES)
        project = self.get(ctx, pk)
        member_ids = [u.pk for u in project.team_members.all()]
        if user_id in member_ids:
            return project
        return self.update(ctx, pk, {"team_member_ids": [*member_ids, user_id]})

    def remove_team_member(self, ctx: AuthContext, pk: UUID, user_id: UUID) -> Project:
        ctx.require_roles(*MANAGER_ROLES)
        project = self.get(ctx, pk)
        member_ids = [u.pk for u in project.team_members.all() if u.pk != user_id]
        return self.update(ctx, pk, {"team_member_ids": member_ids})

    # --- Reporting ---

    def stats(self, ctx: AuthContext, pk: UUID) -> dict[str, Any]:
        """Task and bug counts by status plus time-log hour totals."""
        from apps.bugs.models import Bug
        from apps.tasks.models import Task
        from apps.timetracking.services import hour_totals

        project = self.get(ctx, pk)
        task_counts = (
            ScopedStore(Task)
            .find_scoped(ctx.company_id, {"project": project})
            .values("status")
            .annotate(count=Count("pk"))
            .order_by("status")
        )
        bug_counts = (
            ScopedStore(Bug)
            .find_scoped(ctx.company_id, {"project": project})
            .values("status")
            .annotate(count=Count("pk"))
            .order_by("status")
        )
        return {
            "project": project,
            "tasks": list(task_counts),
            "bugs": list(bug_counts),
            "time_logs": hour_totals(ctx.company_id, Q(project=project)),
        }


class MilestoneResource(Resource[Milestone]):
    model = Milestone
    event_prefix = "milestone"
    out_schema = MilestoneOut
    guard = MutationGuard(
        Milestone,
        required=["name", "project_id"],
        references=[Reference("project", Project)],
        messages={"name": "Milestone name is required", "project_id": "Project is required"},
    )
    search_fields = ("name", "description")
    filters = {
        "project_id": FilterField("project_id"),
        "status": FilterField("status", many=True),
        "due_from": FilterField("due_date__gte"),
        "due_to": FilterField("due_date__lte"),
    }
    sort_fields = ("name", "due_date", "status", "created_at", "updated_at")
    default_sort = "due_date"
    create_roles = MANAGER_ROLES
    update_roles = MANAGER_ROLES
    delete_roles = MANAGER_ROLES

    def rooms(self, instance: Milestone) -> list[str]:
        return [relay.company_room(instance.company_id), relay.project_room(instance.project_id)]

    def delete_cascades(self, ctx: AuthContext):
        return [self._detach_task_lists]

    @staticmethod
    def _detach_task_lists(milestone: Milestone) -> None:
        TaskList.objects.filter(related_milestone=milestone).update(
            related_milestone=None,
            updated_at=timezone.now(),
        )


def _milestone_in_project(cleaned: dict[str, Any], existing) -> None:
    milestone = cleaned.get("related_milestone")
    project = cleaned.get("project") or (existing.project if existing else None)
    if milestone is not None and project is not None and milestone.project_id != project.pk:
        raise InvalidReferenceError("Milestone belongs to a different project", field="related_milestone_id")


class TaskListResource(Resource[TaskList]):
    model = TaskList
    event_prefix = "task_list"
    out_schema = TaskListOut
    guard = MutationGuard(
        TaskList,
        required=["name", "project_id"],
        references=[
            Reference("project", Project),
            Reference("related_milestone", Milestone, label="milestone"),
        ],
        consistency=[_milestone_in_project],
        messages={"name": "Task list name is required", "project_id": "Project is required"},
    )
    search_fields = ("name", "description")
    filters = {
        "project_id": FilterField("project_id"),
        "flag": FilterField("flag", many=True),
        "related_milestone_id": FilterField("related_milestone_id"),
    }
    sort_fields = ("order", "name", "created_at", "updated_at")
    default_sort = "order"

    def rooms(self, instance: TaskList) -> list[str]:
        return [relay.company_room(instance.company_id), relay.project_room(instance.project_id)]

    def before_create(self, instance: TaskList, ctx: AuthContext) -> None:
        if not instance.order:
            last = (
                self.store.find_scoped(ctx.company_id, {"project_id": instance.project_id})
                .aggregate(last=Max("order"))["last"]
            )
            instance.order = (last or 0) + 1

    def delete_cascades(self, ctx: AuthContext):
        return [self._detach_tasks]

    @staticmethod
    def _detach_tasks(task_list: TaskList) -> None:
        from apps.tasks.models import Task

        Task.objects.filter(task_list=task_list).update(task_list=None, updated_at=timezone.now())

    def reorder(self, ctx: AuthContext, project_id: UUID, positions: list[tuple[UUID, int]]) -> int:
        """
        Set ``order`` for the given lists of one project.

        Ids that are not active lists of that project are ignored.
        """
        project_resource.get(ctx, project_id)
        updated = 0
        now = timezone.now()
        with transaction.atomic():
            for pk, order in positions:
                updated += self.store.find_scoped(ctx.company_id, {"pk": pk, "project_id": project_id}).update(
                    order=order,
                    updated_at=now,
                )
            relay.emit(
                "task_list:reordered",
                ctx.company_id,
                [relay.project_room(project_id)],
                {"project_id": str(project_id), "order": [{"id": str(pk), "order": o} for pk, o in positions]},
            )
        logger.info("task_lists_reordered", project_id=str(project_id), count=updated)
        return updated


project_group_resource = ProjectGroupResource()
project_resource = ProjectResource()
milestone_resource = MilestoneResource()
task_list_resource = TaskListResource()
