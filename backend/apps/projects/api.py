"""
Projects API endpoints - project groups, projects, milestones and task lists.
"""

from uuid import UUID

from django.http import HttpRequest
from ninja import Query, Router

from apps.accounts.schemas import UserListResponse
from apps.accounts.services import user_resource
from apps.core.resources import list_response
from apps.core.schemas import ErrorResponse, MessageResponse, envelope
from apps.core.security import BearerAuth, get_auth_context
from apps.projects.models import Project
from apps.projects.schemas import (
    MilestoneCreate,
    MilestoneListParams,
    MilestoneListResponse,
    MilestoneResponse,
    MilestoneUpdate,
    ProjectCreate,
    ProjectGroupCreate,
    ProjectGroupListParams,
    ProjectGroupListResponse,
    ProjectGroupResponse,
    ProjectGroupUpdate,
    ProjectListParams,
    ProjectListResponse,
    ProjectResponse,
    ProjectStatsResponse,
    ProjectUpdate,
    StatusListResponse,
    TaskListCreate,
    TaskListListParams,
    TaskListListResponse,
    TaskListReorderRequest,
    TaskListResponse,
    TaskListUpdate,
    TeamMemberRequest,
)
from apps.projects.services import (
    milestone_resource,
    project_group_resource,
    project_resource,
    task_list_resource,
)

bearer_auth = BearerAuth()

project_groups_router = Router(tags=["project-groups"], auth=bearer_auth)
projects_router = Router(tags=["projects"], auth=bearer_auth)
milestones_router = Router(tags=["milestones"], auth=bearer_auth)
task_lists_router = Router(tags=["task-lists"], auth=bearer_auth)


# --- Project groups ---


@project_groups_router.get("", response=ProjectGroupListResponse, summary="List project groups")
def list_project_groups(request: HttpRequest, params: Query[ProjectGroupListParams]):
    return list_response(project_group_resource, get_auth_context(request), params)


@project_groups_router.get(
    "/{group_id}",
    response={200: ProjectGroupResponse, 404: ErrorResponse},
    summary="Get project group",
)
def get_project_group(request: HttpRequest, group_id: UUID):
    return envelope(project_group_resource.get(get_auth_context(request), group_id))


@project_groups_router.post(
    "",
    response={201: ProjectGroupResponse, 400: ErrorResponse, 403: ErrorResponse},
    summary="Create project group",
)
def create_project_group(request: HttpRequest, payload: ProjectGroupCreate):
    group = project_group_resource.create(get_auth_context(request), payload.as_payload())
    return 201, envelope(group)


@project_groups_router.put(
    "/{group_id}",
    response={200: ProjectGroupResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Update project group",
)
def update_project_group(request: HttpRequest, group_id: UUID, payload: ProjectGroupUpdate):
    group = project_group_resource.update(get_auth_context(request), group_id, payload.as_payload())
    return envelope(group)


@project_groups_router.delete(
    "/{group_id}",
    response={200: MessageResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Delete project group",
    description="Permanently removes the group; its projects become ungrouped.",
)
def delete_project_group(request: HttpRequest, group_id: UUID):
    project_group_resource.delete(get_auth_context(request), group_id)
    return {"success": True, "message": "Project group deleted successfully"}


# --- Projects ---


@projects_router.get("/statuses", response=StatusListResponse, summary="List project statuses")
def list_project_statuses(request: HttpRequest):
    return envelope(list(Project.Status.values))


@projects_router.get("/users", response=UserListResponse, summary="List assignable users")
def list_project_users(request: HttpRequest):
    users = user_resource.active(get_auth_context(request))
    return envelope(users)


@projects_router.get("", response=ProjectListResponse, summary="List projects")
def list_projects(request: HttpRequest, params: Query[ProjectListParams]):
    return list_response(project_resource, get_auth_context(request), params)


@projects_router.get(
    "/{project_id}",
    response={200: ProjectResponse, 404: ErrorResponse},
    summary="Get project",
)
def get_project(request: HttpRequest, project_id: UUID):
    return envelope(project_resource.get(get_auth_context(request), project_id))


@projects_router.get(
    "/{project_id}/stats",
    response={200: ProjectStatsResponse, 404: ErrorResponse},
    summary="Project statistics",
)
def get_project_stats(request: HttpRequest, project_id: UUID):
    return envelope(project_resource.stats(get_auth_context(request), project_id))


@projects_router.post(
    "",
    response={201: ProjectResponse, 400: ErrorResponse, 403: ErrorResponse},
    summary="Create project",
)
def create_project(request: HttpRequest, payload: ProjectCreate):
    project = project_resource.create(get_auth_context(request), payload.as_payload())
    return 201, envelope(project)


@projects_router.put(
    "/{project_id}",
    response={200: ProjectResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Update project",
)
def update_project(request: HttpRequest, project_id: UUID, payload: ProjectUpdate):
    project = project_resource.update(get_auth_context(request), project_id, payload.as_payload())
    return envelope(project)


@projects_router.delete(
    "/{project_id}",
    response={200: MessageResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Delete project",
)
def delete_project(request: HttpRequest, project_id: UUID):
    project_resource.delete(get_auth_context(request), project_id)
    return {"success": True, "message": "Project deleted successfully"}


@projects_router.post(
    "/{project_id}/team",
    response={200: ProjectResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Add team member",
)
def add_team_member(request: HttpRequest, project_id: UUID, payload: TeamMemberRequest):
    project = project_resource.add_team_member(get_auth_context(request), project_id, payload.user_id)
    return envelope(project)


@projects_router.delete(
    "/{project_id}/team/{user_id}",
    response={200: ProjectResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Remove team member",
)
def remove_team_member(request: HttpRequest, project_id: UUID, user_id: UUID):
    project = project_resource.remove_team_member(get_auth_context(request), project_id, user_id)
    return envelope(project)


# --- Milestones ---


@milestones_router.get("", response=MilestoneListResponse, summary="List milestones")
def list_milestones(request: HttpRequest, params: Query[MilestoneListParams]):
    return list_response(milestone_resource, get_auth_context(request), params)


@milestones_router.get(
    "/{milestone_id}",
    response={200: MilestoneResponse, 404: ErrorResponse},
    summary="Get milestone",
)
def get_milestone(request: HttpRequest, milestone_id: UUID):
    return envelope(milestone_resource.get(get_auth_context(request), milestone_id))


@milestones_router.post(
    "",
    response={201: MilestoneResponse, 400: ErrorResponse, 403: ErrorResponse},
    summary="Create milestone",
)
def create_milestone(request: HttpRequest, payload: MilestoneCreate):
    milestone = milestone_resource.create(get_auth_context(request), payload.as_payload())
    return 201, envelope(milestone)


@milestones_router.put(
    "/{milestone_id}",
    response={200: MilestoneResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Update milestone",
)
def update_milestone(request: HttpRequest, milestone_id: UUID, payload: MilestoneUpdate):
    milestone = milestone_resource.update(get_auth_context(request), milestone_id, payload.as_payload())
    return envelope(milestone)


@milestones_router.delete(
    "/{milestone_id}",
    response={200: MessageResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Delete milestone",
)
def delete_milestone(request: HttpRequest, milestone_id: UUID):
    milestone_resource.delete(get_auth_context(request), milestone_id)
    return {"success": True, "message": "Milestone deleted successfully"}


# --- Task lists ---


@task_lists_router.get("", response=TaskListListResponse, summary="List task lists")
def list_task_lists(request: HttpRequest, params: Query[TaskListListParams]):
    return list_response(task_list_resource, get_auth_context(request), params)


@task_lists_router.put(
    "/reorder",
    response={200: MessageResponse, 400: ErrorResponse, 403: ErrorResponse},
    summary="Reorder task lists",
)
def reorder_task_lists(request: HttpRequest, payload: TaskListReorderRequest):
    task_list_resource.reorder(
        get_auth_context(request),
        payload.project_id,
        [(item.id, item.order) for item in payload.order],
    )
    return {"success": True, "message": "Task lists reordered successfully"}


@task_lists_router.get(
    "/{task_list_id}",
    response={200: TaskListResponse, 404: ErrorResponse},
    summary="Get task list",
)
def get_task_list(request: HttpRequest, task_list_id: UUID):
    return envelope(task_list_resource.get(get_auth_context(request), task_list_id))


@task_lists_router.post(
    "",
    response={201: TaskListResponse, 400: ErrorResponse, 403: ErrorResponse},
    summary="Create task list",
)
def create_task_list(request: HttpRequest, payload: TaskListCreate):
    task_list = task_list_resource.create(get_auth_context(request), payload.as_payload())
    return 201, envelope(task_list)


@task_lists_router.put(
    "/{task_list_id}",
    response={200: TaskListResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Update task list",
)
def update_task_list(request: HttpRequest, task_list_id: UUID, payload: TaskListUpdate):
    task_list = task_list_resource.update(get_auth_context(request), task_list_id, payload.as_payload())
    return envelope(task_list)


@task_lists_router.delete(
    "/{task_list_id}",
    response={200: MessageResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Delete task list",
    description="Soft-deletes the list; its tasks are kept and detached from it.",
)
def delete_task_list(request: HttpRequest, task_list_id: UUID):
    task_list_resource.delete(get_auth_context(request), task_list_id)
    return {"success": True, "message": "Task list deleted successfully"}
