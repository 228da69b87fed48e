"""
Tasks API endpoints - tasks, kanban board, task comments and comment edits.
"""

from uuid import UUID

from django.http import HttpRequest
from ninja import Query, Router

from apps.core.resources import list_response
from apps.core.schemas import ErrorResponse, MessageResponse, envelope
from apps.core.security import BearerAuth, get_auth_context
from apps.projects.schemas import StatusListResponse
from apps.tasks.models import Task
from apps.tasks.schemas import (
    AssignRequest,
    CommentCreate,
    CommentListParams,
    CommentPageResponse,
    CommentResponse,
    CommentUpdate,
    KanbanParams,
    KanbanResponse,
    StatusRequest,
    TaskCreate,
    TaskFilterParams,
    TaskPageResponse,
    TaskResponse,
    TaskUpdate,
)
from apps.tasks.services import comment_resource, task_resource

bearer_auth = BearerAuth()

tasks_router = Router(tags=["tasks"], auth=bearer_auth)
comments_router = Router(tags=["comments"], auth=bearer_auth)


@tasks_router.get("/statuses", response=StatusListResponse, summary="List task statuses")
def list_task_statuses(request: HttpRequest):
    return envelope(list(Task.Status.values))


@tasks_router.get(
    "/kanban",
    response=KanbanResponse,
    summary="Tasks by status",
    description="Visible tasks grouped by status; each column holds at most 50 tasks.",
)
def get_kanban(request: HttpRequest, params: Query[KanbanParams]):
    return envelope(task_resource.kanban(get_auth_context(request), params.project_id))


@tasks_router.get("", response=TaskPageResponse, summary="List tasks")
def list_tasks(request: HttpRequest, params: Query[TaskFilterParams]):
    return list_response(task_resource, get_auth_context(request), params)


@tasks_router.get("/{task_id}", response={200: TaskResponse, 404: ErrorResponse}, summary="Get task")
def get_task(request: HttpRequest, task_id: UUID):
    return envelope(task_resource.get(get_auth_context(request), task_id))


@tasks_router.post("", response={201: TaskResponse, 400: ErrorResponse}, summary="Create task")
def create_task(request: HttpRequest, payload: TaskCreate):
    task = task_resource.create(get_auth_context(request), payload.as_payload())
    return 201, envelope(task)


@tasks_router.put("/{task_id}", response={200: TaskResponse, 400: ErrorResponse, 404: ErrorResponse}, summary="Update task")
def update_task(request: HttpRequest, task_id: UUID, payload: TaskUpdate):
    task = task_resource.update(get_auth_context(request), task_id, payload.as_payload())
    return envelope(task)


@tasks_router.delete(
    "/{task_id}",
    response={200: MessageResponse, 404: ErrorResponse},
    summary="Delete task",
    description="Soft-deletes the task; its subtasks are kept and detached from it.",
)
def delete_task(request: HttpRequest, task_id: UUID):
    task_resource.delete(get_auth_context(request), task_id)
    return {"success": True, "message": "Task deleted successfully"}


@tasks_router.post(
    "/{task_id}/assign",
    response={200: TaskResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Assign task",
)
def assign_task(request: HttpRequest, task_id: UUID, payload: AssignRequest):
    task = task_resource.assign(get_auth_context(request), task_id, payload.assignee_ids)
    return envelope(task)


@tasks_router.put(
    "/{task_id}/status",
    response={200: TaskResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Change task status",
)
def update_task_status(request: HttpRequest, task_id: UUID, payload: StatusRequest):
    task = task_resource.set_status(get_auth_context(request), task_id, payload.status)
    return envelope(task)


# --- Comments ---


@tasks_router.get(
    "/{task_id}/comments",
    response={200: CommentPageResponse, 404: ErrorResponse},
    summary="List task comments",
)
def list_task_comments(request: HttpRequest, task_id: UUID, params: Query[CommentListParams]):
    ctx = get_auth_context(request)
    task = task_resource.get(ctx, task_id)
    page = comment_resource.list_for(
        ctx,
        task=task,
        page=params.page,
        limit=params.limit,
        search=params.search,
        sort=params.sort,
    )
    return {"success": True, "data": page.data, "pagination": page.pagination.as_dict()}


@tasks_router.post(
    "/{task_id}/comments",
    response={201: CommentResponse, 400: ErrorResponse, 404: ErrorResponse},
    summary="Comment on task",
)
def add_task_comment(request: HttpRequest, task_id: UUID, payload: CommentCreate):
    ctx = get_auth_context(request)
    task = task_resource.get(ctx, task_id)
    comment = comment_resource.add(ctx, payload.as_payload(), task=task)
    return 201, envelope(comment)


@comments_router.get("/{comment_id}", response={200: CommentResponse, 404: ErrorResponse}, summary="Get comment")
def get_comment(request: HttpRequest, comment_id: UUID):
    return envelope(comment_resource.get(get_auth_context(request), comment_id))


@comments_router.put(
    "/{comment_id}",
    response={200: CommentResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Edit comment",
)
def update_comment(request: HttpRequest, comment_id: UUID, payload: CommentUpdate):
    comment = comment_resource.update(get_auth_context(request), comment_id, payload.as_payload())
    return envelope(comment)


@comments_router.delete(
    "/{comment_id}",
    response={200: MessageResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Delete comment",
)
def delete_comment(request: HttpRequest, comment_id: UUID):
    comment_resource.delete(get_auth_context(request), comment_id)
    return {"success": True, "message": "Comment deleted successfully"}
