"""
Bugs API endpoints - bugs, their board view and bug comments.
"""

from uuid import UUID

from django.http import HttpRequest
from ninja import Query, Router

from apps.bugs.models import Bug
from apps.bugs.schemas import (
    BugAssignRequest,
    BugCreate,
    BugKanbanParams,
    BugKanbanResponse,
    BugListParams,
    BugPageResponse,
    BugResponse,
    BugStatusRequest,
    BugUpdate,
)
from apps.bugs.services import bug_resource
from apps.core.resources import list_response
from apps.core.schemas import ErrorResponse, MessageResponse, envelope
from apps.core.security import BearerAuth, get_auth_context
from apps.projects.schemas import StatusListResponse
from apps.tasks.schemas import CommentCreate, CommentListParams, CommentPageResponse, CommentResponse
from apps.tasks.services import comment_resource

router = Router(tags=["bugs"], auth=BearerAuth())


@router.get("/statuses", response=StatusListResponse, summary="List bug statuses")
def list_bug_statuses(request: HttpRequest):
    return envelope(list(Bug.Status.values))


@router.get("/kanban", response=BugKanbanResponse, summary="Bugs by status")
def get_bug_kanban(request: HttpRequest, params: Query[BugKanbanParams]):
    return envelope(bug_resource.kanban(get_auth_context(request), params.project_id))


@router.get("", response=BugPageResponse, summary="List bugs")
def list_bugs(request: HttpRequest, params: Query[BugListParams]):
    return list_response(bug_resource, get_auth_context(request), params)


@router.get("/{bug_id}", response={200: BugResponse, 404: ErrorResponse}, summary="Get bug")
def get_bug(request: HttpRequest, bug_id: UUID):
    return envelope(bug_resource.get(get_auth_context(request), bug_id))


@router.post("", response={201: BugResponse, 400: ErrorResponse}, summary="Report bug")
def create_bug(request: HttpRequest, payload: BugCreate):
    bug = bug_resource.create(get_auth_context(request), payload.as_payload())
    return 201, envelope(bug)


@router.put("/{bug_id}", response={200: BugResponse, 400: ErrorResponse, 404: ErrorResponse}, summary="Update bug")
def update_bug(request: HttpRequest, bug_id: UUID, payload: BugUpdate):
    bug = bug_resource.update(get_auth_context(request), bug_id, payload.as_payload())
    return envelope(bug)


@router.delete("/{bug_id}", response={200: MessageResponse, 404: ErrorResponse}, summary="Delete bug")
def delete_bug(request: HttpRequest, bug_id: UUID):
    bug_resource.delete(get_auth_context(request), bug_id)
    return {"success": True, "message": "Bug deleted successfully"}


@router.put(
    "/{bug_id}/assign",
    response={200: BugResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Assign bug",
)
def assign_bug(request: HttpRequest, bug_id: UUID, payload: BugAssignRequest):
    return envelope(bug_resource.assign(get_auth_context(request), bug_id, payload.assignee_id))


@router.put(
    "/{bug_id}/status",
    response={200: BugResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Change bug status",
)
def update_bug_status(request: HttpRequest, bug_id: UUID, payload: BugStatusRequest):
    return envelope(bug_resource.set_status(get_auth_context(request), bug_id, payload.status))


# --- Comments ---


@router.get(
    "/{bug_id}/comments",
    response={200: CommentPageResponse, 404: ErrorResponse},
    summary="List bug comments",
)
def list_bug_comments(request: HttpRequest, bug_id: UUID, params: Query[CommentListParams]):
    ctx = get_auth_context(request)
    bug = bug_resource.get(ctx, bug_id)
    page = comment_resource.list_for(
        ctx,
        bug=bug,
        page=params.page,
        limit=params.limit,
        search=params.search,
        sort=params.sort,
    )
    return {"success": True, "data": page.data, "pagination": page.pagination.as_dict()}


@router.post(
    "/{bug_id}/comments",
    response={201: CommentResponse, 400: ErrorResponse, 404: ErrorResponse},
    summary="Comment on bug",
)
def add_bug_comment(request: HttpRequest, bug_id: UUID, payload: CommentCreate):
    ctx = get_auth_context(request)
    bug = bug_resource.get(ctx, bug_id)
    comment = comment_resource.add(ctx, payload.as_payload(), bug=bug)
    return 201, envelope(comment)
