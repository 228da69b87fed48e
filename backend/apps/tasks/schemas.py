"""
Tasks API schemas - tasks, kanban board and comments.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from ninja import Schema
from pydantic import Field

from apps.core.schemas import ListParams, PaginationOut, PartialUpdate, Payload, ResourceOut

# --- Tasks ---


class TaskOut(ResourceOut):
    task_key: str
    name: str
    description: str
    project_id: UUID
    task_list_id: UUID | None
    parent_task_id: UUID | None
    assignee_ids: list[UUID]
    status: str
    priority: str
    start_date: date | None
    due_date: date | None
    estimated_hours: Decimal
    billing_type: str
    completion_percentage: int
    tags: list[str]

    @staticmethod
    def resolve_assignee_ids(obj) -> list[UUID]:
        return [user.pk for user in obj.assignees.all()]


class TaskCreate(Payload):
    name: str | None = Field(None, examples=["Build login page"])
    description: str | None = None
    project_id: UUID | None = None
    task_list_id: UUID | None = None
    parent_task_id: UUID | None = None
    assignee_ids: list[UUID] | None = None
    status: str | None = None
    priority: str | None = None
    start_date: date | None = None
    due_date: date | None = None
    estimated_hours: Decimal | None = None
    billing_type: str | None = None
    completion_percentage: int | None = None
    tags: list[str] | None = None


class TaskUpdate(PartialUpdate):
    project_id: UUID | None = None
    task_key: str | None = None
    name: str | None = None
    description: str | None = None
    task_list_id: UUID | None = None
    parent_task_id: UUID | None = None
    assignee_ids: list[UUID] | None = None
    status: str | None = None
    priority: str | None = None
    start_date: date | None = None
    due_date: date | None = None
    estimated_hours: Decimal | None = None
    billing_type: str | None = None
    completion_percentage: int | None = None
    tags: list[str] | None = None


class TaskFilterParams(ListParams):
    project_id: UUID | None = None
    task_list_id: UUID | None = None
    parent_task_id: UUID | None = None
    status: str | None = Field(None, description="Comma-separated statuses")
    priority: str | None = Field(None, description="Comma-separated priorities")
    assignee_id: UUID | None = None
    billing_type: str | None = None
    due_from: date | None = None
    due_to: date | None = None


class KanbanParams(Schema):
    project_id: UUID | None = None


class TaskResponse(Schema):
    success: bool = True
    data: TaskOut


class TaskPageResponse(Schema):
    success: bool = True
    data: list[TaskOut]
    pagination: PaginationOut


class KanbanColumn(Schema):
    status: str
    count: int
    items: list[TaskOut]


class KanbanResponse(Schema):
    success: bool = True
    data: list[KanbanColumn]


class AssignRequest(Schema):
    assignee_ids: list[UUID]


class StatusRequest(Schema):
    status: str


# --- Comments ---


class CommentOut(ResourceOut):
    content: str
    task_id: UUID | None
    bug_id: UUID | None
    mention_ids: list[UUID]

    @staticmethod
    def resolve_mention_ids(obj) -> list[UUID]:
        return [user.pk for user in obj.mentions.all()]


class CommentCreate(Payload):
    content: str | None = None
    mention_ids: list[UUID] | None = None


class CommentUpdate(PartialUpdate):
    task_id: UUID | None = None
    bug_id: UUID | None = None
    content: str | None = None
    mention_ids: list[UUID] | None = None


class CommentListParams(ListParams):
    pass


class CommentResponse(Schema):
    success: bool = True
    data: CommentOut


class CommentPageResponse(Schema):
    success: bool = True
    data: list[CommentOut]
    pagination: PaginationOut
