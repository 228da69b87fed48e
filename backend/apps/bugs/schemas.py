"""
Bugs API schemas.
"""

from datetime import date
from uuid import UUID

from ninja import Schema
from pydantic import Field

from apps.core.schemas import ListParams, PaginationOut, PartialUpdate, Payload, ResourceOut


class BugOut(ResourceOut):
    bug_key: str
    title: str
    description: str
    project_id: UUID
    task_id: UUID | None
    reporter_id: UUID
    assignee_id: UUID | None
    status: str
    severity: str
    classification: str
    reproducible: str
    module: str
    due_date: date | None
    tags: list[str]


class BugCreate(Payload):
    title: str | None = Field(None, examples=["Login button unresponsive"])
    description: str | None = None
    project_id: UUID | None = None
    task_id: UUID | None = None
    reporter_id: UUID | None = Field(None, description="Defaults to the caller")
    assignee_id: UUID | None = None
    status: str | None = None
    severity: str | None = None
    classification: str | None = None
    reproducible: str | None = None
    module: str | None = None
    due_date: date | None = None
    tags: list[str] | None = None


class BugUpdate(PartialUpdate):
    project_id: UUID | None = None
    bug_key: str | None = None
    title: str | None = None
    description: str | None = None
    task_id: UUID | None = None
    assignee_id: UUID | None = None
    status: str | None = None
    severity: str | None = None
    classification: str | None = None
    reproducible: str | None = None
    module: str | None = None
    due_date: date | None = None
    tags: list[str] | None = None


class BugListParams(ListParams):
    project_id: UUID | None = None
    task_id: UUID | None = None
    status: str | None = Field(None, description="Comma-separated statuses")
    severity: str | None = Field(None, description="Comma-separated severities")
    classification: str | None = None
    assignee_id: UUID | None = None
    reporter_id: UUID | None = None
    module: str | None = None
    due_before: date | None = None


class BugKanbanParams(Schema):
    project_id: UUID | None = None


class BugResponse(Schema):
    success: bool = True
    data: BugOut


class BugPageResponse(Schema):
    success: bool = True
    data: list[BugOut]
    pagination: PaginationOut


class BugColumn(Schema):
    status: str
    count: int
    items: list[BugOut]


class BugKanbanResponse(Schema):
    success: bool = True
    data: list[BugColumn]


class BugAssignRequest(Schema):
    assignee_id: UUID | None


class BugStatusRequest(Schema):
    status: str
