"""
Projects API schemas - project groups, projects, milestones and task lists.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from ninja import Schema
from pydantic import Field

from apps.core.schemas import ListParams, PaginationOut, PartialUpdate, Payload, ResourceOut

# --- Project groups ---


class ProjectGroupOut(ResourceOut):
    name: str
    description: str
    color: str
    project_count: int


class ProjectGroupCreate(Payload):
    name: str | None = Field(None, description="Unique (case-insensitive) within the company", examples=["Alpha"])
    description: str | None = None
    color: str | None = Field(None, description="Display color, defaults to #6366f1")


class ProjectGroupUpdate(PartialUpdate):
    name: str | None = None
    description: str | None = None
    color: str | None = None
    project_count: int | None = None


class ProjectGroupListParams(ListParams):
    pass


class ProjectGroupResponse(Schema):
    success: bool = True
    data: ProjectGroupOut


class ProjectGroupListResponse(Schema):
    success: bool = True
    data: list[ProjectGroupOut]
    pagination: PaginationOut


# --- Projects ---


class ProjectOut(ResourceOut):
    project_key: str
    title: str
    description: str
    owner_id: UUID
    team_member_ids: list[UUID]
    status: str
    visibility: str
    strict_project: bool
    project_group_id: UUID | None
    start_date: date | None
    end_date: date | None
    allocated_hours: Decimal
    progress: int
    tags: list[str]

    @staticmethod
    def resolve_team_member_ids(obj) -> list[UUID]:
        return [user.pk for user in obj.team_members.all()]


class ProjectCreate(Payload):
    title: str | None = Field(None, examples=["Website Redesign"])
    description: str | None = None
    owner_id: UUID | None = Field(None, description="Defaults to the caller")
    team_member_ids: list[UUID] | None = None
    status: str | None = None
    visibility: str | None = None
    strict_project: bool | None = None
    project_group_id: UUID | None = None
    start_date: date | None = None
    end_date: date | None = None
    allocated_hours: Decimal | None = None
    tags: list[str] | None = None


class ProjectUpdate(PartialUpdate):
    project_key: str | None = None
    title: str | None = None
    description: str | None = None
    owner_id: UUID | None = None
    team_member_ids: list[UUID] | None = None
    status: str | None = None
    visibility: str | None = None
    strict_project: bool | None = None
    project_group_id: UUID | None = None
    start_date: date | None = None
    end_date: date | None = None
    allocated_hours: Decimal | None = None
    tags: list[str] | None = None
    progress: int | None = None


class ProjectListParams(ListParams):
    status: str | None = Field(None, description="Comma-separated statuses")
    visibility: str | None = None
    project_group_id: str | None = Field(None, description="Project group id, or 'none' for ungrouped")
    owner_id: UUID | None = None
    team_member_id: UUID | None = None
    start_date_from: date | None = None
    start_date_to: date | None = None
    end_date_from: date | None = None
    end_date_to: date | None = None
    created_from: date | None = None
    created_to: date | None = None
    modified_from: date | None = None
    modified_to: date | None = None


class ProjectResponse(Schema):
    success: bool = True
    data: ProjectOut


class ProjectListResponse(Schema):
    success: bool = True
    data: list[ProjectOut]
    pagination: PaginationOut


class TeamMemberRequest(Schema):
    user_id: UUID


class StatusCount(Schema):
    status: str
    count: int


class HourTotals(Schema):
    billable_hours: Decimal
    non_billable_hours: Decimal
    total_hours: Decimal
    billable_count: int
    non_billable_count: int


class ProjectStatsOut(Schema):
    project: ProjectOut
    tasks: list[StatusCount]
    bugs: list[StatusCount]
    time_logs: HourTotals


class ProjectStatsResponse(Schema):
    success: bool = True
    data: ProjectStatsOut


class StatusListResponse(Schema):
    success: bool = True
    data: list[str]


# --- Milestones ---


class MilestoneOut(ResourceOut):
    project_id: UUID
    name: str
    description: str
    due_date: date | None
    status: str


class MilestoneCreate(Payload):
    project_id: UUID | None = None
    name: str | None = None
    description: str | None = None
    due_date: date | None = None
    status: str | None = None


class MilestoneUpdate(PartialUpdate):
    name: str | None = None
    description: str | None = None
    due_date: date | None = None
    status: str | None = None


class MilestoneListParams(ListParams):
    project_id: UUID | None = None
    status: str | None = None
    due_from: date | None = None
    due_to: date | None = None


class MilestoneResponse(Schema):
    success: bool = True
    data: MilestoneOut


class MilestoneListResponse(Schema):
    success: bool = True
    data: list[MilestoneOut]
    pagination: PaginationOut


# --- Task lists ---


class TaskListOut(ResourceOut):
    project_id: UUID
    name: str
    description: str
    related_milestone_id: UUID | None
    flag: str
    order: int
    tags: list[str]


class TaskListCreate(Payload):
    project_id: UUID | None = None
    name: str | None = None
    description: str | None = None
    related_milestone_id: UUID | None = None
    flag: str | None = None
    order: int | None = Field(None, description="Defaults to the end of the project's lists")
    tags: list[str] | None = None


class TaskListUpdate(PartialUpdate):
    name: str | None = None
    description: str | None = None
    related_milestone_id: UUID | None = None
    flag: str | None = None
    order: int | None = None
    tags: list[str] | None = None


class TaskListListParams(ListParams):
    project_id: UUID | None = None
    flag: str | None = None
    related_milestone_id: UUID | None = None


class TaskListResponse(Schema):
    success: bool = True
    data: TaskListOut


class TaskListListResponse(Schema):
    success: bool = True
    data: list[TaskListOut]
    pagination: PaginationOut


class TaskListPosition(Schema):
    id: UUID
    order: int = Field(..., ge=0)


class TaskListReorderRequest(Schema):
    project_id: UUID
    order: list[TaskListPosition]
