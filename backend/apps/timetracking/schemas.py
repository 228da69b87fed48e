"""
Time tracking API schemas - time logs, hour aggregates and timesheets.
"""

import datetime as dt
from decimal import Decimal
from uuid import UUID

from ninja import Schema
from pydantic import Field

from apps.core.schemas import ListParams, PaginationOut, PartialUpdate, Payload, ResourceOut

# --- Time logs ---


class TimeLogOut(ResourceOut):
    log_key: str
    title: str
    project_id: UUID
    task_id: UUID | None
    bug_id: UUID | None
    user_id: UUID
    date: dt.date
    hours: Decimal
    start_time: str
    end_time: str
    billing_type: str
    approval_status: str
    approved_by_id: UUID | None
    approved_at: dt.datetime | None
    rejection_reason: str
    notes: str


class TimeLogCreate(Payload):
    title: str | None = None
    project_id: UUID | None = None
    task_id: UUID | None = None
    bug_id: UUID | None = None
    user_id: UUID | None = Field(None, description="Defaults to the caller; managers may log for others")
    date: dt.date | None = None
    hours: Decimal | None = Field(None, examples=["7.5"])
    start_time: str | None = Field(None, examples=["09:00"])
    end_time: str | None = Field(None, examples=["17:00"])
    billing_type: str | None = None
    notes: str | None = None


class TimeLogUpdate(PartialUpdate):
    title: str | None = None
    task_id: UUID | None = None
    bug_id: UUID | None = None
    date: dt.date | None = None
    hours: Decimal | None = None
    start_time: str | None = None
    end_time: str | None = None
    billing_type: str | None = None
    notes: str | None = None
    log_key: str | None = None
    approval_status: str | None = None
    approved_at: dt.datetime | None = None
    rejection_reason: str | None = None


class TimeLogListParams(ListParams):
    project_id: UUID | None = None
    task_id: UUID | None = None
    bug_id: UUID | None = None
    user_id: UUID | None = None
    approval_status: str | None = Field(None, description="Comma-separated approval statuses")
    billing_type: str | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None


class AggregateParams(Schema):
    project_id: UUID | None = None
    user_id: UUID | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None


class RejectRequest(Schema):
    reason: str = Field("", max_length=500)


class TimeLogResponse(Schema):
    success: bool = True
    data: TimeLogOut


class TimeLogPageResponse(Schema):
    success: bool = True
    data: list[TimeLogOut]
    pagination: PaginationOut


class HourSummary(Schema):
    billable_hours: Decimal
    non_billable_hours: Decimal
    total_hours: Decimal
    billable_count: int
    non_billable_count: int


class DailyHours(Schema):
    date: dt.date
    total_hours: Decimal
    billable_hours: Decimal
    count: int


class AggregatesOut(Schema):
    summary: HourSummary
    by_date: list[DailyHours]


class AggregatesResponse(Schema):
    success: bool = True
    data: AggregatesOut


# --- Timesheets ---


class TimesheetOut(ResourceOut):
    user_id: UUID
    start_date: dt.date
    end_date: dt.date
    status: str
    total_hours: Decimal
    billable_hours: Decimal
    non_billable_hours: Decimal
    submitted_at: dt.datetime | None
    approved_by_id: UUID | None
    approved_at: dt.datetime | None
    rejection_reason: str


class TimesheetCreate(Payload):
    start_date: dt.date | None = None
    end_date: dt.date | None = None


class TimesheetUpdate(PartialUpdate):
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    status: str | None = None
    total_hours: Decimal | None = None
    billable_hours: Decimal | None = None
    non_billable_hours: Decimal | None = None
    submitted_at: dt.datetime | None = None
    approved_at: dt.datetime | None = None
    rejection_reason: str | None = None


class TimesheetListParams(ListParams):
    status: str | None = Field(None, description="Comma-separated statuses")
    user_id: UUID | None = None
    start_date: dt.date | None = Field(None, description="Timesheets starting on or after")
    end_date: dt.date | None = Field(None, description="Timesheets ending on or before")


class TimesheetResponse(Schema):
    success: bool = True
    data: TimesheetOut


class TimesheetPageResponse(Schema):
    success: bool = True
    data: list[TimesheetOut]
    pagination: PaginationOut
