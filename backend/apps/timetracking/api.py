"""
Time tracking API endpoints - time logs with approval, hour aggregates and timesheets.
"""

from uuid import UUID

from django.http import HttpRequest
from ninja import Query, Router

from apps.core.resources import list_response
from apps.core.schemas import ErrorResponse, MessageResponse, envelope
from apps.core.security import BearerAuth, get_auth_context
from apps.timetracking.schemas import (
    AggregateParams,
    AggregatesResponse,
    RejectRequest,
    TimeLogCreate,
    TimeLogListParams,
    TimeLogPageResponse,
    TimeLogResponse,
    TimeLogUpdate,
    TimesheetCreate,
    TimesheetListParams,
    TimesheetPageResponse,
    TimesheetResponse,
    TimesheetUpdate,
)
from apps.timetracking.services import time_log_resource, timesheet_resource

bearer_auth = BearerAuth()

timelogs_router = Router(tags=["timelogs"], auth=bearer_auth)
timesheets_router = Router(tags=["timesheets"], auth=bearer_auth)


# --- Time logs ---


@timelogs_router.get(
    "/aggregates",
    response=AggregatesResponse,
    summary="Hour totals",
    description="Billable and non-billable totals plus per-day sums. Non-managers only see their own hours.",
)
def get_aggregates(request: HttpRequest, params: Query[AggregateParams]):
    data = time_log_resource.aggregates(get_auth_context(request), **params.model_dump())
    return envelope(data)


@timelogs_router.get("", response=TimeLogPageResponse, summary="List time logs")
def list_time_logs(request: HttpRequest, params: Query[TimeLogListParams]):
    return list_response(time_log_resource, get_auth_context(request), params)


@timelogs_router.get("/{timelog_id}", response={200: TimeLogResponse, 404: ErrorResponse}, summary="Get time log")
def get_time_log(request: HttpRequest, timelog_id: UUID):
    return envelope(time_log_resource.get(get_auth_context(request), timelog_id))


@timelogs_router.post("", response={201: TimeLogResponse, 400: ErrorResponse}, summary="Log time")
def create_time_log(request: HttpRequest, payload: TimeLogCreate):
    time_log = time_log_resource.create(get_auth_context(request), payload.as_payload())
    return 201, envelope(time_log)


@timelogs_router.put(
    "/{timelog_id}",
    response={200: TimeLogResponse, 400: ErrorResponse, 404: ErrorResponse},
    summary="Update time log",
)
def update_time_log(request: HttpRequest, timelog_id: UUID, payload: TimeLogUpdate):
    time_log = time_log_resource.update(get_auth_context(request), timelog_id, payload.as_payload())
    return envelope(time_log)


@timelogs_router.delete("/{timelog_id}", response={200: MessageResponse, 404: ErrorResponse}, summary="Delete time log")
def delete_time_log(request: HttpRequest, timelog_id: UUID):
    time_log_resource.delete(get_auth_context(request), timelog_id)
    return {"success": True, "message": "Time log deleted successfully"}


@timelogs_router.patch(
    "/{timelog_id}/approve",
    response={200: TimeLogResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Approve time log",
)
def approve_time_log(request: HttpRequest, timelog_id: UUID):
    return envelope(time_log_resource.approve(get_auth_context(request), timelog_id))


@timelogs_router.patch(
    "/{timelog_id}/reject",
    response={200: TimeLogResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Reject time log",
)
def reject_time_log(request: HttpRequest, timelog_id: UUID, payload: RejectRequest):
    return envelope(time_log_resource.reject(get_auth_context(request), timelog_id, payload.reason))


# --- Timesheets ---


@timesheets_router.get("", response=TimesheetPageResponse, summary="List timesheets")
def list_timesheets(request: HttpRequest, params: Query[TimesheetListParams]):
    return list_response(timesheet_resource, get_auth_context(request), params)


@timesheets_router.get("/{timesheet_id}", response={200: TimesheetResponse, 404: ErrorResponse}, summary="Get timesheet")
def get_timesheet(request: HttpRequest, timesheet_id: UUID):
    return envelope(timesheet_resource.get(get_auth_context(request), timesheet_id))


@timesheets_router.post(
    "",
    response={201: TimesheetResponse, 400: ErrorResponse},
    summary="Create timesheet",
    description="Creates a Draft timesheet for the caller with totals computed from their time logs.",
)
def create_timesheet(request: HttpRequest, payload: TimesheetCreate):
    timesheet = timesheet_resource.create(get_auth_context(request), payload.as_payload())
    return 201, envelope(timesheet)


@timesheets_router.put(
    "/{timesheet_id}",
    response={200: TimesheetResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Update timesheet",
)
def update_timesheet(request: HttpRequest, timesheet_id: UUID, payload: TimesheetUpdate):
    timesheet = timesheet_resource.update(get_auth_context(request), timesheet_id, payload.as_payload())
    return envelope(timesheet)


@timesheets_router.delete(
    "/{timesheet_id}",
    response={200: MessageResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Delete timesheet",
)
def delete_timesheet(request: HttpRequest, timesheet_id: UUID):
    timesheet_resource.delete(get_auth_context(request), timesheet_id)
    return {"success": True, "message": "Timesheet deleted successfully"}


@timesheets_router.post(
    "/{timesheet_id}/submit",
    response={200: TimesheetResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Submit timesheet",
)
def submit_timesheet(request: HttpRequest, timesheet_id: UUID):
    return envelope(timesheet_resource.submit(get_auth_context(request), timesheet_id))


@timesheets_router.post(
    "/{timesheet_id}/approve",
    response={200: TimesheetResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Approve timesheet",
)
def approve_timesheet(request: HttpRequest, timesheet_id: UUID):
    return envelope(timesheet_resource.approve(get_auth_context(request), timesheet_id))


@timesheets_router.post(
    "/{timesheet_id}/reject",
    response={200: TimesheetResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Reject timesheet",
)
def reject_timesheet(request: HttpRequest, timesheet_id: UUID, payload: RejectRequest):
    return envelope(timesheet_resource.reject(get_auth_context(request), timesheet_id, payload.reason))
