"""
Time tracking services - time logs with manager approval, hour aggregates
and the timesheet review workflow.

Timesheet workflow:
    Draft --submit (owner)--> Pending --approve (manager)--> Approved
                                      --reject (manager)---> Rejected
"""

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from apps.accounts.models import User
from apps.bugs.models import Bug
from apps.core.auth import AuthContext
from apps.core.exceptions import InvalidReferenceError, PermissionDeniedError, ValidationError
from apps.core.guards import MutationGuard, Reference, current_value, date_range
from apps.core.listing import FilterField
from apps.core.logging import get_logger
from apps.core.resources import Resource
from apps.core.store import ScopedStore
from apps.core.utils import sequential_key
from apps.notifications.models import Notification
from apps.notifications.services import notify
from apps.projects.models import Project
from apps.realtime import relay
from apps.tasks.models import Task
from apps.timetracking.models import BillingType, TimeLog, Timesheet
from apps.timetracking.schemas import TimeLogOut, TimesheetOut

logger = get_logger(__name__)

ZERO = Decimal("0")
BILLABLE = Q(billing_type=BillingType.BILLABLE)
NON_BILLABLE = ~Q(billing_type=BillingType.BILLABLE)


def hour_totals(company_id: UUID, query: Q | None = None) -> dict[str, Any]:
    """Billable / non-billable hour sums and log counts over the tenant's active time logs."""
    totals = ScopedStore(TimeLog).find_scoped(company_id, query).aggregate(
        billable_hours=Sum("hours", filter=BILLABLE),
        non_billable_hours=Sum("hours", filter=NON_BILLABLE),
        billable_count=Count("pk", filter=BILLABLE),
        non_billable_count=Count("pk", filter=NON_BILLABLE),
    )
    billable = totals["billable_hours"] or ZERO
    non_billable = totals["non_billable_hours"] or ZERO
    return {
        "billable_hours": billable,
        "non_billable_hours": non_billable,
        "total_hours": billable + non_billable,
        "billable_count": totals["billable_count"],
        "non_billable_count": totals["non_billable_count"],
    }


def hours_by_date(company_id: UUID, query: Q | None = None) -> list[dict[str, Any]]:
    rows = (
        ScopedStore(TimeLog)
        .find_scoped(company_id, query)
        .order_by()
        .values("date")
        .annotate(
            total_hours=Sum("hours"),
            billable_hours=Sum("hours", filter=BILLABLE),
            count=Count("pk"),
        )
        .order_by("date")
    )
    return [{**row, "billable_hours": row["billable_hours"] or ZERO} for row in rows]


def _work_items_in_project(cleaned: dict[str, Any], existing: TimeLog | None) -> None:
    project = current_value(cleaned, existing, "project")
    if project is None:
        return
    for name in ("task", "bug"):
        item = cleaned.get(name)
        if item is not None and item.project_id != project.pk:
            raise InvalidReferenceError(
                f"{name.capitalize()} belongs to a different project",
                field=f"{name}_id",
            )


class TimeLogResource(Resource[TimeLog]):
    """
    Time logs. Users log and edit their own hours; managers see every log
    and approve or reject them.
    """

    model = TimeLog
    event_prefix = "timelog"
    out_schema = TimeLogOut
    guard = MutationGuard(
        TimeLog,
        required=["project_id", "date", "hours"],
        references=[
            Reference("project", Project),
            Reference("task", Task),
            Reference("bug", Bug),
            Reference("user", User),
        ],
        consistency=[_work_items_in_project],
        read_only=["approval_status", "approved_at", "rejection_reason"],
        messages={
            "project_id": "Project is required",
            "date": "Date is required",
            "hours": "Hours are required",
        },
    )
    search_fields = ("title", "notes", "log_key")
    filters = {
        "project_id": FilterField("project_id"),
        "task_id": FilterField("task_id"),
        "bug_id": FilterField("bug_id"),
        "user_id": FilterField("user_id"),
        "approval_status": FilterField("approval_status", many=True),
        "billing_type": FilterField("billing_type"),
        "start_date": FilterField("date__gte"),
        "end_date": FilterField("date__lte"),
    }
    sort_fields = ("date", "hours", "log_key", "approval_status", "created_at", "updated_at")
    default_sort = "-date"

    def visibility(self, ctx: AuthContext) -> Q:
        return Q(user=ctx.user) | Q(created_by=ctx.user)

    def rooms(self, instance: TimeLog) -> list[str]:
        return [
            relay.company_room(instance.company_id),
            relay.project_room(instance.project_id),
            relay.user_room(instance.user_id),
        ]

    def create(self, ctx: AuthContext, payload: dict[str, Any]) -> TimeLog:
        user_id = payload.get("user_id")
        if user_id is None:
            payload = {**payload, "user_id": ctx.user_id}
        elif str(user_id) != str(ctx.user_id) and not ctx.is_manager:
            raise PermissionDeniedError("You can only log time for yourself")
        return super().create(ctx, payload)

    def update(self, ctx: AuthContext, pk: UUID | str, payload: dict[str, Any]) -> TimeLog:
        if "user_id" in payload and not ctx.is_manager:
            raise PermissionDeniedError("You can only log time for yourself")
        return super().update(ctx, pk, payload)

    def before_create(self, instance: TimeLog, ctx: AuthContext) -> None:
        # Soft-deleted rows count too, so keys are never reused
        number = TimeLog.objects.filter(company_id=ctx.company_id).count() + 1
        instance.log_key = sequential_key("TL-", number, width=5)

    def check_update(self, instance: TimeLog, ctx: AuthContext) -> None:
        if instance.approval_status == TimeLog.ApprovalStatus.APPROVED and not ctx.is_manager:
            raise ValidationError("Approved time logs cannot be changed", code="INVALID_STATUS")

    check_delete = check_update

    def before_update(self, instance: TimeLog, ctx: AuthContext) -> None:
        # An edited log needs a fresh review
        if instance.approval_status == TimeLog.ApprovalStatus.APPROVED:
            instance.approval_status = TimeLog.ApprovalStatus.PENDING
            instance.approved_by = None
            instance.approved_at = None


    # --- Approval ---

    def approve(self, ctx: AuthContext, pk: UUID) -> TimeLog:
        return self._review(ctx, pk, TimeLog.ApprovalStatus.APPROVED)

    def reject(self, ctx: AuthContext, pk: UUID, reason: str = "") -> TimeLog:
        return self._review(ctx, pk, TimeLog.ApprovalStatus.REJECTED, reason)

    def _review(self, ctx: AuthContext, pk: UUID, status: str, reason: str = "") -> TimeLog:
        ctx.require_manager()
        with transaction.atomic():
            time_log = self.get(ctx, pk)
            previous = time_log.approval_status
            time_log.approval_status = status
            time_log.approved_by = ctx.user
            time_log.approved_at = timezone.now()
            time_log.rejection_reason = reason.strip() if status == TimeLog.ApprovalStatus.REJECTED else ""
            time_log.save(
                update_fields=["approval_status", "approved_by", "approved_at", "rejection_reason", "updated_at"]
            )
            self.emit(
                "timelog:status_changed",
                time_log,
                {
                    "timelog_id": str(time_log.pk),
                    "approval_status": status,
                    "previous_status": previous,
                    "timelog": self.serialize(time_log),
                },
            )
        logger.info("timelog_reviewed", record_id=str(time_log.pk), approval_status=status)
        return time_log

    # --- Reporting ---

    def aggregates(
        self,
        ctx: AuthContext,
        *,
        project_id: UUID | None = None,
        user_id: UUID | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> dict[str, Any]:
        """Hour totals and per-day sums over the logs the caller can see."""
        query = Q()
        if not ctx.is_manager:
            query &= self.visibility(ctx)
        elif user_id:
            query &= Q(user_id=user_id)
        if project_id:
            query &= Q(project_id=project_id)
        if start_date:
            query &= Q(date__gte=start_date)
        if end_date:
            query &= Q(date__lte=end_date)
        return {
            "summary": hour_totals(ctx.company_id, query),
            "by_date": hours_by_date(ctx.company_id, query),
        }


def _timesheet_totals(timesheet: Timesheet) -> dict[str, Decimal]:
    totals = hour_totals(
        timesheet.company_id,
        Q(user_id=timesheet.user_id, date__gte=timesheet.start_date, date__lte=timesheet.end_date),
    )
    return {
        "total_hours": totals["total_hours"],
        "billable_hours": totals["billable_hours"],
        "non_billable_hours": totals["non_billable_hours"],
    }


class TimesheetResource(Resource[Timesheet]):
    """
    A user's hours over a date range. Totals are computed from the owner's
    time logs in the range on create, on date changes and on submit.
    """

    model = Timesheet
    event_prefix = "timesheet"
    out_schema = TimesheetOut
    guard = MutationGuard(
        Timesheet,
        required=["start_date", "end_date"],
        validators=[date_range("start_date", "end_date", "End date cannot be before start date")],
        read_only=[
            "status",
            "total_hours",
            "billable_hours",
            "non_billable_hours",
            "submitted_at",
            "approved_at",
            "rejection_reason",
        ],
        messages={"start_date": "Start date is required", "end_date": "End date is required"},
    )
    filters = {
        "status": FilterField("status", many=True),
        "user_id": FilterField("user_id"),
        "start_date": FilterField("start_date__gte"),
        "end_date": FilterField("end_date__lte"),
    }
    sort_fields = ("start_date", "end_date", "status", "total_hours", "created_at", "updated_at")
    default_sort = "-start_date"

    EDITABLE_STATUSES = frozenset({Timesheet.Status.DRAFT, Timesheet.Status.REJECTED})

    def visibility(self, ctx: AuthContext) -> Q:
        return Q(user=ctx.user)

    def rooms(self, instance: Timesheet) -> list[str]:
        return [relay.company_room(instance.company_id), relay.user_room(instance.user_id)]

    def create(self, ctx: AuthContext, payload: dict[str, Any]) -> Timesheet:
        with transaction.atomic():
            self._check_overlap(ctx, payload.get("start_date"), payload.get("end_date"))
            return super().create(ctx, payload)

    def before_create(self, instance: Timesheet, ctx: AuthContext) -> None:
        instance.user = ctx.user
        instance.status = Timesheet.Status.DRAFT
        for name, value in _timesheet_totals(instance).items():
            setattr(instance, name, value)

    def update(self, ctx: AuthContext, pk: UUID | str, payload: dict[str, Any]) -> Timesheet:
        with transaction.atomic():
            timesheet = self.get(ctx, pk)
            self.check_update(timesheet, ctx)
            self._check_overlap(
                ctx,
                payload.get("start_date", timesheet.start_date),
                payload.get("end_date", timesheet.end_date),
                exclude=timesheet.pk,
            )
            return super().update(ctx, pk, payload)

    def before_update(self, instance: Timesheet, ctx: AuthContext) -> None:
        for name, value in _timesheet_totals(instance).items():
            setattr(instance, name, value)

    def check_update(self, instance: Timesheet, ctx: AuthContext) -> None:
        if instance.user_id != ctx.user_id:
            raise PermissionDeniedError("Only the owner can change this timesheet")
        if instance.status not in self.EDITABLE_STATUSES:
            raise ValidationError(
                f"{instance.status} timesheets cannot be changed",
                code="INVALID_STATUS",
            )

    def check_delete(self, instance: Timesheet, ctx: AuthContext) -> None:
        if instance.user_id != ctx.user_id and not ctx.is_manager:
            raise PermissionDeniedError("Only the owner can delete this timesheet")
        if instance.status == Timesheet.Status.APPROVED:
            raise ValidationError("Approved timesheets cannot be deleted", code="INVALID_STATUS")

    def _check_overlap(self, ctx: AuthContext, start: Any, end: Any, exclude: UUID | None = None) -> None:
        if not start or not end:
            return
        overlapping = self.store.find_scoped(
            ctx.company_id,
            Q(user=ctx.user, start_date__lte=end, end_date__gte=start),
        )
        if exclude is not None:
            overlapping = overlapping.exclude(pk=exclude)
        if overlapping.exists():
            raise ValidationError("A timesheet already exists for this period", code="TIMESHEET_EXISTS")

    # --- Workflow ---

    def submit(self, ctx: AuthContext, pk: UUID) -> Timesheet:
        """
        Owner hands a draft in for review; totals are recomputed first.

        A rejected timesheet can be corrected and submitted again.
        """
        with transaction.atomic():
            timesheet = self.get(ctx, pk)
            if timesheet.user_id != ctx.user_id:
                raise PermissionDeniedError("Only the owner can submit this timesheet")
            if timesheet.status not in self.EDITABLE_STATUSES:
                raise ValidationError(
                    "Only draft or rejected timesheets can be submitted",
                    code="INVALID_STATUS",
                    details={"status": timesheet.status},
                )
            previous = timesheet.status
            for name, value in _timesheet_totals(timesheet).items():
                setattr(timesheet, name, value)
            timesheet.status = Timesheet.Status.PENDING
            timesheet.submitted_at = timezone.now()
            timesheet.rejection_reason = ""
            timesheet.save()
            self._status_changed(timesheet, previous)
        logger.info("timesheet_submitted", record_id=str(timesheet.pk), total_hours=str(timesheet.total_hours))
        return timesheet

    def approve(self, ctx: AuthContext, pk: UUID) -> Timesheet:
        ctx.require_manager()
        with transaction.atomic():
            timesheet = self.get(ctx, pk)
            self._require_status(timesheet, Timesheet.Status.PENDING, "Only pending timesheets can be approved")
            timesheet.status = Timesheet.Status.APPROVED
            timesheet.approved_by = ctx.user
            timesheet.approved_at = timezone.now()
            timesheet.rejection_reason = ""
            timesheet.save()
            self._status_changed(timesheet, Timesheet.Status.PENDING)
            notify(
                timesheet.company_id,
                [timesheet.user_id],
                Notification.Type.TIMESHEET_STATUS,
                "Timesheet Approved",
                "Your timesheet has been approved",
                resource_type=Notification.ResourceType.TIMESHEET,
                resource_id=timesheet.pk,
                actor_id=ctx.user_id,
            )
        logger.info("timesheet_approved", record_id=str(timesheet.pk))
        return timesheet

    def reject(self, ctx: AuthContext, pk: UUID, reason: str = "") -> Timesheet:
        ctx.require_manager()
        reason = reason.strip()
        with transaction.atomic():
            timesheet = self.get(ctx, pk)
            self._require_status(timesheet, Timesheet.Status.PENDING, "Only pending timesheets can be rejected")
            timesheet.status = Timesheet.Status.REJECTED
            timesheet.rejection_reason = reason
            timesheet.save()
            self._status_changed(timesheet, Timesheet.Status.PENDING)
            notify(
                timesheet.company_id,
                [timesheet.user_id],
                Notification.Type.TIMESHEET_STATUS,
                "Timesheet Rejected",
                f"Your timesheet was rejected: {reason}" if reason else "Your timesheet was rejected",
                resource_type=Notification.ResourceType.TIMESHEET,
                resource_id=timesheet.pk,
                actor_id=ctx.user_id,
            )
        logger.info("timesheet_rejected", record_id=str(timesheet.pk))
        return timesheet

    @staticmethod
    def _require_status(timesheet: Timesheet, status: str, message: str) -> None:
        if timesheet.status != status:
            raise ValidationError(message, code="INVALID_STATUS", details={"status": timesheet.status})

    def _status_changed(self, timesheet: Timesheet, previous: str) -> None:
        self.emit(
            "timesheet:status_changed",
            timesheet,
            {
                "timesheet_id": str(timesheet.pk),
                "status": timesheet.status,
                "previous_status": previous,
                "timesheet": self.serialize(timesheet),
            },
        )


time_log_resource = TimeLogResource()
timesheet_resource = TimesheetResource()
