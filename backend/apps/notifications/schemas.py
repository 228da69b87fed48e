"""
Notifications API schemas.
"""

from uuid import UUID

from ninja import Schema
from pydantic import Field

from apps.core.schemas import ListParams, PaginationOut, ResourceOut


class NotificationOut(ResourceOut):
    recipient_id: UUID
    type: str
    title: str
    message: str
    resource_type: str
    resource_id: UUID | None = None
    is_read: bool


class NotificationListParams(ListParams):
    unread_only: bool = Field(False, description="Only unread notifications")
    type: str | None = Field(None, description="Comma-separated notification types")
    resource_type: str | None = None

    def filters(self):
        filters = super().filters()
        filters.pop("unread_only", None)
        return filters


class NotificationResponse(Schema):
    success: bool = True
    data: NotificationOut


class NotificationListResponse(Schema):
    success: bool = True
    data: list[NotificationOut]
    pagination: PaginationOut
    unread_count: int


class MarkAllReadResponse(Schema):
    success: bool = True
    message: str
    count: int
