"""
Notifications API endpoints - the caller's own inbox.
"""

from uuid import UUID

from django.http import HttpRequest
from ninja import Query, Router

from apps.core.schemas import ErrorResponse, MessageResponse, envelope
from apps.core.security import BearerAuth, get_auth_context
from apps.notifications.schemas import (
    MarkAllReadResponse,
    NotificationListParams,
    NotificationListResponse,
    NotificationResponse,
)
from apps.notifications.services import notification_resource

router = Router(tags=["notifications"], auth=BearerAuth())


@router.get("", response=NotificationListResponse, summary="List my notifications")
def list_notifications(request: HttpRequest, params: Query[NotificationListParams]):
    ctx = get_auth_context(request)
    page = notification_resource.list_page(
        ctx,
        unread_only=params.unread_only,
        page=params.page,
        limit=params.limit,
        search=params.search,
        filters=params.filters(),
        sort=params.sort,
        match=params.match,
    )
    return {
        "success": True,
        "data": page.data,
        "pagination": page.pagination.as_dict(),
        "unread_count": notification_resource.unread_count(ctx),
    }


@router.put("/read-all", response=MarkAllReadResponse, summary="Mark all notifications read")
def mark_all_read(request: HttpRequest):
    count = notification_resource.mark_all_read(get_auth_context(request))
    return {"success": True, "message": "All notifications marked as read", "count": count}


@router.put(
    "/{notification_id}/read",
    response={200: NotificationResponse, 404: ErrorResponse},
    summary="Mark notification read",
)
def mark_read(request: HttpRequest, notification_id: UUID):
    return envelope(notification_resource.mark_read(get_auth_context(request), notification_id))


@router.delete(
    "/{notification_id}",
    response={200: MessageResponse, 404: ErrorResponse},
    summary="Delete notification",
)
def delete_notification(request: HttpRequest, notification_id: UUID):
    notification_resource.delete(get_auth_context(request), notification_id)
    return {"success": True, "message": "Notification deleted successfully"}
