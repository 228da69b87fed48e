"""
Notifications services - per-user inbox and real-time delivery.
"""

from collections.abc import Iterable
from typing import Any
from uuid import UUID

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.core.auth import AuthContext
from apps.core.exceptions import PermissionDeniedError
from apps.core.listing import FilterField
from apps.core.logging import get_logger
from apps.core.resources import Resource
from apps.notifications.models import Notification
from apps.notifications.schemas import NotificationOut
from apps.realtime import relay

logger = get_logger(__name__)


def notify(
    company_id: UUID,
    recipient_ids: Iterable[UUID],
    type: str,
    title: str,
    message: str,
    *,
    resource_type: str = "",
    resource_id: UUID | None = None,
    actor_id: UUID | None = None,
) -> list[Notification]:
    """
    Create one notification per recipient and push ``notification:new`` to
    each recipient's room after commit.

    The actor never notifies themselves.
    """
    notifications = []
    for recipient_id in dict.fromkeys(recipient_ids):
        if recipient_id is None or recipient_id == actor_id:
            continue
        notification = Notification.objects.create(
            company_id=company_id,
            created_by_id=actor_id,
            recipient_id=recipient_id,
            type=type,
            title=title,
            message=message,
            resource_type=resource_type,
            resource_id=resource_id,
        )
        relay.emit(
            "notification:new",
            company_id,
            [relay.user_room(recipient_id)],
            NotificationOut.from_orm(notification).model_dump(mode="json"),
        )
        notifications.append(notification)
    if notifications:
        logger.info(
            "notifications_created",
            notification_type=type,
            resource_id=str(resource_id) if resource_id else None,
            count=len(notifications),
        )
    return notifications


class NotificationResource(Resource[Notification]):
    """
    A user's own notifications. Nobody, managers included, reads another
    user's inbox; notifications are created by the system only.
    """

    model = Notification
    event_prefix = "notification"
    out_schema = NotificationOut
    filters = {
        "type": FilterField("type", many=True),
        "resource_type": FilterField("resource_type"),
    }
    search_fields = ("title", "message")
    sort_fields = ("created_at", "is_read", "type")
    hard_delete = True
    managers_see_all = False

    def visibility(self, ctx: AuthContext) -> Q:
        return Q(recipient=ctx.user)

    def rooms(self, instance: Notification) -> list[str]:
        return [relay.user_room(instance.recipient_id)]

    def list_page(self, ctx: AuthContext, *, unread_only: bool = False, **params: Any):
        if unread_only:
            params["base"] = Q(is_read=False)
        return super().list_page(ctx, **params)

    def unread_count(self, ctx: AuthContext) -> int:
        return self.visible(ctx, Q(is_read=False)).count()

    def create(self, ctx: AuthContext, payload: dict[str, Any]) -> Notification:
        raise PermissionDeniedError("Notifications cannot be created directly")

    def mark_read(self, ctx: AuthContext, pk: UUID) -> Notification:
        with transaction.atomic():
            notification = self.get(ctx, pk)
            if not notification.is_read:
                notification.is_read = True
                notification.save(update_fields=["is_read", "updated_at"])
        return notification

    def mark_all_read(self, ctx: AuthContext) -> int:
        count = self.visible(ctx, Q(is_read=False)).update(is_read=True, updated_at=timezone.now())
        logger.info("notifications_marked_read", count=count)
        return count


notification_resource = NotificationResource()
