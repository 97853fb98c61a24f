from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from intern_portal.auth.dependencies import get_current_user, require_capability
from intern_portal.auth.schemas.auth_schemas import MessageResponse
from intern_portal.database import get_db
from intern_portal.notifications.models.notification import NotificationType
from intern_portal.notifications.models.schemas import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationReadResponse,
    NotificationResponse,
    NotificationStatsResponse,
    NotificationTarget,
    SendNotificationRequest,
    SendNotificationResponse,
    TypePriorityCount,
)
from intern_portal.notifications.repositories.notification_repository import NotificationRepository
from intern_portal.notifications.services.notification_service import NotificationDispatcher
from intern_portal.pagination import Pagination, offset_for
from intern_portal.users.models.user import User

router = APIRouter(prefix="/notifications", tags=["notifications"])

can_broadcast = require_capability("broadcast")


def get_notification_dispatcher(db: Session = Depends(get_db)) -> NotificationDispatcher:
    repo = NotificationRepository(db)
    return NotificationDispatcher(repo)


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List notifications of the current user"
)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    is_read: Optional[bool] = Query(None, alias="isRead"),
    notification_type: Optional[NotificationType] = Query(None, alias="type"),
    current_user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
):
    notifications, total, unread = dispatcher.get_notifications(
        current_user, is_read, notification_type, offset_for(page, limit), limit
    )
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        pagination=Pagination.build(page, limit, total),
        unread_count=unread,
    )


@router.put(
    "/mark-all-read",
    response_model=MarkAllReadResponse,
    summary="Mark every notification of the current user as read"
)
def mark_all_read(
    current_user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
):
    updated = dispatcher.mark_all_read(current_user)
    return MarkAllReadResponse(message="All notifications marked as read", updated_count=updated)


@router.put(
    "/{notification_id}/read",
    response_model=NotificationReadResponse,
    summary="Mark a notification as read"
)
def mark_notification_as_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
):
    notif = dispatcher.mark_read(notification_id, current_user)
    return NotificationReadResponse(
        message="Notification marked as read",
        notification=NotificationResponse.model_validate(notif),
    )


@router.delete(
    "/{notification_id}",
    response_model=MessageResponse,
    summary="Delete a notification"
)
def delete_notification(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
):
    dispatcher.delete(notification_id, current_user)
    return MessageResponse(message="Notification deleted successfully")


@router.post(
    "/send",
    response_model=SendNotificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a notification to users, interns or a whole role"
)
def send_notification(
    payload: SendNotificationRequest,
    current_user: User = Depends(can_broadcast),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
):
    notifications, targets = dispatcher.send(
        payload.type,
        payload.title,
        payload.message,
        priority=payload.priority,
        data=payload.data,
        user_ids=payload.user_ids,
        intern_ids=payload.intern_ids,
        role=payload.role,
    )
    return SendNotificationResponse(
        message=f"Notification sent to {len(notifications)} users",
        sent_count=len(notifications),
        target_users=[NotificationTarget.model_validate(u) for u in targets],
    )


@router.get(
    "/stats",
    response_model=NotificationStatsResponse,
    summary="Notification counts by type and priority"
)
def notification_stats(
    current_user: User = Depends(can_broadcast),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
):
    stats = dispatcher.stats()
    return NotificationStatsResponse(
        stats=[
            TypePriorityCount(type=n_type, priority=priority, count=count)
            for n_type, priority, count in stats["by_type_priority"]
        ],
        unread_stats={n_type.value: count for n_type, count in stats["unread_by_type"]},
        recent_notifications=[NotificationResponse.model_validate(n) for n in stats["recent"]],
    )
