from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from intern_portal.notifications.models.notification import NotificationPriority, NotificationType
from intern_portal.pagination import Pagination
from intern_portal.users.models.user import UserRole


class NotificationResponse(BaseModel):
    id: int
    user_id: int
    intern_id: Optional[int] = None
    type: NotificationType
    title: str
    message: str
    priority: NotificationPriority
    data: Optional[Dict[str, Any]] = None
    is_read: bool = False
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    pagination: Pagination
    unread_count: int


class NotificationReadResponse(BaseModel):
    message: str
    notification: NotificationResponse


class MarkAllReadResponse(BaseModel):
    message: str
    updated_count: int


class SendNotificationRequest(BaseModel):
    user_ids: Optional[List[int]] = None
    intern_ids: Optional[List[int]] = None
    role: Optional[UserRole] = None
    type: NotificationType
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    priority: NotificationPriority = NotificationPriority.MEDIUM
    data: Optional[Dict[str, Any]] = None


class NotificationTarget(BaseModel):
    id: int
    full_name: str
    email: str
    role: UserRole

    model_config = {"from_attributes": True}


class SendNotificationResponse(BaseModel):
    message: str
    sent_count: int
    target_users: List[NotificationTarget]


class TypePriorityCount(BaseModel):
    type: NotificationType
    priority: NotificationPriority
    count: int


class NotificationStatsResponse(BaseModel):
    stats: List[TypePriorityCount]
    unread_stats: Dict[str, int]
    recent_notifications: List[NotificationResponse]
