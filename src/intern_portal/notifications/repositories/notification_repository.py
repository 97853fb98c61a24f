from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from intern_portal.notifications.models.notification import Notification, NotificationType
from intern_portal.users.models import InternProfile, User, UserRole


class NotificationRepository:
    def __init__(self, db_session: Session):
        self.db = db_session

    def save(self, notification: Notification) -> Notification:
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def save_all(self, notifications: List[Notification]) -> List[Notification]:
        if not notifications:
            return []
        self.db.add_all(notifications)
        self.db.commit()
        for notif in notifications:
            self.db.refresh(notif)
        return notifications

    def get(self, notification_id: int) -> Optional[Notification]:
        return self.db.get(Notification, notification_id)

    def find_by_user_id(
        self,
        user_id: int,
        is_read: Optional[bool] = None,
        notification_type: Optional[NotificationType] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[Notification], int]:
        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        if is_read is not None:
            query = query.filter(Notification.is_read.is_(is_read))
        if notification_type is not None:
            query = query.filter(Notification.type == notification_type)

        total = query.count()
        query = query.order_by(Notification.created_at.desc(), Notification.id.desc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all(), total

    def count_unread(self, user_id: int) -> int:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .count()
        )

    def mark_read(self, notification: Notification) -> Notification:
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(notification)
        return notification

    def mark_all_read(self, user_id: int) -> int:
        updated = (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .update({"is_read": True, "read_at": datetime.utcnow()}, synchronize_session=False)
        )
        self.db.commit()
        return updated

    def delete(self, notification: Notification) -> None:
        self.db.delete(notification)
        self.db.commit()

    def find_users_by_roles(self, roles: Iterable[UserRole]) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.role.in_(list(roles)), User.is_active.is_(True))
            .order_by(User.id)
            .all()
        )

    def find_users_by_ids(self, user_ids: Iterable[int]) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.id.in_(list(user_ids)), User.is_active.is_(True))
            .all()
        )

    def find_users_by_intern_ids(self, intern_ids: Iterable[int]) -> List[User]:
        return (
            self.db.query(User)
            .join(InternProfile, InternProfile.user_id == User.id)
            .filter(InternProfile.intern_id.in_(list(intern_ids)), User.is_active.is_(True))
            .all()
        )

    def stats(self) -> dict:
        by_type_priority = (
            self.db.query(Notification.type, Notification.priority, func.count(Notification.id))
            .group_by(Notification.type, Notification.priority)
            .order_by(Notification.type)
            .all()
        )
        unread_by_type = (
            self.db.query(Notification.type, func.count(Notification.id))
            .filter(Notification.is_read.is_(False))
            .group_by(Notification.type)
            .all()
        )
        recent = (
            self.db.query(Notification)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(10)
            .all()
        )
        return {
            "by_type_priority": by_type_priority,
            "unread_by_type": unread_by_type,
            "recent": recent,
        }
