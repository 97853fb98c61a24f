import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from intern_portal.errors import Forbidden, NotFound, ValidationFailed
from intern_portal.notifications.models.notification import (
    Notification, NotificationPriority, NotificationType
)
from intern_portal.notifications.repositories.notification_repository import NotificationRepository
from intern_portal.users.models import STAFF_ROLES, User, UserRole

logger = logging.getLogger(__name__)


class NotificationTemplate:
    def __init__(
        self,
        notification_type: NotificationType,
        title: str,
        message: str,
        priority: NotificationPriority = NotificationPriority.MEDIUM,
        data: Optional[Dict[str, Any]] = None,
        intern_id: Optional[int] = None,
    ):
        self.type = notification_type
        self.title = title
        self.message = message
        self.priority = priority
        self.data = data
        self.intern_id = intern_id

    def for_user(self, user_id: int) -> Notification:
        return Notification(
            user_id=user_id,
            intern_id=self.intern_id,
            type=self.type,
            title=self.title,
            message=self.message,
            priority=self.priority,
            data=self.data,
        )


class DocumentUploadedNotification(NotificationTemplate):
    def __init__(self, document):
        intern_name = document.intern.name
        document_type = document.document_type.value
        super().__init__(
            NotificationType.DOCUMENT_UPLOADED,
            title="New Document Uploaded",
            message=f"{intern_name} uploaded {document_type}",
            data={
                "documentId": document.id,
                "documentType": document_type,
                "internName": intern_name,
            },
            intern_id=document.intern_id,
        )


class DocumentStatusChangedNotification(NotificationTemplate):
    TITLES = {
        "approve": "Document Approved",
        "reject": "Document Rejected",
        "request_revision": "Document Revision Requested",
    }
    MESSAGES = {
        "approve": "Your {type} has been approved",
        "reject": "Your {type} has been rejected",
        "request_revision": "Revision requested for your {type}",
    }

    def __init__(self, document, action: str, comments: Optional[str] = None):
        if action not in self.TITLES:
            raise ValueError(f"No notification defined for action '{action}'")
        document_type = document.document_type.value
        super().__init__(
            NotificationType.DOCUMENT_VERIFIED if action == "approve" else NotificationType.DOCUMENT_REJECTED,
            title=self.TITLES[action],
            message=self.MESSAGES[action].format(type=document_type),
            priority=NotificationPriority.HIGH if action == "reject" else NotificationPriority.MEDIUM,
            data={
                "documentId": document.id,
                "documentType": document_type,
                "action": action,
                "comments": comments,
            },
            intern_id=document.intern_id,
        )


class NotificationDispatcher:
    """Creates notifications for lifecycle events and manages read state.

    Fan-out writes go through the repository in a single commit. Callers that
    trigger notifications as a side effect are expected to isolate failures.
    """

    def __init__(self, repository: NotificationRepository):
        self.notification_repository = repository

    def notify_uploaded(self, document) -> List[Notification]:
        recipients = self.notification_repository.find_users_by_roles(STAFF_ROLES)
        template = DocumentUploadedNotification(document)
        notifications = [template.for_user(user.id) for user in recipients]
        return self.notification_repository.save_all(notifications)

    def notify_status_changed(self, document, action: str, comments: Optional[str] = None) -> Optional[Notification]:
        owner = document.intern.user
        if owner is None:
            logger.info("Intern %s has no user account; skipping %s notification", document.intern_id, action)
            return None
        template = DocumentStatusChangedNotification(document, action, comments)
        return self.notification_repository.save(template.for_user(owner.id))

    def send(
        self,
        notification_type: NotificationType,
        title: str,
        message: str,
        priority: NotificationPriority = NotificationPriority.MEDIUM,
        data: Optional[Dict[str, Any]] = None,
        user_ids: Optional[Iterable[int]] = None,
        intern_ids: Optional[Iterable[int]] = None,
        role: Optional[UserRole] = None,
    ) -> Tuple[List[Notification], List[User]]:
        """Administrative fan-out to explicit users, interns and/or a role."""
        targets: List[User] = []
        if user_ids:
            targets.extend(self.notification_repository.find_users_by_ids(user_ids))
        if role is not None:
            targets.extend(self.notification_repository.find_users_by_roles([role]))
        if intern_ids:
            targets.extend(self.notification_repository.find_users_by_intern_ids(intern_ids))

        unique: Dict[int, User] = {}
        for user in targets:
            unique.setdefault(user.id, user)
        if not unique:
            raise ValidationFailed("No target users found", code="NO_TARGET_USERS")

        notifications = [
            Notification(
                user_id=user.id,
                intern_id=user.intern_id,
                type=notification_type,
                title=title,
                message=message,
                priority=priority,
                data=data,
            )
            for user in unique.values()
        ]
        return self.notification_repository.save_all(notifications), list(unique.values())

    def get_notifications(
        self,
        reader: User,
        is_read: Optional[bool] = None,
        notification_type: Optional[NotificationType] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[Notification], int, int]:
        notifications, total = self.notification_repository.find_by_user_id(
            reader.id, is_read, notification_type, offset, limit
        )
        unread = self.notification_repository.count_unread(reader.id)
        return notifications, total, unread

    def _owned(self, notification_id: int, reader: User) -> Notification:
        notif = self.notification_repository.get(notification_id)
        if notif is None:
            raise NotFound("Notification not found", code="NOTIFICATION_NOT_FOUND")
        if notif.user_id != reader.id:
            raise Forbidden("Notification belongs to another user")
        return notif

    def mark_read(self, notification_id: int, reader: User) -> Notification:
        return self.notification_repository.mark_read(self._owned(notification_id, reader))

    def mark_all_read(self, reader: User) -> int:
        return self.notification_repository.mark_all_read(reader.id)

    def delete(self, notification_id: int, reader: User) -> None:
        self.notification_repository.delete(self._owned(notification_id, reader))

    def stats(self) -> dict:
        return self.notification_repository.stats()
