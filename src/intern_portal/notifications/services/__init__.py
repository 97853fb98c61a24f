from .notification_service import (
    NotificationDispatcher, NotificationTemplate,
    DocumentUploadedNotification, DocumentStatusChangedNotification
)

__all__ = [
    'NotificationDispatcher', 'NotificationTemplate',
    'DocumentUploadedNotification', 'DocumentStatusChangedNotification'
]
