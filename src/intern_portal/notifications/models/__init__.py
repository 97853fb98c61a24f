from .notification import Notification, NotificationType, NotificationPriority

__all__ = ['Notification', 'NotificationType', 'NotificationPriority']
