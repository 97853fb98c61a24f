from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import Boolean, Column, Integer, String, Text, DateTime, Enum, ForeignKey, JSON
from sqlalchemy.orm import relationship

from intern_portal.database import Base


def _values(enum_cls):
    return [member.value for member in enum_cls]


class NotificationType(PyEnum):
    DOCUMENT_UPLOADED = "document_uploaded"
    DOCUMENT_VERIFIED = "document_verified"
    DOCUMENT_REJECTED = "document_rejected"
    DOCUMENT_EXPIRED = "document_expired"
    BILL_DUE = "bill_due"
    SYSTEM_ANNOUNCEMENT = "system_announcement"
    HOUSING_UPDATE = "housing_update"


class NotificationPriority(PyEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Notification(Base):
    __tablename__ = 'notifications'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    intern_id = Column(Integer, ForeignKey('intern_profiles.intern_id'), nullable=True)
    type = Column(Enum(NotificationType, name="notification_type", values_callable=_values), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(
        Enum(NotificationPriority, name="notification_priority", values_callable=_values),
        nullable=False,
        default=NotificationPriority.MEDIUM,
    )
    data = Column(JSON, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="notifications")
    intern = relationship("InternProfile")
