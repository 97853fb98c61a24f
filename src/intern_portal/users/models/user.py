from sqlalchemy import Column, Integer, String, Enum, DateTime, Boolean
from sqlalchemy.orm import relationship
from enum import Enum as PyEnum
from datetime import datetime
from intern_portal.database import Base


class UserRole(PyEnum):
    INTERN = "intern"
    HR = "hr"
    SUPER_ADMIN = "super_admin"


STAFF_ROLES = frozenset({UserRole.HR, UserRole.SUPER_ADMIN})


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    full_name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.INTERN,
    )

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    intern_profile = relationship("InternProfile", back_populates="user", uselist=False)

    notifications = relationship(
        "Notification",
        back_populates="user",
        cascade="all, delete-orphan"
    )

    session_records = relationship(
        "SessionRecord",
        back_populates="user",
        order_by="SessionRecord.login_time.desc()"
    )

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def intern_id(self):
        return self.intern_profile.intern_id if self.intern_profile else None
