import logging
import time
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from intern_portal.errors import NotFound, ValidationFailed
from intern_portal.users.models import InternProfile, SessionRecord, User, UserRole

logger = logging.getLogger(__name__)


class UserService:

    @staticmethod
    def get_user(db: Session, user_id: int) -> User:
        user = (
            db.query(User)
            .options(joinedload(User.intern_profile))
            .filter(User.id == user_id)
            .first()
        )
        if not user:
            raise NotFound("User not found", code="USER_NOT_FOUND")
        return user

    @staticmethod
    def list_users(
        db: Session,
        offset: int = 0,
        limit: int = 20,
        role: Optional[UserRole] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[User], int]:
        query = db.query(User).options(joinedload(User.intern_profile))
        if role is not None:
            query = query.filter(User.role == role)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(User.full_name.ilike(pattern), User.email.ilike(pattern)))

        total = query.count()
        users = query.order_by(User.created_at.desc(), User.id.desc()).offset(offset).limit(limit).all()
        return users, total

    @staticmethod
    def change_role(db: Session, actor: User, user_id: int, role: UserRole) -> User:
        if user_id == actor.id:
            raise ValidationFailed("Cannot change your own role", code="CANNOT_CHANGE_OWN_ROLE")
        user = UserService.get_user(db, user_id)
        previous = user.role
        user.role = role
        db.commit()
        db.refresh(user)
        logger.info("User %s role changed from %s to %s by %s", user.id, previous.value, role.value, actor.id)
        return user

    @staticmethod
    def list_sessions(db: Session, user_id: int, offset: int = 0, limit: int = 20) -> Tuple[List[SessionRecord], int]:
        query = db.query(SessionRecord).filter(SessionRecord.user_id == user_id)
        total = query.count()
        sessions = query.order_by(SessionRecord.login_time.desc()).offset(offset).limit(limit).all()
        return sessions, total

    @staticmethod
    def recent_sessions(db: Session, user_id: int, limit: int = 5) -> List[SessionRecord]:
        return UserService.list_sessions(db, user_id, 0, limit)[0]

    @staticmethod
    def deactivate(db: Session, actor: User, user_id: int) -> User:
        """Retire an account without deleting its row.

        The email gets a unique suffix so the address can register again.
        """
        if user_id == actor.id:
            raise ValidationFailed("Cannot delete your own account", code="CANNOT_DELETE_OWN_ACCOUNT")
        user = UserService.get_user(db, user_id)
        if not user.is_active:
            return user

        user.email = f"{user.email}.deactivated.{int(time.time() * 1000)}"
        user.full_name = f"{user.full_name} (Deactivated)"
        user.is_active = False
        db.commit()
        db.refresh(user)
        logger.info("User %s deactivated by %s", user.id, actor.id)
        return user

    @staticmethod
    def get_intern_profile(db: Session, intern_id: int) -> InternProfile:
        profile = db.get(InternProfile, intern_id)
        if profile is None:
            raise NotFound("Intern details not found", code="INTERN_NOT_FOUND")
        return profile

    @staticmethod
    def update_intern_profile(
        db: Session,
        intern_id: int,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        nationality: Optional[str] = None,
        gender: Optional[str] = None,
        birthdate: Optional[date] = None,
    ) -> InternProfile:
        profile = UserService.get_intern_profile(db, intern_id)
        update_data = {
            "name": name,
            "phone": phone,
            "nationality": nationality,
            "gender": gender,
            "birthdate": birthdate,
        }
        for field, value in update_data.items():
            if value is not None:
                setattr(profile, field, value)
        db.commit()
        db.refresh(profile)
        return profile
