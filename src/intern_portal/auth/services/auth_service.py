import logging
from datetime import date
from typing import Optional, Tuple

from passlib.context import CryptContext
from sqlalchemy.orm import Session, joinedload

from intern_portal.auth.services.token_service import TokenService
from intern_portal.errors import Conflict, InvalidCredentials
from intern_portal.users.models import InternProfile, SessionRecord, User, UserRole

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

SESSION_ID_LENGTH = 32


class AuthService:

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Check a plain password against its stored hash"""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def get_password_hash(password: str) -> str:
        """Hash a password for storage"""
        return pwd_context.hash(password)

    @staticmethod
    def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
        """Return the active user matching email and password, or None"""
        user = (
            db.query(User)
            .options(joinedload(User.intern_profile))
            .filter(User.email == email.lower())
            .first()
        )
        if not user:
            return None
        if not AuthService.verify_password(password, user.password_hash):
            return None
        if not user.is_active:
            return None
        return user

    @staticmethod
    def create_user(db: Session, full_name: str, email: str, password: str, role: UserRole) -> User:
        """Create a user; interns get their profile row in the same commit."""
        email = email.lower()
        if db.query(User).filter(User.email == email).first():
            raise Conflict("User already exists", code="USER_EXISTS")

        user = User(
            full_name=full_name,
            email=email,
            password_hash=AuthService.get_password_hash(password),
            role=role,
            is_active=True,
        )
        if role == UserRole.INTERN:
            user.intern_profile = InternProfile(name=full_name, email=email)

        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Created %s account %s", role.value, email)
        return user

    @staticmethod
    def login(
        db: Session,
        token_service: TokenService,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[User, str]:
        user = AuthService.authenticate_user(db, email, password)
        if user is None:
            logger.warning("Failed login for %s from %s", email, ip_address)
            raise InvalidCredentials()

        token = token_service.issue(user.id, user.email, user.role)
        db.add(SessionRecord(
            user_id=user.id,
            email=user.email,
            ip_address=ip_address,
            user_agent=user_agent or "Unknown",
            session_id=token[-SESSION_ID_LENGTH:],
        ))
        db.commit()
        return user, token

    @staticmethod
    def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
        if not AuthService.verify_password(current_password, user.password_hash):
            raise InvalidCredentials("Current password is incorrect", code="INVALID_PASSWORD")
        user.password_hash = AuthService.get_password_hash(new_password)
        db.commit()

    @staticmethod
    def update_profile(
        db: Session,
        user: User,
        full_name: Optional[str] = None,
        phone: Optional[str] = None,
        nationality: Optional[str] = None,
        gender: Optional[str] = None,
        birthdate: Optional[date] = None,
    ) -> User:
        if full_name:
            user.full_name = full_name

        profile = user.intern_profile
        if user.role == UserRole.INTERN and profile is not None:
            update_data = {
                "name": full_name,
                "phone": phone,
                "nationality": nationality,
                "gender": gender,
                "birthdate": birthdate,
            }
            for field, value in update_data.items():
                if value is not None:
                    setattr(profile, field, value)

        db.commit()
        db.refresh(user)
        return user
