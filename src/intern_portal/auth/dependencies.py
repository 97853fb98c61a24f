from datetime import timedelta

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from intern_portal.auth.services.authorizer import RoleAuthorizer
from intern_portal.auth.services.gateway import AuthGateway
from intern_portal.auth.services.token_service import TokenService
from intern_portal.config import Settings, get_settings
from intern_portal.database import get_db
from intern_portal.users.models.user import User, UserRole


def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return TokenService(
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        expires_delta=timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    )


def get_current_user(
    authorization: str = Header(None),
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
) -> User:
    """Dependency resolving the authenticated user from the bearer token"""
    return AuthGateway(db, token_service).authenticate(authorization)


def require_roles(*roles: UserRole):
    allowed = frozenset(roles)

    def dependency(current_user: User = Depends(get_current_user)):
        return RoleAuthorizer.require(current_user, allowed)
    return dependency


def require_capability(capability: str):
    return require_roles(*RoleAuthorizer.roles_for(capability))
