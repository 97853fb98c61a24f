from typing import Optional

from sqlalchemy.orm import Session, joinedload

from intern_portal.auth.services.token_service import TokenService
from intern_portal.errors import PrincipalNotFound, Unauthenticated
from intern_portal.users.models.user import User


class AuthGateway:
    """Turns a raw Authorization header into the current User row."""

    def __init__(self, session: Session, token_service: TokenService):
        self.session = session
        self.token_service = token_service

    @staticmethod
    def extract_token(authorization: Optional[str]) -> str:
        if not authorization:
            raise Unauthenticated()
        scheme, _, token = authorization.partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            raise Unauthenticated()
        return token

    def authenticate(self, authorization: Optional[str]) -> User:
        token = self.extract_token(authorization)
        principal = self.token_service.verify(token)

        user = (
            self.session.query(User)
            .options(joinedload(User.intern_profile))
            .filter(User.id == principal.id)
            .first()
        )
        # Deactivated accounts keep their row but must not authenticate.
        if user is None or not user.is_active:
            raise PrincipalNotFound()
        return user
