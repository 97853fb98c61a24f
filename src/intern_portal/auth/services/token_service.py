from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from intern_portal.errors import ConfigError, TokenExpired, TokenInvalid
from intern_portal.users.models.user import UserRole

DEFAULT_EXPIRY = timedelta(days=7)


@dataclass(frozen=True)
class TokenPrincipal:
    id: int
    email: str
    role: UserRole


class TokenService:
    """Issues and verifies signed session tokens.

    The signing secret is injected; there is no fallback. A missing secret is
    a deployment error and is reported as ``ConfigError`` at construction.
    """

    def __init__(self, secret: Optional[str], algorithm: str = "HS256",
                 expires_delta: timedelta = DEFAULT_EXPIRY):
        if not secret:
            raise ConfigError("JWT_SECRET is not configured", code="MISSING_JWT_SECRET")
        self._secret = secret
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    def issue(self, user_id: int, email: str, role: UserRole) -> str:
        expire = datetime.utcnow() + self.expires_delta
        to_encode = {
            "sub": str(user_id),
            "email": email,
            "role": role.value,
            "exp": expire,
        }
        return jwt.encode(to_encode, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenPrincipal:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpired() from e
        except JWTError as e:
            raise TokenInvalid() from e

        try:
            return TokenPrincipal(
                id=int(payload["sub"]),
                email=payload["email"],
                role=UserRole(payload["role"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise TokenInvalid() from e
