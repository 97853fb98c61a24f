import time
from datetime import timedelta

import pytest
from jose import jwt

from intern_portal.auth.services.token_service import TokenPrincipal, TokenService
from intern_portal.errors import ConfigError, TokenExpired, TokenInvalid
from intern_portal.users.models import UserRole

SECRET = "unit-test-secret"


def test_issue_and_verify_returns_principal():
    service = TokenService(SECRET)
    token = service.issue(7, "ana@example.com", UserRole.HR)

    principal = service.verify(token)

    assert principal == TokenPrincipal(id=7, email="ana@example.com", role=UserRole.HR)


def test_missing_secret_is_a_config_error():
    with pytest.raises(ConfigError):
        TokenService(None)
    with pytest.raises(ConfigError):
        TokenService("")


def test_token_signed_with_other_secret_is_invalid():
    token = TokenService("another-secret").issue(1, "a@example.com", UserRole.INTERN)

    with pytest.raises(TokenInvalid) as exc:
        TokenService(SECRET).verify(token)
    assert exc.value.code == "INVALID_TOKEN"
    assert exc.value.status_code == 401


def test_garbage_token_is_invalid():
    with pytest.raises(TokenInvalid):
        TokenService(SECRET).verify("not-a-token")


def test_expired_token():
    service = TokenService(SECRET, expires_delta=timedelta(seconds=-10))
    token = service.issue(1, "a@example.com", UserRole.INTERN)

    with pytest.raises(TokenExpired) as exc:
        service.verify(token)
    assert exc.value.code == "TOKEN_EXPIRED"


def test_token_with_unknown_role_is_invalid():
    token = jwt.encode({"sub": "1", "email": "a@example.com", "role": "janitor"}, SECRET, algorithm="HS256")

    with pytest.raises(TokenInvalid):
        TokenService(SECRET).verify(token)


def test_default_expiry_is_seven_days():
    token = TokenService(SECRET).issue(1, "a@example.com", UserRole.INTERN)

    claims = jwt.get_unverified_claims(token)
    assert abs(claims["exp"] - (time.time() + 7 * 24 * 3600)) < 60
