import pytest

from intern_portal.auth.services.authorizer import RoleAuthorizer
from intern_portal.auth.services.gateway import AuthGateway
from intern_portal.errors import Forbidden, PrincipalNotFound, TokenInvalid, Unauthenticated
from intern_portal.users.models import UserRole
from intern_portal.users.services import UserService


@pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer", "Bearer   "])
def test_extract_token_requires_bearer_scheme(header):
    with pytest.raises(Unauthenticated) as exc:
        AuthGateway.extract_token(header)
    assert exc.value.code == "NO_TOKEN"


def test_extract_token():
    assert AuthGateway.extract_token("Bearer abc.def") == "abc.def"
    assert AuthGateway.extract_token("bearer abc.def") == "abc.def"


def test_authenticate_loads_current_user(db, token_service, intern):
    token = token_service.issue(intern.id, intern.email, intern.role)

    user = AuthGateway(db, token_service).authenticate(f"Bearer {token}")

    assert user.id == intern.id
    assert user.intern_id == intern.intern_profile.intern_id


def test_authenticate_unknown_user(db, token_service):
    token = token_service.issue(999, "ghost@example.com", UserRole.HR)

    with pytest.raises(PrincipalNotFound) as exc:
        AuthGateway(db, token_service).authenticate(f"Bearer {token}")
    assert exc.value.code == "USER_NOT_FOUND"


def test_authenticate_deactivated_user(db, token_service, admin, hr):
    token = token_service.issue(hr.id, hr.email, hr.role)
    UserService.deactivate(db, admin, hr.id)

    with pytest.raises(PrincipalNotFound):
        AuthGateway(db, token_service).authenticate(f"Bearer {token}")


def test_authenticate_rejects_tampered_token(db, token_service, intern):
    token = token_service.issue(intern.id, intern.email, intern.role)

    with pytest.raises(TokenInvalid):
        AuthGateway(db, token_service).authenticate(f"Bearer {token[:-2]}xx")


def test_require_passes_allowed_role(hr):
    assert RoleAuthorizer.require(hr, {UserRole.HR, UserRole.SUPER_ADMIN}) is hr


def test_require_rejects_other_roles(intern):
    with pytest.raises(Forbidden) as exc:
        RoleAuthorizer.require(intern, {UserRole.HR, UserRole.SUPER_ADMIN})
    assert exc.value.code == "INSUFFICIENT_ROLE"
    assert exc.value.status_code == 403


@pytest.mark.parametrize("capability,role,allowed", [
    ("upload", UserRole.INTERN, True),
    ("upload", UserRole.HR, False),
    ("review", UserRole.HR, True),
    ("review", UserRole.INTERN, False),
    ("view_all", UserRole.SUPER_ADMIN, True),
    ("manage_users", UserRole.HR, False),
    ("purge", UserRole.SUPER_ADMIN, True),
])
def test_capabilities(make_user, capability, role, allowed):
    user = make_user(role)
    assert RoleAuthorizer.allows(user, RoleAuthorizer.roles_for(capability)) is allowed


def test_unknown_capability():
    with pytest.raises(ValueError):
        RoleAuthorizer.roles_for("launch_rockets")
