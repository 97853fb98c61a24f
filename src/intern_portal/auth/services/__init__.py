from .auth_service import AuthService
from .authorizer import RoleAuthorizer, CAPABILITIES
from .gateway import AuthGateway
from .token_service import TokenService, TokenPrincipal

__all__ = [
    'AuthService', 'RoleAuthorizer', 'CAPABILITIES', 'AuthGateway',
    'TokenService', 'TokenPrincipal'
]
