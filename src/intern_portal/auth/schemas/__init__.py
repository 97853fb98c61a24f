from .auth_schemas import (
    LoginRequest, RegisterRequest, TokenResponse, ProfileUpdate,
    ChangePasswordRequest, MessageResponse
)

__all__ = [
    'LoginRequest', 'RegisterRequest', 'TokenResponse', 'ProfileUpdate',
    'ChangePasswordRequest', 'MessageResponse'
]
