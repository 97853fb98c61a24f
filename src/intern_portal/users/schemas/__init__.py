from .user_schemas import (
    InternProfileResponse, UserResponse, UserCreate, RoleUpdate, InternProfileUpdate,
    SessionRecordResponse, UserDetailResponse, UserListResponse, SessionListResponse,
    UserMessageResponse
)

__all__ = [
    'InternProfileResponse', 'UserResponse', 'UserCreate', 'RoleUpdate', 'InternProfileUpdate',
    'SessionRecordResponse', 'UserDetailResponse', 'UserListResponse', 'SessionListResponse',
    'UserMessageResponse'
]
