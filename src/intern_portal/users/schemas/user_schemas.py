from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from intern_portal.pagination import Pagination
from intern_portal.users.models.user import UserRole

Gender = Literal["Male", "Female", "Other"]


class InternProfileResponse(BaseModel):
    intern_id: int
    name: str
    email: str
    nationality: Optional[str] = None
    gender: Optional[str] = None
    birthdate: Optional[date] = None
    phone: Optional[str] = None

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    id: int
    full_name: str
    email: str
    role: UserRole
    is_active: bool
    created_at: datetime
    intern_profile: Optional[InternProfileResponse] = None

    model_config = {"from_attributes": True}


class UserCreate(BaseModel):
    full_name: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=6)
    role: UserRole


class RoleUpdate(BaseModel):
    role: UserRole


class InternProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    phone: Optional[str] = None
    nationality: Optional[str] = Field(None, min_length=2)
    gender: Optional[Gender] = None
    birthdate: Optional[date] = None


class SessionRecordResponse(BaseModel):
    id: int
    user_id: int
    email: str
    login_time: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    session_id: str

    model_config = {"from_attributes": True}


class UserDetailResponse(UserResponse):
    recent_sessions: List[SessionRecordResponse] = []


class UserListResponse(BaseModel):
    users: List[UserResponse]
    pagination: Pagination


class SessionListResponse(BaseModel):
    sessions: List[SessionRecordResponse]
    pagination: Pagination


class UserMessageResponse(BaseModel):
    message: str
    user: UserResponse
