from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from intern_portal.auth.dependencies import require_capability, require_roles
from intern_portal.auth.schemas.auth_schemas import MessageResponse
from intern_portal.auth.services.auth_service import AuthService
from intern_portal.database import get_db
from intern_portal.pagination import Pagination, offset_for
from intern_portal.users.models.user import User, UserRole
from intern_portal.users.schemas.user_schemas import (
    InternProfileResponse, InternProfileUpdate, RoleUpdate, SessionListResponse, SessionRecordResponse,
    UserCreate, UserDetailResponse, UserListResponse, UserMessageResponse, UserResponse
)
from intern_portal.users.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])

manage_users = require_capability("manage_users")
staff_only = require_roles(UserRole.HR, UserRole.SUPER_ADMIN)


@router.get("", response_model=UserListResponse)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    role: Optional[UserRole] = Query(None, description="Filter by role"),
    search: Optional[str] = Query(None, min_length=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(manage_users),
):
    users, total = UserService.list_users(db, offset_for(page, limit), limit, role, search)
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(manage_users),
):
    """Create an account of any role (super admins only)"""
    return AuthService.create_user(db, user_data.full_name, user_data.email, user_data.password, user_data.role)


@router.put("/interns/{intern_id}/profile", response_model=InternProfileResponse)
def update_intern_profile(
    intern_id: int,
    data: InternProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_only),
):
    return UserService.update_intern_profile(
        db,
        intern_id,
        name=data.name,
        phone=data.phone,
        nationality=data.nationality,
        gender=data.gender,
        birthdate=data.birthdate,
    )


@router.get("/{user_id}", response_model=UserDetailResponse)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_only),
):
    user = UserService.get_user(db, user_id)
    detail = UserDetailResponse.model_validate(user)
    detail.recent_sessions = [
        SessionRecordResponse.model_validate(s) for s in UserService.recent_sessions(db, user.id)
    ]
    return detail


@router.put("/{user_id}/role", response_model=UserMessageResponse)
def update_role(
    user_id: int,
    data: RoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(manage_users),
):
    user = UserService.change_role(db, current_user, user_id, data.role)
    return UserMessageResponse(message="User role updated successfully", user=UserResponse.model_validate(user))


@router.get("/{user_id}/sessions", response_model=SessionListResponse)
def list_sessions(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(manage_users),
):
    sessions, total = UserService.list_sessions(db, user_id, offset_for(page, limit), limit)
    return SessionListResponse(
        sessions=[SessionRecordResponse.model_validate(s) for s in sessions],
        pagination=Pagination.build(page, limit, total),
    )


@router.delete("/{user_id}", response_model=MessageResponse)
def deactivate_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(manage_users),
):
    UserService.deactivate(db, current_user, user_id)
    return MessageResponse(message="User deactivated successfully")
