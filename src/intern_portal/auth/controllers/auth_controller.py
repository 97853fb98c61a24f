from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from intern_portal.auth.dependencies import get_current_user, get_token_service
from intern_portal.auth.schemas.auth_schemas import (
    ChangePasswordRequest, LoginRequest, MessageResponse, ProfileUpdate, RegisterRequest, TokenResponse
)
from intern_portal.auth.services.auth_service import AuthService
from intern_portal.auth.services.token_service import TokenService
from intern_portal.database import get_db
from intern_portal.rate_limit.dependencies import client_ip, get_rate_limiters
from intern_portal.rate_limit.limiter import RateLimiters
from intern_portal.users.models.user import User, UserRole
from intern_portal.users.schemas.user_schemas import UserResponse

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
):
    """Self-service registration; always creates an intern account"""
    user = AuthService.create_user(db, data.full_name, data.email, data.password, UserRole.INTERN)
    token = token_service.issue(user.id, user.email, user.role)
    return TokenResponse(
        message="User registered successfully",
        access_token=token,
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=TokenResponse)
def login(
    login_data: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
    limiters: RateLimiters = Depends(get_rate_limiters),
):
    """Login; only failed attempts count against the per-IP limit"""
    ip = client_ip(request)
    limiters.auth.consume(ip)
    user, token = AuthService.login(
        db,
        token_service,
        login_data.email,
        login_data.password,
        ip_address=ip,
        user_agent=request.headers.get("user-agent"),
    )
    limiters.auth.refund(ip)
    return TokenResponse(
        message="Login successful",
        access_token=token,
        user=UserResponse.model_validate(user),
    )


@router.get("/profile", response_model=UserResponse)
def get_profile(current_user: User = Depends(get_current_user)):
    """Current user with intern profile"""
    return current_user


@router.put("/profile", response_model=UserResponse)
def update_profile(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return AuthService.update_profile(
        db,
        current_user,
        full_name=data.full_name,
        phone=data.phone,
        nationality=data.nationality,
        gender=data.gender,
        birthdate=data.birthdate,
    )


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    AuthService.change_password(db, current_user, data.current_password, data.new_password)
    return MessageResponse(message="Password changed successfully")


@router.post("/logout", response_model=MessageResponse)
def logout(current_user: User = Depends(get_current_user)):
    # Tokens are stateless; logout is acknowledged for the client's benefit.
    return MessageResponse(message="Logout successful")
