from datetime import date
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from intern_portal.users.schemas.user_schemas import Gender, UserResponse


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    full_name: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=6)


class TokenResponse(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2)
    phone: Optional[str] = None
    nationality: Optional[str] = Field(None, min_length=2)
    gender: Optional[Gender] = None
    birthdate: Optional[date] = None


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)


class MessageResponse(BaseModel):
    message: str
