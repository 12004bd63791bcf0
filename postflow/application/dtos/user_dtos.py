"""User DTOs for API layer"""

from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional
from datetime import datetime
from uuid import UUID


class CreateUserDto(BaseModel):
    """DTO for user registration"""
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None
    user_type: Literal["account", "publisher", "internal"] = "account"


class LoginUserDto(BaseModel):
    """DTO for user login"""
    email: EmailStr
    password: str


class ForgotPasswordDto(BaseModel):
    """DTO for forgot password request"""
    email: EmailStr


class ForgotPasswordResponse(BaseModel):
    """DTO for forgot password response"""
    message: str
    success: bool = True


class ResetPasswordDto(BaseModel):
    """DTO for reset password request"""
    token: str
    new_password: str = Field(..., min_length=8)


class VerifyEmailDto(BaseModel):
    """DTO for email verification request"""
    token: str


class RefreshTokenDto(BaseModel):
    """DTO for refresh token request"""
    refresh_token: str


class UserDto(BaseModel):
    """DTO for user response"""
    id: UUID
    email: str
    user_type: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None
    status: str
    role: str
    email_verified: bool
    created_at: datetime
    last_login: Optional[datetime] = None

    @classmethod
    def from_entity(cls, user) -> "UserDto":
        return cls(
            id=user.id.value,
            email=str(user.email),
            user_type=user.user_type.value,
            first_name=user.first_name,
            last_name=user.last_name,
            company_name=user.company_name,
            status=user.status.value,
            role=user.role.value,
            email_verified=user.email_verified,
            created_at=user.created_at,
            last_login=user.last_login,
        )


class TokenDto(BaseModel):
    """DTO for authentication tokens"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AccessTokenDto(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    """User response with token"""
    user: UserDto
    tokens: TokenDto


class ImpersonationInfo(BaseModel):
    admin_user_id: UUID
    session_id: UUID


class MeResponse(BaseModel):
    user: UserDto
    impersonation: Optional[ImpersonationInfo] = None


class UserListResponse(BaseModel):
    users: list[UserDto]
    total: int
    page: int
    limit: int


class UpdateProfileDto(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None


class SuspendUserDto(BaseModel):
    reason: str = Field(..., min_length=1)


class ImpersonationStartDto(BaseModel):
    target_user_id: UUID
    reason: str = Field(..., min_length=1)


class ImpersonationTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    session_id: UUID
    target_user_id: UUID
    target_user_type: str


class ImpersonationLogDto(BaseModel):
    id: UUID
    admin_user_id: UUID
    target_user_id: UUID
    target_user_type: str
    reason: str
    status: str
    ip_address: Optional[str] = None
    started_at: datetime
    ended_at: Optional[datetime] = None

    class Config:
        from_attributes = True
