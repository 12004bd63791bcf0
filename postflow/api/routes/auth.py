"""Authentication routes"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from ...api.dependencies import get_current_user, get_email_service, get_token_claims, get_unit_of_work
from ...api.errors import internal_error
from ...application.use_cases.register_user import RegisterUserUseCase
from ...application.use_cases.login_user import LoginUserUseCase
from ...application.use_cases.refresh_token import RefreshTokenUseCase
from ...application.use_cases.forgot_password import ForgotPasswordUseCase, RESET_MESSAGE
from ...application.use_cases.reset_password import ResetPasswordUseCase
from ...application.use_cases.email_verification import EmailVerificationUseCase
from ...application.dtos.user_dtos import (
    AccessTokenDto, CreateUserDto, ForgotPasswordDto, ForgotPasswordResponse, ImpersonationInfo,
    LoginUserDto, MeResponse, RefreshTokenDto, ResetPasswordDto, UserDto, UserResponse, VerifyEmailDto,
)
from ...domain.entities.user import User
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...infrastructure.external_services.email_service import EmailService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: CreateUserDto,
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    email_service: EmailService = Depends(get_email_service)
):
    """Register a new account or publisher user"""
    use_case = RegisterUserUseCase(unit_of_work, email_service)
    try:
        return await use_case.execute(user_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Registration failed")
        raise internal_error()


@router.post("/login", response_model=UserResponse)
async def login_user(
    login_data: LoginUserDto,
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work)
):
    """Login user"""
    use_case = LoginUserUseCase(unit_of_work)
    try:
        return await use_case.execute(login_data)
    except ValueError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except Exception:
        logger.exception("Login failed")
        raise internal_error()


@router.post("/refresh", response_model=AccessTokenDto)
async def refresh_token(
    request: RefreshTokenDto,
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work)
):
    """Refresh access token"""
    use_case = RefreshTokenUseCase(unit_of_work)
    try:
        return await use_case.execute(request)
    except ValueError as e:
        raise HTTPException(status_code=401, detail=str(e))


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
async def forgot_password(
    request: ForgotPasswordDto,
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    email_service: EmailService = Depends(get_email_service)
):
    """Handle forgot password request"""
    use_case = ForgotPasswordUseCase(unit_of_work, email_service)
    try:
        return await use_case.execute(request)
    except Exception:
        logger.exception("Forgot password request failed")
        return ForgotPasswordResponse(message=RESET_MESSAGE)


@router.post("/reset-password", response_model=ForgotPasswordResponse)
async def reset_password(
    request: ResetPasswordDto,
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work)
):
    """Reset password with token"""
    use_case = ResetPasswordUseCase(unit_of_work)
    try:
        return await use_case.execute(request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Password reset failed")
        raise internal_error()


@router.post("/verify-email")
async def verify_email(
    request: VerifyEmailDto,
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work)
):
    """Verify user email with token"""
    use_case = EmailVerificationUseCase(unit_of_work)
    try:
        await use_case.execute(request)
        return {"message": "Email verified successfully", "success": True}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Email verification failed")
        raise internal_error()


@router.get("/me", response_model=MeResponse)
async def me(
    current_user: User = Depends(get_current_user),
    claims: Dict[str, Any] = Depends(get_token_claims)
):
    """Current identity, including who is impersonating it"""
    impersonation = None
    if claims.get("imp"):
        impersonation = ImpersonationInfo(admin_user_id=claims["imp"], session_id=claims["imp_log"])
    return MeResponse(user=UserDto.from_entity(current_user), impersonation=impersonation)
