"""User profile and user administration routes"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from ...api.dependencies import get_current_user, get_unit_of_work, require_admin
from ...api.errors import DOMAIN_ERRORS, http_error, internal_error
from ...application.dtos.user_dtos import SuspendUserDto, UpdateProfileDto, UserDto, UserListResponse
from ...application.use_cases.user_admin import UserAdminUseCase
from ...domain.entities.user import User
from ...domain.enums import UserType
from ...domain.repositories.unit_of_work import IUnitOfWork

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/profile", response_model=UserDto)
async def get_profile(current_user: User = Depends(get_current_user)):
    return UserDto.from_entity(current_user)


@router.put("/profile", response_model=UserDto)
async def update_profile(
    request: UpdateProfileDto,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work)
):
    try:
        return await UserAdminUseCase(unit_of_work).update_profile(current_user, request)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Profile update failed")
        raise internal_error()


@router.get("/", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    user_type: Optional[UserType] = None,
    search: Optional[str] = None,
    admin: User = Depends(require_admin),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work)
):
    """List users (admin only), optionally matching email, company or name"""
    return await UserAdminUseCase(unit_of_work).list_users(page, limit, user_type, search)


@router.get("/{user_id}", response_model=UserDto)
async def get_user(
    user_id: UUID,
    admin: User = Depends(require_admin),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work)
):
    try:
        return await UserAdminUseCase(unit_of_work).get_user(user_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{user_id}/suspend", response_model=UserDto)
async def suspend_user(
    user_id: UUID,
    request: SuspendUserDto,
    admin: User = Depends(require_admin),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work)
):
    try:
        return await UserAdminUseCase(unit_of_work).suspend(user_id, request.reason, admin)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Suspending user %s failed", user_id)
        raise internal_error()


@router.post("/{user_id}/reactivate", response_model=UserDto)
async def reactivate_user(
    user_id: UUID,
    admin: User = Depends(require_admin),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work)
):
    try:
        return await UserAdminUseCase(unit_of_work).reactivate(user_id, admin)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Reactivating user %s failed", user_id)
        raise internal_error()
