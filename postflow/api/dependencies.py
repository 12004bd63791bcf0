"""API dependencies"""

import logging
from typing import Any, Dict
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..core.security import ACCESS, decode_token
from ..db.database import get_db
from ..domain.entities.user import User
from ..domain.enums import ImpersonationStatus
from ..domain.repositories.unit_of_work import IUnitOfWork
from ..domain.value_objects.entity_ids import UserId
from ..infrastructure.repositories.unit_of_work_impl import UnitOfWorkImpl
from ..infrastructure.external_services.email_service import EmailService
from ..infrastructure.external_services.payment_service import PaymentService
from ..infrastructure.orm.user_model import ImpersonationLogModel
from ..infrastructure.orm.website_model import PublisherModel
from ..application.services.websites import PublisherService

logger = logging.getLogger(__name__)

security = HTTPBearer()


def _unauthorized(detail: str = "Invalid token") -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


async def get_token_claims(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """Decode the bearer access token; ended impersonation sessions are rejected"""
    claims = decode_token(credentials.credentials)
    if not claims or claims.get("type") != ACCESS or not claims.get("sub"):
        raise _unauthorized()

    if claims.get("imp_log"):
        log = db.get(ImpersonationLogModel, UUID(claims["imp_log"]))
        if not log or log.status != ImpersonationStatus.ACTIVE.value:
            raise _unauthorized("Impersonation session has ended")
    return claims


async def get_current_user(
    claims: Dict[str, Any] = Depends(get_token_claims),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    try:
        user_id = UserId.parse(claims["sub"])
    except ValueError:
        raise _unauthorized()

    unit_of_work = UnitOfWorkImpl(db)
    async with unit_of_work:
        user = await unit_of_work.users.get_by_id(user_id)

    if not user:
        raise _unauthorized("User not found")
    if user.is_suspended:
        raise _unauthorized("Account is suspended")
    return user


async def require_internal(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_internal:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Internal access required")
    return current_user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Get current admin user"""
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


async def require_publisher(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_publisher:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Publisher access required")
    return current_user


async def get_current_publisher(
    current_user: User = Depends(require_publisher),
    db: Session = Depends(get_db)
) -> PublisherModel:
    """Publisher profile of the signed-in publisher user, created on first use"""
    return PublisherService(db).get_or_create_profile(current_user)


def get_unit_of_work(db: Session = Depends(get_db)) -> IUnitOfWork:
    """Get unit of work"""
    return UnitOfWorkImpl(db)


def get_payment_service() -> PaymentService:
    """Get payment service"""
    return PaymentService()


def get_email_service() -> EmailService:
    """Get email service"""
    return EmailService()
