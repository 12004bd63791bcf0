"""Account credit routes"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ...api.dependencies import get_current_user, require_admin, require_internal
from ...api.errors import DOMAIN_ERRORS, http_error, internal_error
from ...application.dtos.credit_dtos import (
    ApplyCreditsDTO, ApplyCreditsResponse, CreditBalanceDTO, CreditDTO, CreditGrantDTO, CreditTransactionDTO,
)
from ...application.services.credits_wallet import CreditsWalletService
from ...db.database import get_db
from ...domain.entities.user import User

logger = logging.getLogger(__name__)

router = APIRouter()


class CreditRefundDTO(BaseModel):
    account_id: UUID
    reason: str = Field(..., min_length=1)


def _require_account(user: User) -> None:
    if not user.is_account:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account access required")


@router.post("/grant", response_model=CreditDTO, status_code=status.HTTP_201_CREATED)
async def grant_credit(
    request: CreditGrantDTO,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        return CreditsWalletService(db).grant(granted_by=admin.id.value, **request.model_dump())
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Granting credit failed")
        raise internal_error()


@router.get("/balance", response_model=CreditBalanceDTO)
async def my_balance(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    _require_account(current_user)
    return CreditsWalletService(db).balance(current_user.id.value)


@router.get("/accounts/{account_id}/balance", response_model=CreditBalanceDTO)
async def account_balance(
    account_id: UUID,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    return CreditsWalletService(db).balance(account_id)


@router.post("/apply", response_model=ApplyCreditsResponse)
async def apply_credits(
    request: ApplyCreditsDTO,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Spend the caller's credits on one of their unpaid orders"""
    _require_account(current_user)
    try:
        return CreditsWalletService(db).apply_to_order(current_user.id.value, request.order_id, request.max_amount)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Applying credits to order %s failed", request.order_id)
        raise internal_error()


@router.get("/transactions", response_model=List[CreditTransactionDTO])
async def my_transactions(
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    _require_account(current_user)
    return CreditsWalletService(db).transactions(current_user.id.value, limit)


@router.post("/orders/{order_id}/refund")
async def refund_order_credits(
    order_id: UUID,
    request: CreditRefundDTO,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Return the credits spent on an order"""
    refunded = CreditsWalletService(db).refund_order_credits(request.account_id, order_id, request.reason)
    return {"order_id": order_id, "refunded": refunded}
